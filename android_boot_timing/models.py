"""
Data models for the correlators.

Records are frozen once emitted. The only record that changes after it is
created is ServiceRecord, which is replaced (never mutated) when its exit
line arrives.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Dict, Optional


# ---------------------------------------------------------------------------
# Pattern models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinePattern:
    """A whole-line regex for one kind of log record."""
    name: str                 # Pattern identifier (e.g., "START_SERVICE")
    regex: re.Pattern         # Compiled regex, matched with fullmatch()
    kind: str = ""            # Record kind this pattern produces


@dataclass(frozen=True)
class LineMatch:
    """Result of classifying one line: the winning pattern and its captures."""
    pattern: LinePattern
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.pattern.name

    def __getitem__(self, key: str) -> str:
        return self.fields[key]


# ---------------------------------------------------------------------------
# dmesg records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ServiceRecord:
    """An init service start, optionally closed by its exit line."""
    name: str
    start_time_ms: int
    end_time_ms: Optional[int] = None   # None while the service is open

    @property
    def is_open(self) -> bool:
        return self.end_time_ms is None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.end_time_ms is None:
            return None
        return self.end_time_ms - self.start_time_ms

    def close(self, end_time_ms: int) -> "ServiceRecord":
        """Return the closed copy of this record. Closed records stay closed."""
        if not self.is_open:
            return self
        return replace(self, end_time_ms=end_time_ms)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "start_time_ms": self.start_time_ms,
            "end_time_ms": self.end_time_ms,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class StageRecord:
    """Start of an init boot stage ("first", "second", ...)."""
    stage_name: str
    start_time_ms: int

    def to_dict(self) -> dict:
        return {
            "stage_name": self.stage_name,
            "start_time_ms": self.start_time_ms,
        }


@dataclass(frozen=True)
class ActionRecord:
    """Start of an init action (property-trigger actions excluded)."""
    action_name: str
    start_time_ms: int

    def to_dict(self) -> dict:
        return {
            "action_name": self.action_name,
            "start_time_ms": self.start_time_ms,
        }


# ---------------------------------------------------------------------------
# Events log records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransitionRecord:
    """
    Launch delay attributed to one activity component.

    Exactly one of the two delays is measured; the other holds -1.
    """
    component_name: str
    starting_window_delay_ms: int = -1   # cold launch
    transition_delay_ms: int = -1        # hot launch

    @property
    def is_cold_launch(self) -> bool:
        return self.starting_window_delay_ms >= 0

    def to_dict(self) -> dict:
        return {
            "component_name": self.component_name,
            "starting_window_delay_ms": self.starting_window_delay_ms,
            "transition_delay_ms": self.transition_delay_ms,
        }


@dataclass(frozen=True)
class LatencyRecord:
    """One sysui_latency sample."""
    action_id: int
    delay_ms: int

    def to_dict(self) -> dict:
        return {"action_id": self.action_id, "delay_ms": self.delay_ms}


# ---------------------------------------------------------------------------
# Logcat timing records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimingRecord:
    """A system service timing metric; either a duration or a start time."""
    component: str            # log tag, e.g. "SystemServerTiming"
    subcomponent: str         # metric name, e.g. "StartWatchdog"
    duration_ms: Optional[float] = None
    start_time_ms: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "component": self.component,
            "subcomponent": self.subcomponent,
            "duration_ms": self.duration_ms,
            "start_time_ms": self.start_time_ms,
        }
