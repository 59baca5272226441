"""
Events log correlators — activity launch delays and sysui latency samples.

TransitionDelayCorrelator pairs activity launch events with the delay
event that follows them. Pending launches are kept on a stack (LIFO) and
each delay event consumes the most recent one.

LatencyCorrelator is stateless: every sysui_latency line is a record.
"""

import enum
import logging
from typing import Iterable, List, Optional, Tuple

from .constants import NOT_MEASURED
from .models import LatencyRecord, TransitionRecord
from .patterns import (
    ACTIVITY_RESTART,
    ACTIVITY_RESUME,
    LATENCY_PATTERNS,
    STARTING_WINDOW_DELAY,
    TRANSITION_DELAY,
    TRANSITION_PATTERNS,
    classify,
)
from .utils import capture_int, iter_lines

logger = logging.getLogger(__name__)


class LaunchPhase(enum.Enum):
    """Where the transition state machine stands after the last event."""
    IDLE = "idle"                                # no launch pending
    AWAITING_DELAY = "awaiting_delay"            # launch pending, no cold launch since it
    COLD_LAUNCH_EMITTED = "cold_launch_emitted"  # starting-window record emitted


class LaunchTracker:
    """
    State machine behind TransitionDelayCorrelator.

    Transitions:
        launch                    -> push component, AWAITING_DELAY
        starting window delay     -> pop (if any), COLD_LAUNCH_EMITTED
        transition delay          -> pop (if any and not COLD_LAUNCH_EMITTED),
                                     AWAITING_DELAY or IDLE

    Only a launch leaves COLD_LAUNCH_EMITTED. A cold launch logs a starting
    window delay followed by a transition delay for the same launch; the
    second must not consume another pending component. The phase is not
    reset by a transition delay either, so any further transition delay
    before the next launch is ignored.
    """

    def __init__(self):
        self._pending: List[str] = []
        self._phase = LaunchPhase.IDLE

    @property
    def phase(self) -> LaunchPhase:
        return self._phase

    @property
    def pending(self) -> Tuple[str, ...]:
        """Pending component names, oldest first."""
        return tuple(self._pending)

    def launch(self, component_name: str):
        self._pending.append(component_name)
        self._phase = LaunchPhase.AWAITING_DELAY

    def starting_window_delay(self, delay_ms: int) -> Optional[TransitionRecord]:
        if not self._pending:
            logger.debug("starting window delay %dms with no pending launch, ignored",
                         delay_ms)
            return None
        self._phase = LaunchPhase.COLD_LAUNCH_EMITTED
        return TransitionRecord(
            component_name=self._pending.pop(),
            starting_window_delay_ms=delay_ms,
            transition_delay_ms=NOT_MEASURED,
        )

    def transition_delay(self, delay_ms: int) -> Optional[TransitionRecord]:
        if not self._pending:
            logger.debug("transition delay %dms with no pending launch, ignored",
                         delay_ms)
            return None
        if self._phase is LaunchPhase.COLD_LAUNCH_EMITTED:
            logger.debug("transition delay %dms follows a cold launch, ignored",
                         delay_ms)
            return None
        component_name = self._pending.pop()
        self._phase = LaunchPhase.AWAITING_DELAY if self._pending else LaunchPhase.IDLE
        return TransitionRecord(
            component_name=component_name,
            starting_window_delay_ms=NOT_MEASURED,
            transition_delay_ms=delay_ms,
        )


class TransitionDelayCorrelator:
    """Builds TransitionRecords from the events log in one forward pass."""

    def __init__(self):
        self.tracker = LaunchTracker()
        self._records: List[TransitionRecord] = []

    def parse(self, lines: Iterable[str]) -> "TransitionDelayCorrelator":
        for line in iter_lines(lines):
            self.feed(line)
        logger.debug("events: %d transition records, %d launches still pending",
                     len(self._records), len(self.tracker.pending))
        return self

    def feed(self, line: str) -> Optional[TransitionRecord]:
        """
        Process one line.

        Returns:
            The TransitionRecord emitted by this line, if any
        """
        match = classify(line, TRANSITION_PATTERNS)
        if match is None:
            return None

        if match.pattern is ACTIVITY_RESTART or match.pattern is ACTIVITY_RESUME:
            self.tracker.launch(match["component_name"])
            return None

        delay_ms = capture_int(match, "delay")
        if match.pattern is STARTING_WINDOW_DELAY:
            record = self.tracker.starting_window_delay(delay_ms)
        elif match.pattern is TRANSITION_DELAY:
            record = self.tracker.transition_delay(delay_ms)
        else:
            record = None

        if record is not None:
            self._records.append(record)
        return record

    @property
    def records(self) -> Tuple[TransitionRecord, ...]:
        return tuple(self._records)


class LatencyCorrelator:
    """Collects sysui_latency samples in log order."""

    def __init__(self):
        self._records: List[LatencyRecord] = []

    def parse(self, lines: Iterable[str]) -> "LatencyCorrelator":
        for line in iter_lines(lines):
            self.feed(line)
        return self

    def feed(self, line: str) -> Optional[LatencyRecord]:
        match = classify(line, LATENCY_PATTERNS)
        if match is None:
            return None
        record = LatencyRecord(
            action_id=capture_int(match, "action_id"),
            delay_ms=capture_int(match, "delay"),
        )
        self._records.append(record)
        return record

    @property
    def records(self) -> Tuple[LatencyRecord, ...]:
        return tuple(self._records)


# ---------------------------------------------------------------------------
# Convenience Functions
# ---------------------------------------------------------------------------

def parse_transition_delays(lines: Iterable[str]) -> List[TransitionRecord]:
    """Parse launch transition delays from an events log."""
    return list(TransitionDelayCorrelator().parse(lines).records)


def parse_latencies(lines: Iterable[str]) -> List[LatencyRecord]:
    """Parse sysui latency samples from an events log."""
    return list(LatencyCorrelator().parse(lines).records)
