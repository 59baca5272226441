"""
Pattern Registry — Android dmesg, events log and logcat timing grammars

Each correlator has its own ordered registry. A line is classified by the
first pattern in the registry that matches the WHOLE line; substring hits
and trailing garbage (including trailing whitespace) are rejected.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .constants import (
    ACTIVITY_RESTART_TAG,
    ACTIVITY_RESUME_TAG,
    DEFAULT_TIMING_LABELS,
    STARTING_WINDOW_DELAY_CODE,
    SYSUI_ACTION_TAG,
    SYSUI_LATENCY_TAG,
    TRANSITION_DELAY_CODE,
)
from .models import LineMatch, LinePattern


def register_pattern(registry: List[LinePattern], name: str, pattern: str,
                     kind: str = "", flags: int = 0) -> LinePattern:
    """Append a new whole-line pattern to a registry. Returns the created LinePattern."""
    lp = LinePattern(name=name, regex=re.compile(pattern, flags), kind=kind)
    registry.append(lp)
    return lp


def classify(line: str, registry: Sequence[LinePattern]) -> Optional[LineMatch]:
    """
    Match a line against a registry (first-match-wins, whole line only).

    Returns:
        LineMatch with the named captures, or None if nothing matched
    """
    for pattern in registry:
        match = pattern.regex.fullmatch(line)
        if match:
            return LineMatch(pattern=pattern, fields=match.groupdict())
    return None


# ---------------------------------------------------------------------------
# dmesg (kernel log, init lines)
# ---------------------------------------------------------------------------

# Matches: [   14.822691] init:
_DMESG_PREFIX = r"\[\s+(?P<timestamp>\d+\.\d+)\] init:\s+"

DMESG_PATTERNS: List[LinePattern] = []

# [   22.962730] init: starting service 'bootanim'...
START_SERVICE = register_pattern(
    DMESG_PATTERNS,
    "START_SERVICE",
    _DMESG_PREFIX + r"starting service '(?P<service_name>.*)'\.\.\.",
    kind="service_start",
)

# [   39.855818] init: Service 'bootanim' (pid 588) exited with status 0
EXIT_SERVICE = register_pattern(
    DMESG_PATTERNS,
    "EXIT_SERVICE",
    _DMESG_PREFIX
    + r"Service '(?P<service_name>.*)'\s+\(pid (?P<pid>\d+)\) exited with status 0",
    kind="service_exit",
)

# [   41.665818] init: init first stage started!
START_STAGE = register_pattern(
    DMESG_PATTERNS,
    "START_STAGE",
    _DMESG_PREFIX + r"init (?P<stage>.*) stage started!",
    kind="stage_start",
)

# [   44.942872] init: processing action (early-init)
# Not: [   52.361049] init: processing action (persist.sys.usb.config=* boot)
START_ACTION = register_pattern(
    DMESG_PATTERNS,
    "START_ACTION",
    _DMESG_PREFIX + r"processing action \((?P<action>[^=]+)\)",
    kind="action_start",
)


# ---------------------------------------------------------------------------
# Events log
# ---------------------------------------------------------------------------

# 08-21 17:53:53.876  1053  2135
_EVENTS_PREFIX = r"\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\s+\d+\s+\d+ "


def _activity_event(tag: str) -> str:
    # I am_restart_activity: [0,188098346,127,com.google.android.gm/.ConversationListActivityGmail]
    return (_EVENTS_PREFIX + "I " + re.escape(tag)
            + r": \[\d+,\d+,\d+,(?P<component_name>.*)\]")


def _sysui_action(code: int) -> str:
    # I sysui_action: [321,74]
    return (_EVENTS_PREFIX + "I " + re.escape(SYSUI_ACTION_TAG)
            + r": \[" + str(code) + r",(?P<delay>-?\d+)\]")


TRANSITION_PATTERNS: List[LinePattern] = []

ACTIVITY_RESTART = register_pattern(
    TRANSITION_PATTERNS, "ACTIVITY_RESTART",
    _activity_event(ACTIVITY_RESTART_TAG), kind="launch")

ACTIVITY_RESUME = register_pattern(
    TRANSITION_PATTERNS, "ACTIVITY_RESUME",
    _activity_event(ACTIVITY_RESUME_TAG), kind="launch")

STARTING_WINDOW_DELAY = register_pattern(
    TRANSITION_PATTERNS, "STARTING_WINDOW_DELAY",
    _sysui_action(STARTING_WINDOW_DELAY_CODE), kind="starting_window_delay")

TRANSITION_DELAY = register_pattern(
    TRANSITION_PATTERNS, "TRANSITION_DELAY",
    _sysui_action(TRANSITION_DELAY_CODE), kind="transition_delay")

LATENCY_PATTERNS: List[LinePattern] = []

# 09-19 11:53:16.893  1080  1160 I sysui_latency: [1,50]
ACTION_LATENCY = register_pattern(
    LATENCY_PATTERNS, "ACTION_LATENCY",
    _EVENTS_PREFIX + "I " + re.escape(SYSUI_LATENCY_TAG)
    + r": \[(?P<action_id>-?\d+),(?P<delay>-?\d+)\]",
    kind="latency")


# ---------------------------------------------------------------------------
# Logcat timing lines (threadtime format, debug severity)
# ---------------------------------------------------------------------------

# 03-10 21:43:40.328  1005  1005 D SystemServerTiming: StartWatchdog
_TIMING_PREFIX = (r"\d*-\d*\s*\d*:\d*:\d*\.\d*\s*\d*\s*\d*\s*D\s*"
                  r"(?P<component>.*):\s*(?P<subcomponent>\S*)\s*")
# : 3474ms
_TIMING_SUFFIX = r":\s*(?P<time>-?\d+(?:\.\d+)?)ms"


def timing_pattern_name(label: str) -> str:
    """"took to complete" -> "TIMING_TOOK_TO_COMPLETE"."""
    return "TIMING_" + re.sub(r"\W+", "_", label.strip()).strip("_").upper()


def build_timing_patterns(
    extra_labels: Iterable[Tuple[str, str]] = (),
) -> List[LinePattern]:
    """
    Build the ordered timing registry: built-in labels first, then extras.

    Args:
        extra_labels: (label, kind) pairs, e.g. ("init took", "duration").
                      Labels already present are ignored.

    Returns:
        List of LinePattern whose kind is "duration" or "start_time"
    """
    registry: List[LinePattern] = []
    seen = set()
    labels = list(DEFAULT_TIMING_LABELS.items()) + list(extra_labels)
    for label, kind in labels:
        if label in seen:
            continue
        seen.add(label)
        register_pattern(
            registry,
            timing_pattern_name(label),
            _TIMING_PREFIX + re.escape(label) + _TIMING_SUFFIX,
            kind=kind,
        )
    return registry


TIMING_PATTERNS: List[LinePattern] = build_timing_patterns()
