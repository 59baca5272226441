"""
Grammar constants for the Android log correlators.

Everything that names a literal token in a log line lives here so the
pattern modules only describe structure.
"""

from typing import Dict

# ---------------------------------------------------------------------------
# Time conversion
# ---------------------------------------------------------------------------

MS_PER_SECOND = 1000                # dmesg timestamps are fractional seconds

# ---------------------------------------------------------------------------
# Events log (sysui_action codes)
# ---------------------------------------------------------------------------

STARTING_WINDOW_DELAY_CODE = 321    # cold launch: starting window shown
TRANSITION_DELAY_CODE = 319         # app transition finished
NOT_MEASURED = -1                   # sentinel for the unset delay field

ACTIVITY_RESTART_TAG = "am_restart_activity"
ACTIVITY_RESUME_TAG = "am_resume_activity"
SYSUI_ACTION_TAG = "sysui_action"
SYSUI_LATENCY_TAG = "sysui_latency"

# ---------------------------------------------------------------------------
# Logcat timing lines
# ---------------------------------------------------------------------------

TIMING_KIND_DURATION = "duration"
TIMING_KIND_START_TIME = "start_time"
TIMING_KINDS = (TIMING_KIND_DURATION, TIMING_KIND_START_TIME)

# Built-in timing labels, tried in this order. Extra labels loaded from
# YAML are tried after these.
DEFAULT_TIMING_LABELS: Dict[str, str] = {
    "took to complete": TIMING_KIND_DURATION,
    "start time": TIMING_KIND_START_TIME,
}

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

TIMING_PATTERNS_ENV = "ANDROID_BOOT_TIMING_PATTERNS"
TIMING_LABELS_KEY = "timing_labels"
