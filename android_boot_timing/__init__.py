"""
Android Boot Timing

Single-pass correlators that turn Android diagnostic logs (dmesg, the
events log, logcat timing lines) into structured boot and launch records.
"""

from .dmesg import DmesgCorrelator, parse_dmesg
from .events import (
    LatencyCorrelator,
    TransitionDelayCorrelator,
    parse_latencies,
    parse_transition_delays,
)
from .models import (
    ActionRecord,
    LatencyRecord,
    ServiceRecord,
    StageRecord,
    TimingRecord,
    TransitionRecord,
)
from .pipeline import CorrelationReport, correlate
from .timings import TimingsCorrelator, parse_timings

__version__ = "0.1.0"
