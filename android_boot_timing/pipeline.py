"""
Pipeline orchestrator — feeds one read of a log to every correlator.

Each line is handed to the dmesg, transition, latency and timing
correlators in turn, so every correlator sees the lines in input order.
The correlators share no state; a line irrelevant to one is simply
skipped by it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple

from .config import Config, load_config
from .dmesg import DmesgCorrelator
from .events import LatencyCorrelator, TransitionDelayCorrelator
from .models import (
    ActionRecord,
    LatencyRecord,
    ServiceRecord,
    StageRecord,
    TimingRecord,
    TransitionRecord,
)
from .timings import TimingsCorrelator
from .utils import iter_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrelationReport:
    """Results of one correlate() run."""
    line_count: int
    services: Mapping[str, ServiceRecord]
    stages: Tuple[StageRecord, ...]
    actions: Tuple[ActionRecord, ...]
    transitions: Tuple[TransitionRecord, ...]
    latencies: Tuple[LatencyRecord, ...]
    timings: Tuple[TimingRecord, ...]

    def get_service(self, name: str) -> Optional[ServiceRecord]:
        return self.services.get(name)

    def summary(self) -> dict:
        return {
            "line_count": self.line_count,
            "services": len(self.services),
            "open_services": sum(1 for s in self.services.values() if s.is_open),
            "stages": len(self.stages),
            "actions": len(self.actions),
            "transitions": len(self.transitions),
            "latencies": len(self.latencies),
            "timings": len(self.timings),
        }


def correlate(lines: Iterable[str], config: Optional[Config] = None) -> CorrelationReport:
    """
    Run all correlators over a single pass of the input.

    Args:
        lines: any iterable of text lines (file object, list, StringIO)
        config: Config whose extra timing labels extend the timing
                grammar; defaults to load_config(), which reads
                ANDROID_BOOT_TIMING_PATTERNS from the environment

    Returns:
        CorrelationReport with every correlator's results
    """
    if config is None:
        config = load_config()
    t0 = time.time()

    dmesg = DmesgCorrelator()
    transitions = TransitionDelayCorrelator()
    latencies = LatencyCorrelator()
    timings = TimingsCorrelator(config.extra_timing_labels)

    line_count = 0
    for line in iter_lines(lines):
        line_count += 1
        dmesg.feed(line)
        transitions.feed(line)
        latencies.feed(line)
        timings.feed(line)

    report = CorrelationReport(
        line_count=line_count,
        services=dmesg.service_records,
        stages=dmesg.stage_records,
        actions=dmesg.action_records,
        transitions=transitions.records,
        latencies=latencies.records,
        timings=timings.records,
    )
    logger.debug("correlated %s in %.3fs", report.summary(), time.time() - t0)
    return report
