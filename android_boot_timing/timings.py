"""
TimingsCorrelator — System service boot timings from logcat.

Assumes logcat "threadtime" format and debug-severity lines such as:

    03-10 21:43:40.328  1005  1005 D SystemServerTiming: StartWatchdog took to complete: 38ms
    01-10 01:25:57.249   989   989 D BootAnimation: BootAnimationStartTiming start time: 8343ms

A line that already produced a record is skipped when it appears again
verbatim; the same metric logged with a different line (another
timestamp, another pid) produces a new record.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .constants import TIMING_KIND_DURATION
from .models import LinePattern, TimingRecord
from .patterns import TIMING_PATTERNS, build_timing_patterns, classify
from .utils import capture_float, iter_lines

logger = logging.getLogger(__name__)


class TimingsCorrelator:
    """
    Single-pass parser for system services timing lines with exact-line dedup.

    Args:
        extra_labels: additional (label, kind) pairs tried after the
                      built-in "took to complete" and "start time" labels
    """

    def __init__(self, extra_labels: Sequence[Tuple[str, str]] = ()):
        if extra_labels:
            self.patterns: List[LinePattern] = build_timing_patterns(extra_labels)
        else:
            self.patterns = TIMING_PATTERNS
        self._matched_lines: Set[str] = set()
        self._records: List[TimingRecord] = []

    def parse(self, lines: Iterable[str]) -> "TimingsCorrelator":
        for line in iter_lines(lines):
            self.feed(line)
        logger.debug("timings: %d records from %d distinct lines",
                     len(self._records), len(self._matched_lines))
        return self

    def feed(self, line: str) -> Optional[TimingRecord]:
        """
        Process one line.

        Returns:
            The new TimingRecord, or None for duplicates and non-timing lines
        """
        if line in self._matched_lines:
            logger.debug("duplicate timing line skipped: %s", line)
            return None

        record = self.parse_line(line)
        if record is None:
            return None
        self._records.append(record)
        self._matched_lines.add(line)
        return record

    def parse_line(self, line: str) -> Optional[TimingRecord]:
        """Classify a single line without touching the dedup state."""
        match = classify(line, self.patterns)
        if match is None:
            return None

        value = capture_float(match, "time")
        component = match["component"].strip()
        subcomponent = match["subcomponent"].strip()
        if match.pattern.kind == TIMING_KIND_DURATION:
            return TimingRecord(component=component, subcomponent=subcomponent,
                                duration_ms=value)
        return TimingRecord(component=component, subcomponent=subcomponent,
                            start_time_ms=value)

    @property
    def records(self) -> Tuple[TimingRecord, ...]:
        return tuple(self._records)


def parse_timings(lines: Iterable[str],
                  extra_labels: Sequence[Tuple[str, str]] = ()) -> List[TimingRecord]:
    """Parse system services timing records from a logcat stream."""
    return list(TimingsCorrelator(extra_labels).parse(lines).records)
