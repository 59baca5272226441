"""
DmesgCorrelator — Boot milestones from the kernel log (v1.0)

Reads init lines from dmesg in a single forward pass and builds:
  - ServiceRecord per service name (start, optionally closed by its exit)
  - StageRecord per "init <stage> stage started!" line
  - ActionRecord per "processing action (...)" line without a property trigger

Usage:
    from android_boot_timing import DmesgCorrelator

    correlator = DmesgCorrelator()
    with open("dmesg.txt") as f:
        correlator.parse(f)
    correlator.get_service("bootanim").duration_ms
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import ActionRecord, LineMatch, ServiceRecord, StageRecord
from .patterns import (
    DMESG_PATTERNS,
    EXIT_SERVICE,
    START_ACTION,
    START_SERVICE,
    START_STAGE,
    classify,
)
from .utils import iter_lines, seconds_to_ms

logger = logging.getLogger(__name__)

_SERVICE_PATTERNS = (START_SERVICE, EXIT_SERVICE)


class DmesgCorrelator:
    """
    Correlates init service start/exit pairs, boot stages and actions.

    Rules are tried in a fixed order (service start/exit, stage, action);
    the first one that matches consumes the line. There is no end-of-input
    flush: services whose exit line never arrives stay open.
    """

    def __init__(self):
        # service name -> record, in first-seen order
        self._services: Dict[str, ServiceRecord] = {}
        self._stages: List[StageRecord] = []
        self._actions: List[ActionRecord] = []

    # -- feeding -----------------------------------------------------------

    def parse(self, lines: Iterable[str]) -> "DmesgCorrelator":
        """Consume a whole log. I/O errors from the source propagate."""
        count = 0
        for line in iter_lines(lines):
            self.feed(line)
            count += 1
        logger.debug("dmesg: %d lines, %d services (%d open), %d stages, %d actions",
                     count, len(self._services), len(self.open_services()),
                     len(self._stages), len(self._actions))
        return self

    def feed(self, line: str) -> bool:
        """
        Process one line (terminator already removed).

        Returns:
            True if any rule consumed the line
        """
        return self._apply(classify(line, DMESG_PATTERNS))

    def feed_service_line(self, line: str) -> bool:
        """
        Apply only the service start/exit rules to one line.

        Returns:
            True if the line is a service start or exit line, even when an
            exit line had no open service to close
        """
        return self._apply(classify(line, _SERVICE_PATTERNS))

    def feed_stage_line(self, line: str) -> bool:
        """Apply only the boot stage rule to one line."""
        return self._apply(classify(line, (START_STAGE,)))

    def feed_action_line(self, line: str) -> bool:
        """Apply only the init action rule to one line."""
        return self._apply(classify(line, (START_ACTION,)))

    def _apply(self, match: Optional[LineMatch]) -> bool:
        if match is None:
            return False

        timestamp_ms = seconds_to_ms(match, "timestamp")
        if match.pattern is START_SERVICE:
            self._start_service(match["service_name"], timestamp_ms)
        elif match.pattern is EXIT_SERVICE:
            self._exit_service(match["service_name"], timestamp_ms)
        elif match.pattern is START_STAGE:
            self._stages.append(StageRecord(
                stage_name=match["stage"], start_time_ms=timestamp_ms))
        else:
            self._actions.append(ActionRecord(
                action_name=match["action"], start_time_ms=timestamp_ms))
        return True

    def _start_service(self, name: str, timestamp_ms: int):
        # Open question kept as observed: a restart before the previous
        # instance exited replaces the open record, and the earlier start is
        # never reported as unclosed.
        if name in self._services:
            logger.debug("service %r restarted at %dms, replacing earlier record",
                         name, timestamp_ms)
        self._services[name] = ServiceRecord(name=name, start_time_ms=timestamp_ms)

    def _exit_service(self, name: str, timestamp_ms: int):
        record = self._services.get(name)
        if record is None or not record.is_open:
            logger.debug("exit of service %r at %dms has no open start, ignored",
                         name, timestamp_ms)
            return
        self._services[name] = record.close(timestamp_ms)

    # -- queries -----------------------------------------------------------

    @property
    def service_records(self) -> Mapping[str, ServiceRecord]:
        """Read-only view of service name -> record, in first-seen order."""
        return MappingProxyType(self._services)

    def get_service(self, name: str) -> Optional[ServiceRecord]:
        return self._services.get(name)

    def open_services(self) -> List[ServiceRecord]:
        """Services whose exit line has not been seen."""
        return [s for s in self._services.values() if s.is_open]

    @property
    def stage_records(self) -> Tuple[StageRecord, ...]:
        return tuple(self._stages)

    @property
    def action_records(self) -> Tuple[ActionRecord, ...]:
        return tuple(self._actions)


def parse_dmesg(lines: Iterable[str]) -> DmesgCorrelator:
    """One-call helper: run a fresh DmesgCorrelator over a log."""
    return DmesgCorrelator().parse(lines)

