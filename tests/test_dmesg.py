"""Tests for the dmesg boot milestone correlator."""

import pytest

from android_boot_timing import DmesgCorrelator, parse_dmesg
from android_boot_timing.models import ActionRecord, ServiceRecord, StageRecord

from log_samples import DMESG_LOG, as_stream

NOISE = [
    "[   29.331069] ipa-wan ipa_wwan_ioctl:1428 dev(rmnet_data0) register to IPA",
    "[   32.182592] ueventd: fixup /sys/devices/virtual/input/poll_delay 0 1004 660",
    "[   35.642666] SELinux: initialized (dev fuse, type fuse), uses genfs_contexts",
]


def _feed_services(lines):
    correlator = DmesgCorrelator()
    for line in lines:
        correlator.feed_service_line(line)
    return correlator


class TestEmptyLog:
    def test_empty_line(self):
        correlator = parse_dmesg(as_stream([""]))
        assert len(correlator.service_records) == 0
        assert correlator.stage_records == ()
        assert correlator.action_records == ()

    def test_no_input(self):
        correlator = parse_dmesg([])
        assert len(correlator.service_records) == 0

    def test_unpadded_timestamp_ignored(self):
        correlator = parse_dmesg([
            "[12345.000001] init: starting service 'bootanim'...",
            "[12346.000001] init: init first stage started!",
        ])
        assert len(correlator.service_records) == 0
        assert correlator.stage_records == ()

    def test_only_noise(self):
        correlator = parse_dmesg(NOISE)
        assert len(correlator.service_records) == 0
        assert correlator.stage_records == ()
        assert correlator.action_records == ()


class TestCompleteLog:
    def test_counts(self, dmesg_stream):
        correlator = parse_dmesg(dmesg_stream)
        assert len(correlator.service_records) == 2
        assert len(correlator.stage_records) == 2
        assert len(correlator.action_records) == 5

    def test_restarted_service_keeps_last_start(self, dmesg_stream):
        correlator = parse_dmesg(dmesg_stream)
        assert correlator.get_service("bootanim") == ServiceRecord("bootanim", 52962, 69855)

    def test_unclosed_service_stays_open(self, dmesg_stream):
        correlator = parse_dmesg(dmesg_stream)
        assert correlator.open_services() == [ServiceRecord("netd", 23252)]

    def test_accepts_plain_list(self):
        correlator = parse_dmesg(DMESG_LOG)
        assert list(correlator.service_records) == ["bootanim", "netd"]


class TestServiceInfo:
    def test_start_and_exit(self):
        correlator = _feed_services([
            "[   22.962730] init: starting service 'bootanim'...",
            *NOISE,
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0",
        ])
        records = list(correlator.service_records.values())
        assert len(records) == 1
        record = records[0]
        assert record.name == "bootanim"
        assert record.start_time_ms == 22962
        assert record.end_time_ms == 39855
        assert record.duration_ms == 16893
        assert not record.is_open

    def test_start_only(self):
        correlator = _feed_services([
            "[   23.252321] init: starting service 'netd'...",
            *NOISE,
        ])
        record = correlator.get_service("netd")
        assert record.start_time_ms == 23252
        assert record.end_time_ms is None
        assert record.duration_ms is None
        assert record.is_open

    def test_first_seen_order(self):
        correlator = _feed_services([
            "[   22.962730] init: starting service 'bootanim'...",
            "[   23.252321] init: starting service 'netd'...",
            *NOISE,
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0",
        ])
        assert [r.name for r in correlator.service_records.values()] == ["bootanim", "netd"]

    def test_trailing_whitespace_rejected(self):
        correlator = _feed_services([
            "[   22.962730] init: starting service 'bootanim'...  ",
            "[   23.252321] init: starting service 'netd'...  ",
            *NOISE,
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0  ",
        ])
        assert len(correlator.service_records) == 0

    def test_exit_without_start_ignored(self):
        correlator = DmesgCorrelator()
        consumed = correlator.feed_service_line(
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0")
        assert consumed is True
        assert len(correlator.service_records) == 0

    def test_exit_of_other_service_does_not_close(self):
        correlator = _feed_services([
            "[   23.252321] init: starting service 'netd'...",
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0",
        ])
        assert correlator.get_service("netd").is_open
        assert correlator.get_service("bootanim") is None

    def test_end_time_not_overwritten(self):
        correlator = _feed_services([
            "[   22.962730] init: starting service 'bootanim'...",
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0",
            "[   45.000000] init: Service 'bootanim' (pid 588) exited with status 0",
        ])
        assert correlator.get_service("bootanim").end_time_ms == 39855

    def test_nonzero_exit_status_not_matched(self):
        correlator = _feed_services([
            "[   22.962730] init: starting service 'bootanim'...",
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 1",
        ])
        assert correlator.get_service("bootanim").is_open

    def test_restart_before_exit_replaces_open_record(self):
        correlator = _feed_services([
            "[   22.962730] init: starting service 'bootanim'...",
            "[   25.100000] init: starting service 'bootanim'...",
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0",
        ])
        assert len(correlator.service_records) == 1
        assert correlator.get_service("bootanim") == ServiceRecord("bootanim", 25100, 39855)

    def test_service_records_read_only(self):
        correlator = _feed_services(["[   23.252321] init: starting service 'netd'..."])
        with pytest.raises(TypeError):
            correlator.service_records["netd"] = None


class TestStageInfo:
    def test_stages_in_order(self):
        correlator = DmesgCorrelator()
        lines = [
            "[   22.962730] init: starting service 'bootanim'...",
            *NOISE,
            "[   39.855818] init: Service 'bootanim' (pid 588) exited with status 0",
            "[   41.665818] init: init first stage started!",
            "[   42.425056] init: init second stage started!",
        ]
        for line in lines:
            correlator.feed_stage_line(line)
        assert list(correlator.stage_records) == [
            StageRecord("first", 41665),
            StageRecord("second", 42425),
        ]

    def test_stage_rule_ignores_service_lines(self):
        correlator = DmesgCorrelator()
        assert correlator.feed_stage_line(
            "[   22.962730] init: starting service 'bootanim'...") is False
        assert len(correlator.service_records) == 0


class TestActionInfo:
    def test_property_triggers_excluded(self):
        correlator = DmesgCorrelator()
        lines = [
            "[   14.942872] init: processing action (early-init)",
            "[   17.233446] init: processing action (set_mmap_rnd_bits)",
            "[   17.240083] init: processing action (set_kptr_restrict)",
            "[   17.245778] init: processing action (keychord_init)",
            "[   22.361049] init: processing action (persist.sys.usb.config=* boot)",
            "[   22.361108] init: processing action (enable_property_trigger)",
            "[   22.361313] init: processing action (security.perf_harden=1)",
            "[   22.361495] init: processing action (ro.debuggable=1)",
            "[   22.962730] init: starting service 'bootanim'...",
            *NOISE,
        ]
        for line in lines:
            correlator.feed_action_line(line)
        assert list(correlator.action_records) == [
            ActionRecord("early-init", 14942),
            ActionRecord("set_mmap_rnd_bits", 17233),
            ActionRecord("set_kptr_restrict", 17240),
            ActionRecord("keychord_init", 17245),
            ActionRecord("enable_property_trigger", 22361),
        ]


class TestRuleOrder:
    @pytest.mark.parametrize("line,expected", [
        ("[   22.962730] init: starting service 'bootanim'...", True),
        ("[   41.665818] init: init first stage started!", True),
        ("[   44.942872] init: processing action (early-init)", True),
        ("[   52.361049] init: processing action (persist.sys.usb.config=* boot)", False),
        ("[   29.331069] ipa-wan ipa_wwan_ioctl:1428 dev(rmnet_data0) register to IPA", False),
        ("", False),
    ])
    def test_feed_reports_consumption(self, line, expected):
        assert DmesgCorrelator().feed(line) is expected

    def test_records_serialize(self, dmesg_stream):
        correlator = parse_dmesg(dmesg_stream)
        assert correlator.get_service("bootanim").to_dict() == {
            "name": "bootanim",
            "start_time_ms": 52962,
            "end_time_ms": 69855,
            "duration_ms": 16893,
        }
        assert correlator.stage_records[0].to_dict() == {
            "stage_name": "first", "start_time_ms": 41665,
        }
