"""Fixtures for the correlator tests."""

import pytest

from log_samples import COLD_LAUNCH, DMESG_LOG, DURATION_LOG, as_stream


@pytest.fixture
def dmesg_stream():
    return as_stream(DMESG_LOG)


@pytest.fixture
def cold_launch_stream():
    return as_stream(COLD_LAUNCH)


@pytest.fixture
def duration_stream():
    return as_stream(DURATION_LOG)
