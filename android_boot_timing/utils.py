"""
Line reading and numeric conversion helpers shared by the correlators.
"""

from typing import Iterable, Iterator

from .constants import MS_PER_SECOND
from .errors import CaptureConversionError
from .models import LineMatch


def iter_lines(source: Iterable[str]) -> Iterator[str]:
    """
    Yield lines from any line source with the terminator removed.

    Only the trailing "\\n" / "\\r\\n" is dropped; any other trailing
    whitespace is kept so that whole-line matching can reject it.

    Examples:
        >>> list(iter_lines(["a\\n", "b\\r\\n", "c"]))
        ['a', 'b', 'c']
    """
    for line in source:
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        yield line


def capture_int(match: LineMatch, field_name: str) -> int:
    """Convert an integer capture, raising CaptureConversionError on failure."""
    value = match[field_name]
    try:
        return int(value)
    except ValueError:
        raise CaptureConversionError(match.name, field_name, value) from None


def capture_float(match: LineMatch, field_name: str) -> float:
    """Convert a decimal capture, raising CaptureConversionError on failure."""
    value = match[field_name]
    try:
        return float(value)
    except ValueError:
        raise CaptureConversionError(match.name, field_name, value) from None


def seconds_to_ms(match: LineMatch, field_name: str) -> int:
    """
    Convert a fractional-seconds capture to whole milliseconds.

    Truncates toward zero, matching the kernel log convention.

    Examples:
        "22.962730" -> 22962
        "39.855818" -> 39855
    """
    return int(capture_float(match, field_name) * MS_PER_SECOND)
