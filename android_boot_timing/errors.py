"""Correlator errors."""


class BootTimingError(Exception):
    """Base exception for android_boot_timing errors."""


class CaptureConversionError(BootTimingError, ValueError):
    """Raised when a numeric capture cannot be converted (a pattern defect)."""

    def __init__(self, pattern_name: str, field_name: str, value: str):
        self.pattern_name = pattern_name
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{pattern_name}: capture {field_name!r} is not numeric: {value!r}")


class PatternConfigError(BootTimingError, ValueError):
    """Raised when a timing pattern configuration file is malformed."""
