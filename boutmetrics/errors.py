"""
Error types for BoutMetrics.

Configuration errors are fatal and abort a run before any processing.
Timestamp and day lookup errors are per-record and are handled by the
classification pipeline, which skips the offending record.
"""


class BoutMetricsError(Exception):
    """Base class for all BoutMetrics errors."""


class ConfigurationError(BoutMetricsError, ValueError):
    """Invalid analysis configuration (fatal)."""


class InvalidEdgesError(ConfigurationError):
    """Bin edges are not a strictly increasing sequence of at least 2 values."""


class CohortPartitionError(ConfigurationError):
    """An animal was assigned to more than one cohort."""

    def __init__(self, message: str, animal_ids=None):
        super().__init__(message)
        self.animal_ids = sorted(animal_ids or [])


class InvalidHourError(BoutMetricsError, ValueError):
    """Wall-clock hour outside 0-23."""


class UnparseableTimestampError(BoutMetricsError, ValueError):
    """Timestamp could not be parsed with the configured format."""

    def __init__(self, value, timestamp_format: str = None):
        self.value = value
        self.timestamp_format = timestamp_format
        if timestamp_format:
            message = f"Unable to parse timestamp {value!r} with format {timestamp_format!r}"
        else:
            message = f"Unable to parse timestamp {value!r}"
        super().__init__(message)


class UnknownDayError(BoutMetricsError, KeyError):
    """Boundary date is not part of a fixed day table."""

    def __str__(self):
        return str(self.args[0]) if self.args else ''


class EmptyCohortError(BoutMetricsError, LookupError):
    """Statistics requested for a cohort that was never configured."""


class InvalidDurationError(BoutMetricsError, ValueError):
    """Bout duration is missing, non-numeric, non-finite or negative."""
