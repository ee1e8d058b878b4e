"""
Experimental day resolution.

An experimental day runs from the day boundary hour (6:00) to 6:00 the next
morning. A bout at 05:59 on Sep 19 belongs to the experimental day that
started on Sep 18. Day indices are 1-based positions in the sorted set of
boundary dates.

Two resolvers are provided:

- ExperimentalDayResolver discovers days incrementally as records arrive.
  Inserting a chronologically earlier day shifts the index of every later
  day, so results depend on processing order.
- DayTable is built once from every timestamp in a run and never changes.
  This is what SleepBoutAnalyzer uses.
"""

import bisect
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import UnknownDayError, UnparseableTimestampError


DEFAULT_DAY_BOUNDARY_HOUR = 6

# Canonical export format and the older spreadsheet format ("9/19/23 6:01")
DEFAULT_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
SHORT_TIMESTAMP_FORMAT = '%m/%d/%y %H:%M'


def parse_timestamp(value, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT) -> datetime:
    """
    Parse a raw timestamp value.

    Args:
        value: datetime (returned unchanged), numpy datetime64, or string
        timestamp_format: strptime format used for strings

    Returns:
        datetime

    Raises:
        UnparseableTimestampError: If the value is missing or malformed
    """
    if isinstance(value, datetime):
        # pd.NaT passes the isinstance check
        if pd.isna(value):
            raise UnparseableTimestampError(value, timestamp_format)
        return value

    if isinstance(value, np.datetime64):
        if np.isnat(value):
            raise UnparseableTimestampError(value, timestamp_format)
        return pd.Timestamp(value).to_pydatetime()

    if not isinstance(value, str):
        raise UnparseableTimestampError(value, timestamp_format)

    try:
        return datetime.strptime(value.strip(), timestamp_format)
    except ValueError as e:
        raise UnparseableTimestampError(value, timestamp_format) from e


def boundary_date(timestamp: datetime, day_boundary_hour: int = DEFAULT_DAY_BOUNDARY_HOUR) -> date:
    """
    Calendar date of the experimental day a timestamp belongs to.

    Hours before the boundary belong to the previous calendar date.
    """
    if timestamp.hour < day_boundary_hour:
        return timestamp.date() - timedelta(days=1)
    return timestamp.date()


class ExperimentalDayResolver:
    """
    Incremental experimental-day discovery.

    Keeps a sorted list of boundary dates seen so far. resolve() inserts
    unseen dates and returns the 1-based position of the timestamp's date.
    """

    def __init__(self, timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
                 day_boundary_hour: int = DEFAULT_DAY_BOUNDARY_HOUR):
        self.timestamp_format = timestamp_format
        self.day_boundary_hour = day_boundary_hour
        self._days: List[date] = []

    @property
    def days(self) -> List[date]:
        return list(self._days)

    def reset(self):
        """Forget all discovered days (start of a new run)."""
        self._days.clear()

    def parse(self, value) -> datetime:
        return parse_timestamp(value, self.timestamp_format)

    def boundary_date(self, timestamp) -> date:
        return boundary_date(self.parse(timestamp), self.day_boundary_hour)

    def resolve(self, timestamp) -> int:
        day = self.boundary_date(timestamp)
        pos = bisect.bisect_left(self._days, day)
        if pos == len(self._days) or self._days[pos] != day:
            self._days.insert(pos, day)
        return pos + 1


class DayTable:
    """
    Fixed boundary-date -> day-index lookup for a whole run.

    Build with from_timestamps() over every timestamp of every animal before
    classification starts. The mapping does not depend on input order.
    """

    def __init__(self, dates: Iterable[date],
                 timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
                 day_boundary_hour: int = DEFAULT_DAY_BOUNDARY_HOUR):
        self.timestamp_format = timestamp_format
        self.day_boundary_hour = day_boundary_hour
        self._dates: Tuple[date, ...] = tuple(sorted(set(dates)))
        self._index = {d: i + 1 for i, d in enumerate(self._dates)}

    @classmethod
    def from_timestamps(cls, timestamps: Iterable,
                        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
                        day_boundary_hour: int = DEFAULT_DAY_BOUNDARY_HOUR) -> 'DayTable':
        """
        Discover all boundary dates in one pass.

        Unparseable values are ignored here; the classification pass
        reports them per record.
        """
        dates = set()
        for value in timestamps:
            try:
                ts = parse_timestamp(value, timestamp_format)
            except UnparseableTimestampError:
                continue
            dates.add(boundary_date(ts, day_boundary_hour))
        return cls(dates, timestamp_format, day_boundary_hour)

    @property
    def dates(self) -> Tuple[date, ...]:
        return self._dates

    @property
    def day_indices(self) -> List[int]:
        return list(range(1, len(self._dates) + 1))

    def __len__(self):
        return len(self._dates)

    def __contains__(self, day: date) -> bool:
        return day in self._index

    def parse(self, value) -> datetime:
        return parse_timestamp(value, self.timestamp_format)

    def boundary_date(self, timestamp) -> date:
        return boundary_date(self.parse(timestamp), self.day_boundary_hour)

    def index_of(self, day: date) -> int:
        try:
            return self._index[day]
        except KeyError:
            raise UnknownDayError(f"Boundary date {day} is not in the day table") from None

    def date_of(self, day_index: int) -> Optional[date]:
        if 1 <= day_index <= len(self._dates):
            return self._dates[day_index - 1]
        return None

    def resolve(self, timestamp) -> int:
        return self.index_of(self.boundary_date(timestamp))

    def labels(self) -> List[str]:
        """Display labels like 'Day 1 (2023-09-18)'."""
        return [f"Day {i + 1} ({d.isoformat()})" for i, d in enumerate(self._dates)]

    def __repr__(self):
        return f"DayTable({len(self._dates)} days)"
