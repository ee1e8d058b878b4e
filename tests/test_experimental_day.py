"""
Tests for experimental day resolution.
"""

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from boutmetrics.errors import UnknownDayError, UnparseableTimestampError
from boutmetrics.experimental_day import (
    SHORT_TIMESTAMP_FORMAT, DayTable, ExperimentalDayResolver,
    boundary_date, parse_timestamp,
)


class TestParseTimestamp:

    def test_canonical_format(self):
        assert parse_timestamp('2023-09-19 05:59:00') == datetime(2023, 9, 19, 5, 59)

    def test_surrounding_whitespace(self):
        assert parse_timestamp('  2023-09-19 06:00:00 ') == datetime(2023, 9, 19, 6, 0)

    def test_short_format(self):
        assert parse_timestamp('9/19/23 6:01', SHORT_TIMESTAMP_FORMAT) == datetime(2023, 9, 19, 6, 1)

    def test_datetime_passthrough(self):
        ts = datetime(2023, 9, 19, 12, 0)
        assert parse_timestamp(ts) is ts

    def test_pandas_and_numpy_values(self):
        assert parse_timestamp(pd.Timestamp('2023-09-19 12:00')).hour == 12
        assert parse_timestamp(np.datetime64('2023-09-19T13:00')).hour == 13

    @pytest.mark.parametrize('value', ['not-a-date', '', '2023-13-40 00:00:00', None, 12.5,
                                       pd.NaT, np.datetime64('NaT')])
    def test_malformed(self, value):
        with pytest.raises(UnparseableTimestampError):
            parse_timestamp(value)

    def test_wrong_format_is_unparseable(self):
        with pytest.raises(UnparseableTimestampError):
            parse_timestamp('9/19/23 6:01')


class TestBoundaryDate:

    def test_before_six_is_previous_day(self):
        assert boundary_date(datetime(2023, 9, 19, 5, 59)) == date(2023, 9, 18)

    def test_six_is_same_day(self):
        assert boundary_date(datetime(2023, 9, 19, 6, 0)) == date(2023, 9, 19)

    def test_midnight_and_month_rollover(self):
        assert boundary_date(datetime(2023, 10, 1, 0, 0)) == date(2023, 9, 30)

    def test_custom_boundary(self):
        assert boundary_date(datetime(2023, 9, 19, 7, 0), day_boundary_hour=8) == date(2023, 9, 18)


class TestExperimentalDayResolver:

    def test_boundary_minute(self):
        resolver = ExperimentalDayResolver()
        assert resolver.boundary_date('2023-09-19 05:59:00') == date(2023, 9, 18)
        assert resolver.boundary_date('2023-09-19 06:00:00') == date(2023, 9, 19)
        assert resolver.resolve('2023-09-19 05:59:00') == 1
        assert resolver.resolve('2023-09-19 06:00:00') == 2

    def test_same_day_reuses_index(self):
        resolver = ExperimentalDayResolver()
        assert resolver.resolve('2023-09-19 07:00:00') == 1
        assert resolver.resolve('2023-09-20 05:00:00') == 1
        assert resolver.days == [date(2023, 9, 19)]

    def test_earlier_day_shifts_indices(self):
        resolver = ExperimentalDayResolver()
        assert resolver.resolve('2023-09-20 12:00:00') == 1
        assert resolver.resolve('2023-09-19 12:00:00') == 1
        # The first day discovered is now day 2
        assert resolver.resolve('2023-09-20 12:00:00') == 2

    def test_reset(self):
        resolver = ExperimentalDayResolver()
        resolver.resolve('2023-09-20 12:00:00')
        resolver.reset()
        assert resolver.days == []

    def test_malformed_raises(self):
        resolver = ExperimentalDayResolver()
        with pytest.raises(UnparseableTimestampError):
            resolver.resolve('not-a-date')
        assert resolver.days == []


class TestDayTable:

    TIMESTAMPS = [
        '2023-09-20 12:00:00',
        '2023-09-19 05:59:00',
        '2023-09-19 06:00:00',
        '2023-09-21 03:00:00',
    ]

    def test_sorted_indices(self):
        table = DayTable.from_timestamps(self.TIMESTAMPS)
        assert table.dates == (date(2023, 9, 18), date(2023, 9, 19), date(2023, 9, 20))
        assert table.day_indices == [1, 2, 3]
        assert table.resolve('2023-09-19 05:59:00') == 1
        assert table.resolve('2023-09-19 06:00:00') == 2
        assert table.resolve('2023-09-21 03:00:00') == 3

    def test_order_independent(self):
        forward = DayTable.from_timestamps(self.TIMESTAMPS)
        backward = DayTable.from_timestamps(list(reversed(self.TIMESTAMPS)))
        assert forward.dates == backward.dates
        for ts in self.TIMESTAMPS:
            assert forward.resolve(ts) == backward.resolve(ts)

    def test_unparseable_ignored_in_prepass(self):
        table = DayTable.from_timestamps(['not-a-date', '2023-09-19 12:00:00'])
        assert len(table) == 1

    def test_unknown_day(self):
        table = DayTable.from_timestamps(self.TIMESTAMPS)
        with pytest.raises(UnknownDayError):
            table.resolve('2024-01-01 12:00:00')
        assert date(2024, 1, 1) not in table

    def test_date_of_and_labels(self):
        table = DayTable.from_timestamps(self.TIMESTAMPS)
        assert table.date_of(1) == date(2023, 9, 18)
        assert table.date_of(0) is None
        assert table.date_of(4) is None
        assert table.labels()[0] == 'Day 1 (2023-09-18)'

    def test_empty(self):
        table = DayTable.from_timestamps([])
        assert len(table) == 0
        assert table.day_indices == []
