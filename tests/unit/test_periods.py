"""Unit tests for date ranges and period resolution."""

from datetime import date, datetime, timedelta, timezone

import pytest

from worktime_tracker.core.clock import FixedClock
from worktime_tracker.core.enums import Period
from worktime_tracker.core.errors import ValidationError
from worktime_tracker.domain.periods import DateRange, DateRangeResolver


@pytest.mark.unit
class TestDateRange:
    def test_bounds_cover_whole_days(self):
        date_range = DateRange.from_dates(date(2024, 3, 1), date(2024, 3, 2))

        assert date_range.start == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert date_range.end == datetime(2024, 3, 2, 23, 59, 59, 999000, tzinfo=timezone.utc)
        assert date_range.day_count() == 2

    def test_contains_is_inclusive(self):
        date_range = DateRange.from_dates(date(2024, 3, 1), date(2024, 3, 1))

        assert date_range.contains(date_range.start)
        assert date_range.contains(date_range.end)
        assert not date_range.contains(date_range.end + timedelta(milliseconds=1))

    def test_days_ascending_without_gaps(self):
        date_range = DateRange.from_dates(date(2024, 2, 27), date(2024, 3, 1))

        assert list(date_range.days()) == [
            date(2024, 2, 27),
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
        ]

    def test_days_up_to_last_representable_date(self):
        date_range = DateRange.from_dates(date(9999, 12, 30), date.max)

        assert list(date_range.days()) == [date(9999, 12, 30), date.max]
        assert date_range.day_count() == 2

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            DateRange.from_dates(date(2024, 3, 2), date(2024, 3, 1))


@pytest.mark.unit
class TestDateRangeResolver:
    def setup_method(self):
        self.clock = FixedClock(datetime(2024, 1, 14, 17, 45, tzinfo=timezone.utc))
        self.resolver = DateRangeResolver(self.clock)

    @pytest.mark.parametrize(
        "period,days",
        [("week", 7), ("month", 30), ("year", 365), (Period.WEEK, 7)],
    )
    def test_period_lengths(self, period, days):
        date_range = self.resolver.resolve(period)

        assert date_range.day_count() == days
        assert date_range.end_date == date(2024, 1, 14)

    def test_week_on_fixed_date(self):
        date_range = self.resolver.resolve("week")

        assert date_range.start == datetime(2024, 1, 8, tzinfo=timezone.utc)
        assert date_range.end == datetime(2024, 1, 14, 23, 59, 59, 999000, tzinfo=timezone.utc)

    def test_unknown_period(self):
        with pytest.raises(ValidationError, match="week, month, year"):
            self.resolver.resolve("fortnight")

    def test_explicit_dates(self):
        date_range = self.resolver.resolve_range(date(2024, 1, 1), date(2024, 1, 3))

        assert date_range.day_count() == 3

    def test_period_wins_over_dates(self):
        date_range = self.resolver.resolve_range(date(2020, 1, 1), date(2020, 1, 3), "week")

        assert date_range.end_date == date(2024, 1, 14)

    @pytest.mark.parametrize(
        "start,end",
        [(None, None), (date(2024, 1, 1), None), (None, date(2024, 1, 1))],
    )
    def test_missing_dates_without_period(self, start, end):
        with pytest.raises(ValidationError):
            self.resolver.resolve_range(start, end)
