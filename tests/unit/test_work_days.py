"""Unit tests for the work-day calendar encoding."""

from datetime import date

import pytest

from worktime_tracker.domain.work_days import format_work_days, parse_work_days, weekday_index


@pytest.mark.unit
class TestWorkDays:
    def test_weekday_index_sunday_is_zero(self):
        assert weekday_index(date(2024, 1, 7)) == 0  # Sunday
        assert weekday_index(date(2024, 1, 8)) == 1  # Monday
        assert weekday_index(date(2024, 1, 13)) == 6  # Saturday

    def test_parse_string(self):
        assert parse_work_days("1,2,3,4,5") == {1, 2, 3, 4, 5}
        assert parse_work_days(" 0, 6 ") == {0, 6}

    def test_parse_iterable(self):
        assert parse_work_days([3, 1, 3]) == {1, 3}

    @pytest.mark.parametrize("value", ["", " , ", [], "7", [-1], "a,b", [True], [1.0]])
    def test_parse_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_work_days(value)

    def test_format_sorted_unique(self):
        assert format_work_days([5, 1, 3, 1]) == "1,3,5"
        assert format_work_days(parse_work_days("6,0")) == "0,6"
