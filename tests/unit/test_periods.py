"""Unit tests for calendar helpers."""

from datetime import date, datetime

import pytest

from src.domain.periods import YearMonth, add_months, as_date, days_between, iter_months


class TestAsDate:
    def test_datetime_truncated(self):
        assert as_date(datetime(2024, 3, 15, 23, 59)) == date(2024, 3, 15)

    def test_date_unchanged(self):
        assert as_date(date(2024, 3, 15)) == date(2024, 3, 15)


class TestAddMonths:
    """Test month arithmetic with day clamping."""

    def test_simple_shift(self):
        assert add_months(date(2024, 3, 15), -12) == date(2023, 3, 15)

    def test_crosses_year_forward(self):
        assert add_months(date(2024, 11, 10), 3) == date(2025, 2, 10)

    def test_day_clamped_to_leap_february(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_day_clamped_to_common_february(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)


class TestDaysBetween:
    def test_leap_year_span(self):
        assert days_between(date(2024, 1, 1), date(2025, 1, 1)) == 366

    def test_negative_when_reversed(self):
        assert days_between(date(2024, 1, 10), date(2024, 1, 1)) == -9


class TestYearMonth:
    """Test YearMonth value."""

    def test_of_and_str(self):
        month = YearMonth.of(date(2024, 3, 15))
        assert month == YearMonth(2024, 3)
        assert str(month) == "2024-03"

    def test_parse(self):
        assert YearMonth.parse("2024-12") == YearMonth(2024, 12)

    @pytest.mark.parametrize("text", ["2024", "2024-13", "march-2024", "2024-03-01"])
    def test_parse_rejects_bad_input(self, text):
        with pytest.raises(ValueError):
            YearMonth.parse(text)

    def test_boundaries(self):
        month = YearMonth(2024, 2)
        assert month.first_day == date(2024, 2, 1)
        assert month.last_day == date(2024, 2, 29)
        assert month.days_in_month == 29

    def test_next_rolls_over_year(self):
        assert YearMonth(2024, 12).next() == YearMonth(2025, 1)

    def test_chronological_ordering(self):
        assert YearMonth(2023, 12) < YearMonth(2024, 1) < YearMonth(2024, 2)


class TestIterMonths:
    def test_inclusive_range(self):
        months = list(iter_months(YearMonth(2023, 11), YearMonth(2024, 2)))
        assert months == [
            YearMonth(2023, 11),
            YearMonth(2023, 12),
            YearMonth(2024, 1),
            YearMonth(2024, 2),
        ]

    def test_empty_when_start_after_end(self):
        assert list(iter_months(YearMonth(2024, 3), YearMonth(2024, 2))) == []
