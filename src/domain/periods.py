"""Calendar helpers: year-month values, month arithmetic and day counts."""

import calendar
from datetime import date, datetime
from typing import Iterator, NamedTuple


def as_date(value: date) -> date:
    """Truncate a datetime to its calendar date; dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_months(value: date, months: int) -> date:
    """Shift a date by a number of calendar months.

    The day is clamped to the length of the target month, so
    2024-03-31 minus one month is 2024-02-29.
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (as_date(end) - as_date(start)).days


class YearMonth(NamedTuple):
    """A calendar month, ordered chronologically."""

    year: int
    month: int

    @classmethod
    def of(cls, value: date) -> "YearMonth":
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """Parse a YYYY-MM string."""
        try:
            year_str, month_str = text.split("-")
            year, month = int(year_str), int(month_str)
        except ValueError as e:
            raise ValueError(f"Cannot parse month '{text}' (expected YYYY-MM)") from e
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range in '{text}'")
        return cls(year, month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def next(self) -> "YearMonth":
        if self.month == 12:
            return YearMonth(self.year + 1, 1)
        return YearMonth(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def iter_months(start: YearMonth, end: YearMonth) -> Iterator[YearMonth]:
    """Yield every month from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current = current.next()
