"""Lease-side domain entities: Lease, RentRevision and Payment.

Each entity is a frozen dataclass validated in __post_init__, so an
instance that exists is always consistent. Amounts are Money values;
dates are plain dates (datetimes are truncated on construction).
"""

from dataclasses import dataclass
from datetime import date

from src.domain.money import Money
from src.domain.periods import YearMonth, as_date
from src.services.errors import ValidationError


def _money(value) -> Money:
    return value if isinstance(value, Money) else Money(value)


@dataclass(frozen=True)
class Lease:
    """Rental contract for one property."""

    id: int
    property_id: int
    tenant_ids: tuple[int, ...]
    start_date: date
    rent_amount: Money
    charges_amount: Money
    payment_due_day: int
    end_date: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenant_ids", tuple(self.tenant_ids))
        object.__setattr__(self, "start_date", as_date(self.start_date))
        object.__setattr__(self, "rent_amount", _money(self.rent_amount))
        object.__setattr__(self, "charges_amount", _money(self.charges_amount))
        if self.end_date is not None:
            object.__setattr__(self, "end_date", as_date(self.end_date))

        if not self.tenant_ids:
            raise ValidationError("Lease must have at least one tenant")
        if not 1 <= self.payment_due_day <= 31:
            raise ValidationError("Payment due day must be between 1 and 31")
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValidationError("End date must be after start date")

    @property
    def total_amount(self) -> Money:
        return self.rent_amount + self.charges_amount

    def is_active(self, on: date) -> bool:
        """Whether the lease runs on the given day."""
        on = as_date(on)
        if on < self.start_date:
            return False
        if self.end_date is not None and on > self.end_date:
            return False
        return True

    def expected_payment_date(self, for_month: date | YearMonth) -> date:
        """Due date within a month; the due day is clamped to the month length."""
        month = for_month if isinstance(for_month, YearMonth) else YearMonth.of(for_month)
        return date(month.year, month.month, min(self.payment_due_day, month.days_in_month))


@dataclass(frozen=True)
class RentRevision:
    """Dated change to a lease's rent and charges, effective until superseded."""

    id: int
    lease_id: int
    effective_date: date
    rent_amount: Money
    charges_amount: Money
    reason: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "effective_date", as_date(self.effective_date))
        object.__setattr__(self, "rent_amount", _money(self.rent_amount))
        object.__setattr__(self, "charges_amount", _money(self.charges_amount))

    @property
    def total_amount(self) -> Money:
        return self.rent_amount + self.charges_amount

    def is_effective_for_month(self, month: YearMonth) -> bool:
        """Whether this revision already applies on the first day of the month."""
        return self.effective_date <= month.first_day


@dataclass(frozen=True)
class Payment:
    """Amount received from the tenant for a lease."""

    id: int
    lease_id: int
    amount: Money
    payment_date: date
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _money(self.amount))
        object.__setattr__(self, "payment_date", as_date(self.payment_date))

    @property
    def month(self) -> YearMonth:
        return YearMonth.of(self.payment_date)

    def is_late(self, expected_date: date) -> bool:
        return self.payment_date > as_date(expected_date)


__all__ = ["Lease", "RentRevision", "Payment"]
