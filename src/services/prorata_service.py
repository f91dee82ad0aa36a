"""Prorated rent for a partial month at move-in or move-out."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from src.domain.money import Money, round2
from src.domain.periods import as_date, days_between
from src.services.errors import ValidationError


class CalculationType(str, Enum):
    MOVE_IN = "MOVE_IN"
    MOVE_OUT = "MOVE_OUT"


@dataclass(frozen=True)
class ProrataCalculation:
    """Rent for the days occupied in a month, both boundary days included."""

    monthly_rent: Money
    start_date: date
    end_date: date
    days_in_month: int
    calculation_type: CalculationType
    days_occupied: int

    @classmethod
    def create(
        cls,
        monthly_rent: Money,
        start_date: date,
        end_date: date,
        days_in_month: int,
        calculation_type: CalculationType,
    ) -> "ProrataCalculation":
        """Validate inputs and count occupied days.

        Raises:
            ValidationError: If start is after end or days_in_month is not 28-31
        """
        start_date, end_date = as_date(start_date), as_date(end_date)
        if start_date > end_date:
            raise ValidationError("Start date must be before or equal to end date")
        if not 28 <= days_in_month <= 31:
            raise ValidationError("Days in month must be between 28 and 31")

        return cls(
            monthly_rent=monthly_rent,
            start_date=start_date,
            end_date=end_date,
            days_in_month=days_in_month,
            calculation_type=CalculationType(calculation_type),
            days_occupied=days_between(start_date, end_date) + 1,
        )

    @property
    def daily_rate(self) -> Money:
        return Money(round2(self.monthly_rent.amount / self.days_in_month))

    @property
    def prorata_amount(self) -> Money:
        # Unrounded daily rate; only the product is rounded
        return Money(round2(self.monthly_rent.amount / self.days_in_month * self.days_occupied))

    @property
    def percentage(self) -> Decimal:
        return round2(Decimal(self.days_occupied) / Decimal(self.days_in_month) * 100)

    def summary(self) -> dict:
        return {
            "monthly_rent": self.monthly_rent.amount,
            "daily_rate": self.daily_rate.amount,
            "days_occupied": self.days_occupied,
            "days_in_month": self.days_in_month,
            "percentage": self.percentage,
            "prorata_amount": self.prorata_amount.amount,
            "calculation_type": self.calculation_type.value,
        }


__all__ = ["CalculationType", "ProrataCalculation"]
