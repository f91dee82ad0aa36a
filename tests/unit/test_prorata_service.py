"""Unit tests for prorated rent."""

from datetime import date
from decimal import Decimal

import pytest

from src.domain.money import Money
from src.services.errors import ValidationError
from src.services.prorata_service import CalculationType, ProrataCalculation


class TestProrataCalculation:
    """Test move-in and move-out proration."""

    def test_half_month_move_in(self):
        calc = ProrataCalculation.create(
            Money(Decimal("900")),
            date(2024, 4, 16),
            date(2024, 4, 30),
            30,
            CalculationType.MOVE_IN,
        )

        assert calc.days_occupied == 15
        assert calc.daily_rate == Money(Decimal("30.00"))
        assert calc.prorata_amount == Money(Decimal("450.00"))
        assert calc.percentage == Decimal("50.00")

    def test_amount_uses_unrounded_daily_rate(self):
        calc = ProrataCalculation.create(
            Money(Decimal("1000")),
            date(2024, 1, 1),
            date(2024, 1, 10),
            31,
            CalculationType.MOVE_OUT,
        )

        assert calc.daily_rate.amount == Decimal("32.26")
        assert calc.prorata_amount.amount == Decimal("322.58")

    def test_single_day(self):
        calc = ProrataCalculation.create(
            Money(Decimal("620")), date(2024, 3, 31), date(2024, 3, 31), 31, "MOVE_IN"
        )
        assert calc.days_occupied == 1
        assert calc.calculation_type is CalculationType.MOVE_IN
        assert calc.prorata_amount.amount == Decimal("20.00")

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError, match="before or equal"):
            ProrataCalculation.create(
                Money(Decimal("900")),
                date(2024, 4, 20),
                date(2024, 4, 10),
                30,
                CalculationType.MOVE_OUT,
            )

    @pytest.mark.parametrize("days", [27, 32])
    def test_days_in_month_range(self, days):
        with pytest.raises(ValidationError, match="between 28 and 31"):
            ProrataCalculation.create(
                Money(Decimal("900")),
                date(2024, 4, 1),
                date(2024, 4, 10),
                days,
                CalculationType.MOVE_IN,
            )

    def test_summary(self):
        calc = ProrataCalculation.create(
            Money(Decimal("900")),
            date(2024, 4, 16),
            date(2024, 4, 30),
            30,
            CalculationType.MOVE_IN,
        )
        summary = calc.summary()
        assert summary["prorata_amount"] == Decimal("450.00")
        assert summary["calculation_type"] == "MOVE_IN"
        assert summary["days_in_month"] == 30
