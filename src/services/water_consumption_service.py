"""Annual water consumption estimate from cumulative meter readings.

Prefers two readings at least 365 days apart (ACTUAL). When no such pair
exists, the delta between the two most recent readings is scaled to a
365-day year (EXTRAPOLATED).
"""

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Sequence

from src.domain.charges import WaterMeterReading
from src.domain.money import round2
from src.domain.periods import days_between
from src.services.errors import ConsumptionCalculationError

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


class ConsumptionMethod(str, Enum):
    """How an annual consumption figure was obtained."""

    ACTUAL = "ACTUAL"
    EXTRAPOLATED = "EXTRAPOLATED"


class WaterConsumptionResult(NamedTuple):
    """Annual consumption of a property in m³."""

    annual_consumption: Decimal
    method: ConsumptionMethod
    period_start: date
    period_end: date
    days_between_readings: int


class WaterConsumptionCalculator:
    """Estimate a property's annual water consumption."""

    def __init__(self, min_days: int = DAYS_PER_YEAR):
        """Initialize calculator.

        Args:
            min_days: Minimum spacing for a pair to count as a full year
        """
        self.min_days = min_days

    def annual_consumption(
        self, readings: Sequence[WaterMeterReading]
    ) -> WaterConsumptionResult | None:
        """Calculate annual consumption from readings in any order.

        Returns:
            WaterConsumptionResult, or None if fewer than 2 readings

        Raises:
            ConsumptionCalculationError: If extrapolation is needed and the
                two most recent readings share the same date
        """
        if len(readings) < 2:
            return None

        ordered = sorted(readings, key=lambda r: r.reading_date, reverse=True)

        pair = self._find_year_pair(ordered)
        if pair is not None:
            newer, older = pair
            result = WaterConsumptionResult(
                annual_consumption=newer.meter_reading - older.meter_reading,
                method=ConsumptionMethod.ACTUAL,
                period_start=older.reading_date,
                period_end=newer.reading_date,
                days_between_readings=days_between(older.reading_date, newer.reading_date),
            )
        else:
            result = self._extrapolate(ordered[0], ordered[1])

        logger.debug(
            "Water consumption %s m³/year (%s, %s to %s)",
            result.annual_consumption,
            result.method.value,
            result.period_start,
            result.period_end,
        )
        return result

    def _find_year_pair(
        self, ordered: Sequence[WaterMeterReading]
    ) -> tuple[WaterMeterReading, WaterMeterReading] | None:
        """Find (newer, older) spaced by min_days, consecutive pairs first."""
        for newer, older in zip(ordered, ordered[1:]):
            if days_between(older.reading_date, newer.reading_date) >= self.min_days:
                return newer, older

        for i, newer in enumerate(ordered[:-1]):
            for older in ordered[i + 1 :]:
                if days_between(older.reading_date, newer.reading_date) >= self.min_days:
                    return newer, older

        return None

    @staticmethod
    def _extrapolate(
        newer: WaterMeterReading, older: WaterMeterReading
    ) -> WaterConsumptionResult:
        days = days_between(older.reading_date, newer.reading_date)
        if days == 0:
            raise ConsumptionCalculationError(
                "Cannot calculate consumption: readings have same date"
            )

        consumption = newer.meter_reading - older.meter_reading
        annual = round2(consumption / Decimal(days) * DAYS_PER_YEAR)

        return WaterConsumptionResult(
            annual_consumption=annual,
            method=ConsumptionMethod.EXTRAPOLATED,
            period_start=older.reading_date,
            period_end=newer.reading_date,
            days_between_readings=days,
        )


__all__ = [
    "ConsumptionMethod",
    "WaterConsumptionCalculator",
    "WaterConsumptionResult",
]
