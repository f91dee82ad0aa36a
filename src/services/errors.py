"""Exception classes for the financial reconciliation core.

Fatal errors derive from FinanceError. Settlement warnings are not
exceptions: they are collected into SettlementWarning records and returned
alongside the best-effort result.
"""

from typing import NamedTuple


class FinanceError(Exception):
    """Base exception for ledger and settlement errors."""

    pass


class NotFoundError(FinanceError):
    """Requested lease, payment or property does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ValidationError(FinanceError, ValueError):
    """Entity rejected at construction time (negative amount, bad dates, etc.)."""

    pass


class ConsumptionCalculationError(FinanceError, ArithmeticError):
    """Water consumption rate is undefined (readings share the same date)."""

    pass


class SettlementWarning(NamedTuple):
    """Non-fatal issue found while computing a charge settlement."""

    code: str
    message: str
    category: str | None = None


# Warning codes
MISSING_PERCENTAGE = "missing_percentage"
INSUFFICIENT_READINGS = "insufficient_readings"
MISSING_WATER_CONSUMPTION = "missing_water_consumption"
CONSUMPTION_ERROR = "consumption_error"


__all__ = [
    "FinanceError",
    "NotFoundError",
    "ValidationError",
    "ConsumptionCalculationError",
    "SettlementWarning",
    "MISSING_PERCENTAGE",
    "INSUFFICIENT_READINGS",
    "MISSING_WATER_CONSUMPTION",
    "CONSUMPTION_ERROR",
]
