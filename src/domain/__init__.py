"""Validated, immutable domain entities consumed by the reconciliation services."""

from src.domain.charges import (
    DocumentCategory,
    FinancialDocument,
    PropertyChargeShare,
    WaterMeterReading,
)
from src.domain.lease import Lease, Payment, RentRevision
from src.domain.money import Money
from src.domain.periods import YearMonth

__all__ = [
    "DocumentCategory",
    "FinancialDocument",
    "Lease",
    "Money",
    "Payment",
    "PropertyChargeShare",
    "RentRevision",
    "WaterMeterReading",
    "YearMonth",
]
