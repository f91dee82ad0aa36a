"""Read-only data sources consumed by the reconciliation services.

Each source returns validated domain entities. Implementations decide where
the data comes from; repositories.py provides the SQLAlchemy ones.
"""

from abc import ABC, abstractmethod
from datetime import date

from src.domain.charges import FinancialDocument, PropertyChargeShare, WaterMeterReading
from src.domain.lease import Lease, Payment, RentRevision


class LeaseSource(ABC):
    """Fetch leases by ID."""

    @abstractmethod
    async def get(self, lease_id: int) -> Lease | None:
        """Lease with this ID, or None."""

    @abstractmethod
    async def list_active(self, on: date) -> list[Lease]:
        """Leases started on or before the date and not yet ended."""


class RentRevisionSource(ABC):
    """Fetch the revision history of a lease."""

    @abstractmethod
    async def list_for_lease(self, lease_id: int) -> list[RentRevision]:
        """Revisions of the lease, ascending by effective date."""


class PaymentSource(ABC):
    """Fetch payments of a lease."""

    @abstractmethod
    async def list_for_lease(
        self,
        lease_id: int,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> list[Payment]:
        """Payments dated within [period_start, period_end]; None means unbounded."""


class FinancialDocumentSource(ABC):
    """Fetch expense documents of a building."""

    @abstractmethod
    async def list_for_building(self, building_id: int) -> list[FinancialDocument]:
        """All documents of the building, regardless of date or inclusion flag."""


class ChargeShareSource(ABC):
    """Fetch configured charge shares of a property."""

    @abstractmethod
    async def list_for_property(self, property_id: int) -> list[PropertyChargeShare]:
        """One share per configured category."""


class WaterReadingSource(ABC):
    """Fetch water meter readings of a property."""

    @abstractmethod
    async def list_for_property(self, property_id: int) -> list[WaterMeterReading]:
        """All readings of the property, in any order."""


__all__ = [
    "ChargeShareSource",
    "FinancialDocumentSource",
    "LeaseSource",
    "PaymentSource",
    "RentRevisionSource",
    "WaterReadingSource",
]
