"""SQLAlchemy implementations of the reconciliation data sources.

Rows are converted into validated domain entities on the way out, so an
inconsistent row (negative amount, bad due day, ...) surfaces as a
ValidationError at fetch time instead of corrupting a computation.
"""

import logging
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src import domain
from src.models.financial_document import FinancialDocument
from src.models.lease import Lease
from src.models.payment import Payment
from src.models.property_charge_share import PropertyChargeShare
from src.models.rent_revision import RentRevision
from src.models.water_meter_reading import WaterMeterReading
from src.services.sources import (
    ChargeShareSource,
    FinancialDocumentSource,
    LeaseSource,
    PaymentSource,
    RentRevisionSource,
    WaterReadingSource,
)

logger = logging.getLogger(__name__)


def lease_to_domain(row: Lease) -> domain.Lease:
    return domain.Lease(
        id=row.id,
        property_id=row.property_id,
        tenant_ids=tuple(t.tenant_id for t in row.tenants),
        start_date=row.start_date,
        end_date=row.end_date,
        rent_amount=row.rent_amount,
        charges_amount=row.charges_amount,
        payment_due_day=row.payment_due_day,
    )


class SqlAlchemyLeaseRepository(LeaseSource):
    """Leases from the leases table (tenants eagerly loaded)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, lease_id: int) -> domain.Lease | None:
        stmt = select(Lease).where(Lease.id == lease_id)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return lease_to_domain(row) if row else None

    async def list_active(self, on: date) -> list[domain.Lease]:
        stmt = (
            select(Lease)
            .where(
                Lease.start_date <= on,
                or_(Lease.end_date.is_(None), Lease.end_date >= on),
            )
            .order_by(Lease.id)
        )
        result = await self.session.execute(stmt)
        return [lease_to_domain(row) for row in result.scalars().all()]


class SqlAlchemyRentRevisionRepository(RentRevisionSource):
    """Rent revisions ordered by effective date."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_lease(self, lease_id: int) -> list[domain.RentRevision]:
        stmt = (
            select(RentRevision)
            .where(RentRevision.lease_id == lease_id)
            .order_by(RentRevision.effective_date.asc(), RentRevision.id.asc())
        )
        result = await self.session.execute(stmt)
        return [
            domain.RentRevision(
                id=row.id,
                lease_id=row.lease_id,
                effective_date=row.effective_date,
                rent_amount=row.rent_amount,
                charges_amount=row.charges_amount,
                reason=row.reason,
            )
            for row in result.scalars().all()
        ]


class SqlAlchemyPaymentRepository(PaymentSource):
    """Payments of a lease within an optional date range."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_lease(
        self,
        lease_id: int,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> list[domain.Payment]:
        stmt = select(Payment).where(Payment.lease_id == lease_id)
        if period_start is not None:
            stmt = stmt.where(Payment.payment_date >= period_start)
        if period_end is not None:
            stmt = stmt.where(Payment.payment_date <= period_end)
        stmt = stmt.order_by(Payment.payment_date.asc(), Payment.id.asc())

        result = await self.session.execute(stmt)
        return [
            domain.Payment(
                id=row.id,
                lease_id=row.lease_id,
                amount=row.amount,
                payment_date=row.payment_date,
                notes=row.notes,
            )
            for row in result.scalars().all()
        ]


class SqlAlchemyFinancialDocumentRepository(FinancialDocumentSource):
    """Expense documents of a building."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_building(self, building_id: int) -> list[domain.FinancialDocument]:
        stmt = (
            select(FinancialDocument)
            .where(FinancialDocument.building_id == building_id)
            .order_by(FinancialDocument.document_date.asc(), FinancialDocument.id.asc())
        )
        result = await self.session.execute(stmt)
        return [
            domain.FinancialDocument(
                id=row.id,
                building_id=row.building_id,
                category=row.category,
                date=row.document_date,
                amount=row.amount,
                description=row.description,
                included_in_charges=row.included_in_charges,
                document_path=row.document_path,
                water_consumption=row.water_consumption,
            )
            for row in result.scalars().all()
        ]


class SqlAlchemyChargeShareRepository(ChargeShareSource):
    """Configured charge shares of a property."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_property(self, property_id: int) -> list[domain.PropertyChargeShare]:
        stmt = select(PropertyChargeShare).where(PropertyChargeShare.property_id == property_id)
        result = await self.session.execute(stmt)
        return [
            domain.PropertyChargeShare(
                id=row.id,
                property_id=row.property_id,
                category=row.category,
                percentage=row.percentage,
            )
            for row in result.scalars().all()
        ]


class SqlAlchemyWaterReadingRepository(WaterReadingSource):
    """Water meter readings of a property, newest first."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_property(self, property_id: int) -> list[domain.WaterMeterReading]:
        stmt = (
            select(WaterMeterReading)
            .where(WaterMeterReading.property_id == property_id)
            .order_by(WaterMeterReading.reading_date.desc())
        )
        result = await self.session.execute(stmt)
        readings = [
            domain.WaterMeterReading(
                id=row.id,
                property_id=row.property_id,
                reading_date=row.reading_date,
                meter_reading=row.meter_reading,
                document_path=row.document_path,
            )
            for row in result.scalars().all()
        ]
        logger.debug("Loaded %d water readings for property %s", len(readings), property_id)
        return readings


__all__ = [
    "SqlAlchemyChargeShareRepository",
    "SqlAlchemyFinancialDocumentRepository",
    "SqlAlchemyLeaseRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyRentRevisionRepository",
    "SqlAlchemyWaterReadingRepository",
    "lease_to_domain",
]
