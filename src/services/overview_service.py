"""Current-month rent overview across all active leases.

Lists the leases whose running balance is off by more than the tolerance
after the reference month (tenant in debt or in credit). Each lease is
reconciled independently: data for all leases is fetched first, then every
ledger is computed on its own snapshot.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.lease import Lease
from src.domain.periods import YearMonth, as_date
from src.services.ledger_service import LedgerBalanceCalculator, MonthlyLedgerRow, ReceiptType
from src.services.sources import LeaseSource, PaymentSource, RentRevisionSource

logger = logging.getLogger(__name__)


class RentOverviewEntry(NamedTuple):
    """Reference-month ledger row of a lease that is not settled to zero."""

    lease_id: int
    property_id: int
    tenant_ids: tuple[int, ...]
    month: YearMonth
    rent_due: Decimal
    amount_paid: Decimal
    balance_before: Decimal
    balance_after: Decimal
    receipt_type: ReceiptType


class RentOverviewService:
    """Build the unpaid/overpaid overview for a reference month."""

    def __init__(
        self,
        lease_source: LeaseSource,
        revision_source: RentRevisionSource,
        payment_source: PaymentSource,
        calculator: LedgerBalanceCalculator | None = None,
    ):
        self.lease_source = lease_source
        self.revision_source = revision_source
        self.payment_source = payment_source
        self.calculator = calculator or LedgerBalanceCalculator()

    @classmethod
    def from_session(
        cls,
        session: AsyncSession,
        calculator: LedgerBalanceCalculator | None = None,
    ) -> "RentOverviewService":
        from src.services.repositories import (
            SqlAlchemyLeaseRepository,
            SqlAlchemyPaymentRepository,
            SqlAlchemyRentRevisionRepository,
        )

        return cls(
            SqlAlchemyLeaseRepository(session),
            SqlAlchemyRentRevisionRepository(session),
            SqlAlchemyPaymentRepository(session),
            calculator,
        )

    def entry_for(self, lease: Lease, row: MonthlyLedgerRow) -> RentOverviewEntry | None:
        """Overview entry for a ledger row, or None when the balance is settled."""
        if abs(row.balance_after) <= self.calculator.tolerance:
            return None
        return RentOverviewEntry(
            lease_id=lease.id,
            property_id=lease.property_id,
            tenant_ids=lease.tenant_ids,
            month=row.month,
            rent_due=row.monthly_rent,
            amount_paid=row.total_paid,
            balance_before=row.balance_before,
            balance_after=row.balance_after,
            receipt_type=row.receipt_type,
        )

    async def current_month_overview(self, reference_date: date) -> list[RentOverviewEntry]:
        """Entries for every active lease with a non-zero balance after the reference month."""
        reference_date = as_date(reference_date)
        leases = await self.lease_source.list_active(reference_date)

        snapshots = []
        for lease in leases:
            revisions = await self.revision_source.list_for_lease(lease.id)
            payments = await self.payment_source.list_for_lease(
                lease.id, YearMonth.of(lease.start_date).first_day, reference_date
            )
            snapshots.append((lease, revisions, payments))

        entries: list[RentOverviewEntry] = []
        for lease, revisions, payments in snapshots:
            rows = self.calculator.build_ledger(
                lease, revisions, payments, reference_date, newest_first=True
            )
            if not rows:
                continue
            entry = self.entry_for(lease, rows[0])
            if entry is not None:
                entries.append(entry)

        logger.info(
            "Rent overview %s: %d of %d active leases unsettled",
            YearMonth.of(reference_date),
            len(entries),
            len(leases),
        )
        return entries


__all__ = ["RentOverviewEntry", "RentOverviewService"]
