"""Rent ledger: month-by-month reconciliation of rent due against rent paid.

Running balance convention: positive = tenant credit, negative = tenant debt.

For each month:
    balance_after = balance_before + total_paid - monthly_rent

Receipt classification uses an absolute tolerance (default 0.01) so that
rounding in monthly totals never turns an exact match into a partial or an
overpayment:

    total_paid == 0:
        balance_before > 0 and balance_after >= -tol  -> FULL (credit covered it)
        balance_before > 0 and balance_after <  -tol  -> PARTIAL
        otherwise                                     -> UNPAID
    total_paid > 0:
        balance_after >  tol                          -> OVERPAYMENT
        balance_after >= -tol                         -> FULL
        otherwise                                     -> PARTIAL
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.lease import Lease, Payment, RentRevision
from src.domain.money import to_decimal
from src.domain.periods import YearMonth, as_date, iter_months
from src.services.errors import NotFoundError
from src.services.rent_revision_service import (
    ApplicableRent,
    RentForMonth,
    RentRevisionResolver,
)
from src.services.sources import LeaseSource, PaymentSource, RentRevisionSource

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = Decimal("0.01")
DEFAULT_WINDOW_MONTHS = 24


class ReceiptType(str, Enum):
    """Outcome of a ledger month."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    FULL = "full"
    OVERPAYMENT = "overpayment"


class MonthlyLedgerRow(NamedTuple):
    """One month of a lease ledger."""

    month: YearMonth
    monthly_rent: Decimal
    payments: tuple[Payment, ...]
    total_paid: Decimal
    balance_before: Decimal
    balance_after: Decimal
    receipt_type: ReceiptType


class LeaseBalance(NamedTuple):
    """Cumulative balance of a lease since its start."""

    total_paid: Decimal
    total_expected: Decimal
    balance: Decimal


class PaymentBalance(NamedTuple):
    """Lease balance on the day before a payment and on the payment day."""

    balance_before: Decimal
    balance_after: Decimal
    payment_amount: Decimal


class PaymentStatus(NamedTuple):
    """Whether the reference month is settled and whether payment was late."""

    is_up_to_date: bool
    is_late: bool
    expected_payment_date: date
    last_payment_date: date | None


def classify_receipt(
    balance_before: Decimal,
    total_paid: Decimal,
    balance_after: Decimal,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> ReceiptType:
    """Classify a ledger month (see module docstring for the rule table)."""
    if total_paid == 0:
        if balance_before > 0:
            if balance_after >= -tolerance:
                return ReceiptType.FULL
            return ReceiptType.PARTIAL
        return ReceiptType.UNPAID

    if balance_after > tolerance:
        return ReceiptType.OVERPAYMENT
    if balance_after >= -tolerance:
        return ReceiptType.FULL
    return ReceiptType.PARTIAL


def group_payments_by_month(payments: Iterable[Payment]) -> dict[YearMonth, list[Payment]]:
    """Bucket payments by calendar month of payment, newest first within a month."""
    grouped: dict[YearMonth, list[Payment]] = defaultdict(list)
    for payment in payments:
        grouped[payment.month].append(payment)
    for month_payments in grouped.values():
        month_payments.sort(key=lambda p: p.payment_date, reverse=True)
    return dict(grouped)


class LedgerBalanceCalculator:
    """Pure ledger computations over a lease, its revisions and its payments."""

    def __init__(
        self,
        tolerance: Decimal = DEFAULT_TOLERANCE,
        window_months: int = DEFAULT_WINDOW_MONTHS,
        resolver: RentRevisionResolver | None = None,
    ):
        """Initialize calculator.

        Args:
            tolerance: Absolute tolerance for receipt classification
            window_months: Default number of trailing months in a ledger
            resolver: Rent revision resolver (a fresh one by default)
        """
        if tolerance < 0:
            raise ValueError("tolerance cannot be negative")
        if window_months < 1:
            raise ValueError("window_months must be at least 1")
        self.tolerance = to_decimal(tolerance)
        self.window_months = window_months
        self.resolver = resolver or RentRevisionResolver()

    def ledger_months(
        self,
        lease: Lease,
        reference_date: date,
        window_months: int | None = None,
    ) -> list[YearMonth]:
        """Months from lease start through the reference date, trailing window only."""
        window = window_months if window_months is not None else self.window_months
        if window < 1:
            raise ValueError("window_months must be at least 1")
        months = list(
            iter_months(YearMonth.of(lease.start_date), YearMonth.of(as_date(reference_date)))
        )
        return months[-window:]

    def build_ledger(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        payments: Iterable[Payment],
        reference_date: date,
        window_months: int | None = None,
        newest_first: bool = True,
    ) -> list[MonthlyLedgerRow]:
        """Build the month-by-month ledger of a lease.

        The running balance starts at zero on the first month of the window.
        Payments dated outside the window months are ignored.

        Args:
            lease: Lease to reconcile
            revisions: Rent revision history (any order)
            payments: Payments of the lease (any order)
            reference_date: Last day to include (its month is the last row)
            window_months: Trailing months to keep (default: calculator setting)
            newest_first: Row order of the returned list

        Returns:
            List of MonthlyLedgerRow; empty when the lease starts after the
            reference date
        """
        ordered_revisions = self.resolver.sort_revisions(revisions)
        payments_by_month = group_payments_by_month(payments)

        rows: list[MonthlyLedgerRow] = []
        running_balance = Decimal("0")

        for month in self.ledger_months(lease, reference_date, window_months):
            month_payments = payments_by_month.get(month, [])
            monthly_rent = self.resolver.rent_for_month(lease, ordered_revisions, month).total_amount
            total_paid = sum((p.amount.amount for p in month_payments), Decimal("0"))

            balance_before = running_balance
            running_balance = balance_before + total_paid - monthly_rent
            balance_after = running_balance

            rows.append(
                MonthlyLedgerRow(
                    month=month,
                    monthly_rent=monthly_rent,
                    payments=tuple(month_payments),
                    total_paid=total_paid,
                    balance_before=balance_before,
                    balance_after=balance_after,
                    receipt_type=classify_receipt(
                        balance_before, total_paid, balance_after, self.tolerance
                    ),
                )
            )

        logger.debug("Built %d ledger rows for lease %s", len(rows), lease.id)

        if newest_first:
            rows.reverse()
        return rows

    def calculate_balance(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        payments: Iterable[Payment],
        up_to: date,
    ) -> LeaseBalance:
        """Cumulative balance from lease start up to (and including) a date.

        Every month whose first day is on or before up_to is due in full;
        only payments dated between lease start and up_to count.
        """
        up_to = as_date(up_to)
        ordered_revisions = self.resolver.sort_revisions(revisions)

        total_paid = sum(
            (
                p.amount.amount
                for p in payments
                if lease.start_date <= p.payment_date <= up_to
            ),
            Decimal("0"),
        )

        total_expected = sum(
            (
                self.resolver.rent_for_month(lease, ordered_revisions, month).total_amount
                for month in iter_months(YearMonth.of(lease.start_date), YearMonth.of(up_to))
            ),
            Decimal("0"),
        )

        return LeaseBalance(
            total_paid=total_paid,
            total_expected=total_expected,
            balance=total_paid - total_expected,
        )

    def balance_around_payment(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        payments: Iterable[Payment],
        payment_id: int,
    ) -> PaymentBalance:
        """Balance on the day before a payment and on the payment day itself.

        Raises:
            NotFoundError: If no payment with this ID belongs to the list
        """
        payments = list(payments)
        revisions = list(revisions)
        payment = next((p for p in payments if p.id == payment_id), None)
        if payment is None:
            raise NotFoundError("Payment", payment_id)

        before = self.calculate_balance(
            lease, revisions, payments, payment.payment_date - timedelta(days=1)
        )
        after = self.calculate_balance(lease, revisions, payments, payment.payment_date)
        return PaymentBalance(
            balance_before=before.balance,
            balance_after=after.balance,
            payment_amount=payment.amount.amount,
        )

    def check_payment_status(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        payments: Iterable[Payment],
        reference_date: date,
    ) -> PaymentStatus:
        """Payment status of the reference month.

        Up to date when the month's ledger row is FULL or OVERPAYMENT. Late
        when the most recent payment of the month came after the due date,
        or when nothing was paid and the due date has passed.
        """
        reference_date = as_date(reference_date)
        payments = list(payments)
        month = YearMonth.of(reference_date)
        expected = lease.expected_payment_date(month)

        rows = self.build_ledger(lease, revisions, payments, reference_date, newest_first=True)
        current = rows[0] if rows and rows[0].month == month else None
        is_up_to_date = current is not None and current.receipt_type in (
            ReceiptType.FULL,
            ReceiptType.OVERPAYMENT,
        )

        month_payments = group_payments_by_month(payments).get(month, [])
        if month_payments:
            last_payment = month_payments[0]
            return PaymentStatus(
                is_up_to_date=is_up_to_date,
                is_late=last_payment.is_late(expected),
                expected_payment_date=expected,
                last_payment_date=last_payment.payment_date,
            )

        return PaymentStatus(
            is_up_to_date=is_up_to_date,
            is_late=reference_date > expected,
            expected_payment_date=expected,
            last_payment_date=None,
        )


class LedgerService:
    """Async service fetching lease data through sources, then reconciling it.

    All fetches complete before the synchronous calculator runs.
    """

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
    ) -> "LedgerService":
        """Build the service on SQLAlchemy repositories sharing one session."""
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

    async def _load_lease(self, lease_id: int) -> Lease:
        lease = await self.lease_source.get(lease_id)
        if lease is None:
            logger.warning("Lease %s not found", lease_id)
            raise NotFoundError("Lease", lease_id)
        return lease

    async def _load(
        self, lease_id: int, up_to: date | None
    ) -> tuple[Lease, list[RentRevision], list[Payment]]:
        lease = await self._load_lease(lease_id)
        revisions = await self.revision_source.list_for_lease(lease_id)
        payments = await self.payment_source.list_for_lease(
            lease_id, YearMonth.of(lease.start_date).first_day, up_to
        )
        return lease, revisions, payments

    async def get_ledger(
        self,
        lease_id: int,
        reference_date: date,
        window_months: int | None = None,
        newest_first: bool = True,
    ) -> list[MonthlyLedgerRow]:
        """Ledger rows for a lease up to the reference date.

        Raises:
            NotFoundError: If the lease does not exist
        """
        lease, revisions, payments = await self._load(lease_id, as_date(reference_date))
        rows = self.calculator.build_ledger(
            lease, revisions, payments, reference_date, window_months, newest_first
        )
        logger.info(
            "Ledger for lease %s: %d months, %d payments", lease_id, len(rows), len(payments)
        )
        return rows

    async def get_balance(self, lease_id: int, up_to: date) -> LeaseBalance:
        """Cumulative balance of a lease up to a date."""
        lease, revisions, payments = await self._load(lease_id, as_date(up_to))
        return self.calculator.calculate_balance(lease, revisions, payments, up_to)

    async def get_payment_balance(self, lease_id: int, payment_id: int) -> PaymentBalance:
        """Balance before and after one payment of a lease."""
        lease, revisions, payments = await self._load(lease_id, None)
        return self.calculator.balance_around_payment(lease, revisions, payments, payment_id)

    async def get_payment_status(self, lease_id: int, reference_date: date) -> PaymentStatus:
        """Payment status of the reference month for a lease."""
        lease, revisions, payments = await self._load(lease_id, as_date(reference_date))
        return self.calculator.check_payment_status(lease, revisions, payments, reference_date)

    async def get_rent_history(
        self, lease_id: int, start_month: YearMonth, end_month: YearMonth
    ) -> list[RentForMonth]:
        """Rent due for each month of a range."""
        lease = await self._load_lease(lease_id)
        revisions = await self.revision_source.list_for_lease(lease_id)
        return self.calculator.resolver.rent_for_month_range(
            lease, revisions, start_month, end_month
        )

    async def get_applicable_rent(self, lease_id: int, on: date) -> ApplicableRent:
        """Rent and charges in force for a lease on a date."""
        lease = await self._load_lease(lease_id)
        revisions = await self.revision_source.list_for_lease(lease_id)
        return self.calculator.resolver.applicable_rent(lease, revisions, on)


__all__ = [
    "DEFAULT_TOLERANCE",
    "DEFAULT_WINDOW_MONTHS",
    "LeaseBalance",
    "LedgerBalanceCalculator",
    "LedgerService",
    "MonthlyLedgerRow",
    "PaymentBalance",
    "PaymentStatus",
    "ReceiptType",
    "classify_receipt",
    "group_payments_by_month",
]
