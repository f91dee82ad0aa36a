"""Unit tests for ledger_service.py."""

from datetime import date
from decimal import Decimal

import pytest

from src.domain.lease import Lease, Payment
from src.domain.periods import YearMonth
from src.services.errors import NotFoundError
from src.services.ledger_service import (
    LedgerBalanceCalculator,
    LedgerService,
    ReceiptType,
    classify_receipt,
    group_payments_by_month,
)
from src.services.sources import LeaseSource, PaymentSource, RentRevisionSource


def pay(payment_id, amount, payment_date):
    return Payment(id=payment_id, lease_id=1, amount=Decimal(amount), payment_date=payment_date)


@pytest.fixture
def calculator():
    return LedgerBalanceCalculator()


@pytest.fixture
def scenario_lease():
    """Lease from 2024-01-01 with rent 1000 + charges 100."""
    return Lease(
        id=1,
        property_id=10,
        tenant_ids=(100, 101),
        start_date=date(2024, 1, 1),
        rent_amount=Decimal("1000"),
        charges_amount=Decimal("100"),
        payment_due_day=5,
    )


class TestClassifyReceipt:
    """Test receipt classification rule table, including the ±0.01 boundaries."""

    @pytest.mark.parametrize(
        "before,paid,after,expected",
        [
            # Nothing paid
            ("0", "0", "-950", ReceiptType.UNPAID),
            ("-100", "0", "-1050", ReceiptType.UNPAID),
            ("1000", "0", "50", ReceiptType.FULL),
            ("950", "0", "0", ReceiptType.FULL),
            ("949.99", "0", "-0.01", ReceiptType.FULL),
            ("949.98", "0", "-0.02", ReceiptType.PARTIAL),
            ("500", "0", "-450", ReceiptType.PARTIAL),
            # Something paid
            ("0", "950", "0", ReceiptType.FULL),
            ("0", "950.01", "0.01", ReceiptType.FULL),
            ("0", "950.02", "0.02", ReceiptType.OVERPAYMENT),
            ("0", "949.99", "-0.01", ReceiptType.FULL),
            ("0", "949.98", "-0.02", ReceiptType.PARTIAL),
            ("0", "500", "-450", ReceiptType.PARTIAL),
            ("-950", "950", "-950", ReceiptType.PARTIAL),
            ("200", "950", "200", ReceiptType.OVERPAYMENT),
        ],
    )
    def test_rule_table(self, before, paid, after, expected):
        assert classify_receipt(Decimal(before), Decimal(paid), Decimal(after)) == expected

    def test_zero_tolerance(self):
        assert (
            classify_receipt(Decimal("0"), Decimal("949.99"), Decimal("-0.01"), Decimal("0"))
            == ReceiptType.PARTIAL
        )


class TestGroupPaymentsByMonth:
    def test_newest_first_within_month(self):
        payments = [
            pay(1, "400", date(2024, 3, 2)),
            pay(2, "550", date(2024, 3, 20)),
            pay(3, "950", date(2024, 2, 5)),
        ]
        grouped = group_payments_by_month(payments)
        assert [p.id for p in grouped[YearMonth(2024, 3)]] == [2, 1]
        assert [p.id for p in grouped[YearMonth(2024, 2)]] == [3]


class TestBuildLedger:
    """Test LedgerBalanceCalculator.build_ledger."""

    def test_end_to_end_march_scenario(self, calculator, scenario_lease):
        payments = [
            pay(1, "1100", date(2024, 1, 5)),
            pay(2, "1100", date(2024, 2, 5)),
            pay(3, "1100", date(2024, 3, 5)),
        ]

        rows = calculator.build_ledger(scenario_lease, [], payments, date(2024, 3, 15))

        march = rows[0]
        assert march.month == YearMonth(2024, 3)
        assert march.monthly_rent == Decimal("1100")
        assert march.total_paid == Decimal("1100")
        assert march.balance_before == Decimal("0")
        assert march.balance_after == Decimal("0")
        assert march.receipt_type == ReceiptType.FULL
        assert [p.id for p in march.payments] == [3]

    def test_balance_identity_holds_every_month(self, calculator, lease, march_revision):
        payments = [
            pay(1, "500", date(2024, 1, 3)),
            pay(2, "300", date(2024, 1, 28)),
            pay(3, "1500", date(2024, 3, 10)),
            pay(4, "1000.50", date(2024, 5, 1)),
        ]

        rows = calculator.build_ledger(
            lease, [march_revision], payments, date(2024, 6, 30), newest_first=False
        )

        assert len(rows) == 6
        for previous, row in zip(rows, rows[1:]):
            assert row.balance_before == previous.balance_after
        for row in rows:
            assert row.balance_after == row.balance_before + row.total_paid - row.monthly_rent

    def test_running_balance_and_revision(self, calculator, lease, march_revision):
        payments = [pay(1, "950", date(2024, 1, 5)), pay(2, "1100", date(2024, 3, 5))]

        rows = calculator.build_ledger(
            lease, [march_revision], payments, date(2024, 3, 31), newest_first=False
        )

        jan, feb, mar = rows
        assert jan.receipt_type == ReceiptType.FULL
        assert feb.receipt_type == ReceiptType.UNPAID
        assert feb.balance_after == Decimal("-950")
        assert mar.monthly_rent == Decimal("1000")
        assert mar.balance_after == Decimal("-850")
        assert mar.receipt_type == ReceiptType.PARTIAL

    def test_credit_covers_following_month(self, calculator, lease):
        payments = [pay(1, "1900", date(2024, 1, 5))]

        rows = calculator.build_ledger(lease, [], payments, date(2024, 2, 15), newest_first=False)

        assert rows[0].receipt_type == ReceiptType.OVERPAYMENT
        assert rows[1].receipt_type == ReceiptType.FULL
        assert rows[1].balance_after == Decimal("0")

    def test_row_order(self, calculator, lease):
        newest = calculator.build_ledger(lease, [], [], date(2024, 4, 10))
        oldest = calculator.build_ledger(lease, [], [], date(2024, 4, 10), newest_first=False)

        assert [r.month for r in newest] == list(reversed([r.month for r in oldest]))
        assert oldest[0].month == YearMonth(2024, 1)

    def test_window_limits_months_and_restarts_balance(self, lease):
        calculator = LedgerBalanceCalculator(window_months=3)
        payments = [pay(1, "5000", date(2024, 1, 5)), pay(2, "950", date(2024, 5, 5))]

        rows = calculator.build_ledger(lease, [], payments, date(2024, 6, 1), newest_first=False)

        assert [r.month for r in rows] == [YearMonth(2024, 4), YearMonth(2024, 5), YearMonth(2024, 6)]
        assert rows[0].balance_before == Decimal("0")
        assert rows[0].receipt_type == ReceiptType.UNPAID

    def test_window_override(self, calculator, lease):
        rows = calculator.build_ledger(lease, [], [], date(2024, 12, 1), window_months=2)
        assert [r.month for r in rows] == [YearMonth(2024, 12), YearMonth(2024, 11)]

    def test_default_window_is_24_months(self, calculator):
        old_lease = Lease(
            id=2,
            property_id=10,
            tenant_ids=(100,),
            start_date=date(2020, 1, 1),
            rent_amount=Decimal("800"),
            charges_amount=Decimal("0"),
            payment_due_day=1,
        )
        rows = calculator.build_ledger(old_lease, [], [], date(2024, 3, 15))
        assert len(rows) == 24
        assert rows[-1].month == YearMonth(2022, 4)

    def test_lease_starting_after_reference_has_no_rows(self, calculator, lease):
        assert calculator.build_ledger(lease, [], [], date(2023, 12, 31)) == []

    def test_idempotent(self, calculator, lease, march_revision):
        payments = [pay(1, "950", date(2024, 1, 5)), pay(2, "333.33", date(2024, 2, 9))]
        first = calculator.build_ledger(lease, [march_revision], payments, date(2024, 4, 1))
        second = calculator.build_ledger(lease, [march_revision], payments, date(2024, 4, 1))
        assert first == second

    def test_invalid_calculator_settings(self):
        with pytest.raises(ValueError):
            LedgerBalanceCalculator(tolerance=Decimal("-0.01"))
        with pytest.raises(ValueError):
            LedgerBalanceCalculator(window_months=0)


class TestBalances:
    """Test cumulative balance helpers."""

    @pytest.fixture
    def payments(self):
        return [
            pay(1, "950", date(2024, 1, 5)),
            pay(2, "950", date(2024, 2, 5)),
            pay(3, "1000", date(2024, 3, 5)),
        ]

    def test_calculate_balance(self, calculator, lease, march_revision, payments):
        balance = calculator.calculate_balance(lease, [march_revision], payments, date(2024, 3, 15))
        assert balance.total_expected == Decimal("2900")
        assert balance.total_paid == Decimal("2900")
        assert balance.balance == Decimal("0")

    def test_month_due_from_first_day(self, calculator, lease, march_revision, payments):
        balance = calculator.calculate_balance(lease, [march_revision], payments, date(2024, 3, 4))
        assert balance.total_paid == Decimal("1900")
        assert balance.balance == Decimal("-1000")

    def test_balance_around_payment(self, calculator, lease, march_revision, payments):
        result = calculator.balance_around_payment(lease, [march_revision], payments, 3)
        assert result.balance_before == Decimal("-1000")
        assert result.balance_after == Decimal("0")
        assert result.payment_amount == Decimal("1000")

    def test_unknown_payment(self, calculator, lease, payments):
        with pytest.raises(NotFoundError, match="Payment not found: 99"):
            calculator.balance_around_payment(lease, [], payments, 99)


class TestPaymentStatus:
    """Test check_payment_status."""

    def test_paid_on_time(self, calculator, lease):
        status = calculator.check_payment_status(
            lease, [], [pay(1, "950", date(2024, 1, 5))], date(2024, 1, 20)
        )
        assert status.is_up_to_date
        assert not status.is_late
        assert status.expected_payment_date == date(2024, 1, 5)
        assert status.last_payment_date == date(2024, 1, 5)

    def test_paid_late(self, calculator, lease):
        status = calculator.check_payment_status(
            lease, [], [pay(1, "950", date(2024, 1, 8))], date(2024, 1, 20)
        )
        assert status.is_up_to_date
        assert status.is_late

    def test_nothing_paid_after_due_date(self, calculator, lease):
        status = calculator.check_payment_status(lease, [], [], date(2024, 1, 20))
        assert not status.is_up_to_date
        assert status.is_late
        assert status.last_payment_date is None

    def test_nothing_paid_before_due_date(self, calculator, lease):
        status = calculator.check_payment_status(lease, [], [], date(2024, 1, 3))
        assert not status.is_late


class InMemoryLeases(LeaseSource):
    def __init__(self, leases):
        self.leases = {lease.id: lease for lease in leases}

    async def get(self, lease_id):
        return self.leases.get(lease_id)

    async def list_active(self, on):
        return [lease for lease in self.leases.values() if lease.is_active(on)]


class InMemoryRevisions(RentRevisionSource):
    def __init__(self, revisions):
        self.revisions = revisions

    async def list_for_lease(self, lease_id):
        return [r for r in self.revisions if r.lease_id == lease_id]


class InMemoryPayments(PaymentSource):
    def __init__(self, payments):
        self.payments = payments
        self.calls = []

    async def list_for_lease(self, lease_id, period_start=None, period_end=None):
        self.calls.append((lease_id, period_start, period_end))
        return [
            p
            for p in self.payments
            if p.lease_id == lease_id
            and (period_start is None or p.payment_date >= period_start)
            and (period_end is None or p.payment_date <= period_end)
        ]


class TestLedgerService:
    """Test the async service over in-memory sources."""

    @pytest.fixture
    def payment_source(self):
        return InMemoryPayments(
            [pay(1, "950", date(2024, 1, 5)), pay(2, "1000", date(2024, 3, 5))]
        )

    @pytest.fixture
    def service(self, lease, march_revision, payment_source):
        return LedgerService(
            InMemoryLeases([lease]), InMemoryRevisions([march_revision]), payment_source
        )

    async def test_get_ledger(self, service, payment_source):
        rows = await service.get_ledger(1, date(2024, 3, 15))

        assert [r.month for r in rows] == [YearMonth(2024, 3), YearMonth(2024, 2), YearMonth(2024, 1)]
        assert payment_source.calls == [(1, date(2024, 1, 1), date(2024, 3, 15))]

    async def test_unknown_lease(self, service):
        with pytest.raises(NotFoundError, match="Lease not found: 42"):
            await service.get_ledger(42, date(2024, 3, 15))

    async def test_get_balance(self, service):
        balance = await service.get_balance(1, date(2024, 3, 15))
        assert balance.total_expected == Decimal("2900")
        assert balance.balance == Decimal("-950")

    async def test_get_payment_balance(self, service):
        result = await service.get_payment_balance(1, 2)
        assert result.balance_after - result.balance_before == Decimal("1000")

    async def test_get_payment_status(self, service):
        status = await service.get_payment_status(1, date(2024, 2, 20))
        assert not status.is_up_to_date
        assert status.is_late

    async def test_rent_history_and_applicable_rent(self, service):
        history = await service.get_rent_history(1, YearMonth(2024, 2), YearMonth(2024, 3))
        assert [h.total_amount for h in history] == [Decimal("950"), Decimal("1000")]

        rent = await service.get_applicable_rent(1, date(2024, 3, 1))
        assert rent.is_from_revision
