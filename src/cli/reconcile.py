"""CLI entry point for lease ledgers, rent overviews and charge settlements.

Usage:
    python -m src.cli.reconcile ledger --lease-id 1 [--date 2024-03-15] [--months 24]
    python -m src.cli.reconcile overview [--date 2024-03-15]
    python -m src.cli.reconcile settlement --building-id 1 --property-id 2 --provisional 1200

Exit Codes:
    0 - Success
    1 - Failure: lease not found, invalid data or configuration error

Logging:
    LOG_LEVEL (default INFO) to both stdout and LOG_FILE
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from decimal import Decimal

from src.services.config import get_settings
from src.services.db import session_scope
from src.services.errors import FinanceError
from src.services.ledger_service import LedgerBalanceCalculator, LedgerService
from src.services.logging import setup_logging
from src.services.overview_service import RentOverviewService
from src.services.settlement_service import ChargeSettlementEngine, ChargeSettlementService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reconcile", description=__doc__.splitlines()[0])
    subparsers = parser.add_subparsers(dest="command", required=True)

    ledger = subparsers.add_parser("ledger", help="Month-by-month ledger of a lease")
    ledger.add_argument("--lease-id", type=int, required=True)
    ledger.add_argument("--date", type=date.fromisoformat, default=None)
    ledger.add_argument("--months", type=int, default=None)
    ledger.add_argument("--oldest-first", action="store_true")

    overview = subparsers.add_parser("overview", help="Unsettled leases for a month")
    overview.add_argument("--date", type=date.fromisoformat, default=None)

    settlement = subparsers.add_parser("settlement", help="Annual charge settlement")
    settlement.add_argument("--building-id", type=int, required=True)
    settlement.add_argument("--property-id", type=int, required=True)
    settlement.add_argument("--provisional", type=Decimal, required=True)
    settlement.add_argument("--date", type=date.fromisoformat, default=None)

    return parser


async def run(args: argparse.Namespace) -> int:
    """Execute one command against the configured database."""
    settings = get_settings()
    reference_date = args.date or date.today()
    calculator = LedgerBalanceCalculator(
        tolerance=settings.receipt_tolerance,
        window_months=settings.ledger_window_months,
    )

    async for session in session_scope(settings.database_url, settings.database_echo):
        if args.command == "ledger":
            rows = await LedgerService.from_session(session, calculator).get_ledger(
                args.lease_id,
                reference_date,
                window_months=args.months,
                newest_first=not args.oldest_first,
            )
            for row in rows:
                print(
                    f"{row.month}  rent={row.monthly_rent}  paid={row.total_paid}  "
                    f"before={row.balance_before}  after={row.balance_after}  "
                    f"{row.receipt_type.value}"
                )

        elif args.command == "overview":
            entries = await RentOverviewService.from_session(
                session, calculator
            ).current_month_overview(reference_date)
            for entry in entries:
                print(
                    f"lease={entry.lease_id}  property={entry.property_id}  "
                    f"due={entry.rent_due}  paid={entry.amount_paid}  "
                    f"after={entry.balance_after}  {entry.receipt_type.value}"
                )

        elif args.command == "settlement":
            engine = ChargeSettlementEngine(window_months=settings.settlement_window_months)
            result = await ChargeSettlementService.from_session(session, engine).calculate(
                building_id=args.building_id,
                property_id=args.property_id,
                provisional_charges_paid=args.provisional,
                reference_date=reference_date,
            )
            print(f"period {result.period_start} to {result.period_end}")
            for detail in result.categories:
                print(
                    f"{detail.category.value}  total={detail.total_amount}  "
                    f"pct={detail.percentage}  share={detail.property_share}  "
                    f"({detail.calculation_method.value})"
                )
            print(
                f"actual={result.total_charges_actual}  "
                f"provisional={result.total_charges_provisional}  "
                f"balance={result.balance}  new_monthly={result.new_monthly_charges}"
            )
            for warning in result.warnings:
                print(f"warning: {warning.message}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, set up logging and run the command.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
        setup_logging(settings.log_file, settings.log_level)
        return asyncio.run(run(args))
    except FinanceError as e:
        logger.error("Reconciliation failed: %s", e)
        return 1
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
