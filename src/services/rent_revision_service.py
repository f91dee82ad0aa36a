"""Rent revision resolution: which rent and charges apply on a given date.

A lease starts with base amounts; each RentRevision replaces them from its
effective date onward until a later revision supersedes it. The latest
revision dated on or before the target day wins, and the boundary is
inclusive (a revision dated on the target day applies).
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple

from src.domain.lease import Lease, RentRevision
from src.domain.periods import YearMonth, as_date, iter_months

logger = logging.getLogger(__name__)


class ApplicableRent(NamedTuple):
    """Rent and charges in force on a given day."""

    rent_amount: Decimal
    charges_amount: Decimal
    total_amount: Decimal
    revision_id: int | None

    @property
    def is_from_revision(self) -> bool:
        return self.revision_id is not None


class RentForMonth(NamedTuple):
    """Rent and charges due for one calendar month."""

    month: YearMonth
    rent_amount: Decimal
    charges_amount: Decimal
    total_amount: Decimal
    revision_id: int | None


class RentRevisionResolver:
    """Resolve applicable rent across a lease's revision history."""

    @staticmethod
    def sort_revisions(revisions: Iterable[RentRevision]) -> list[RentRevision]:
        """Revisions ascending by effective date (stable for equal dates)."""
        return sorted(revisions, key=lambda revision: revision.effective_date)

    def applicable_rent(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        on: date,
    ) -> ApplicableRent:
        """Get the rent and charges applicable on a date.

        Args:
            lease: Lease providing the base amounts
            revisions: Revision history in any order
            on: Target date (time of day ignored)

        Returns:
            ApplicableRent from the latest revision effective on or before
            the date, or from the lease itself when none qualifies
        """
        target = as_date(on)
        applicable: RentRevision | None = None
        for revision in self.sort_revisions(revisions):
            if revision.effective_date <= target:
                applicable = revision
            else:
                break

        if applicable is None:
            return ApplicableRent(
                rent_amount=lease.rent_amount.amount,
                charges_amount=lease.charges_amount.amount,
                total_amount=lease.total_amount.amount,
                revision_id=None,
            )

        return ApplicableRent(
            rent_amount=applicable.rent_amount.amount,
            charges_amount=applicable.charges_amount.amount,
            total_amount=applicable.total_amount.amount,
            revision_id=applicable.id,
        )

    def rent_for_month(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        month: YearMonth,
    ) -> RentForMonth:
        """Rent due for a month: the revision in force on its first day."""
        applicable = self.applicable_rent(lease, revisions, month.first_day)
        return RentForMonth(
            month=month,
            rent_amount=applicable.rent_amount,
            charges_amount=applicable.charges_amount,
            total_amount=applicable.total_amount,
            revision_id=applicable.revision_id,
        )

    def rent_for_month_range(
        self,
        lease: Lease,
        revisions: Iterable[RentRevision],
        start_month: YearMonth,
        end_month: YearMonth,
    ) -> list[RentForMonth]:
        """Rent history for every month from start_month to end_month inclusive.

        Returns an empty list when start_month is after end_month.
        """
        ordered = self.sort_revisions(revisions)
        history = [
            self.rent_for_month(lease, ordered, month)
            for month in iter_months(start_month, end_month)
        ]
        logger.debug(
            "Resolved rent for lease %s over %d months (%s to %s)",
            lease.id,
            len(history),
            start_month,
            end_month,
        )
        return history


__all__ = ["ApplicableRent", "RentForMonth", "RentRevisionResolver"]
