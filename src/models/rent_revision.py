"""Rent revision ORM model: append-only history of rent changes per lease."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class RentRevision(Base, BaseModel):
    """Dated rent and charges change for a lease."""

    __tablename__ = "rent_revisions"

    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        nullable=False,
        index=True,
    )
    effective_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Day from which the new amounts apply",
    )
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    charges_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (Index("idx_revision_lease_date", "lease_id", "effective_date"),)

    def __repr__(self) -> str:
        return (
            f"<RentRevision(id={self.id}, lease_id={self.lease_id}, "
            f"effective_date={self.effective_date}, rent_amount={self.rent_amount}, "
            f"charges_amount={self.charges_amount})>"
        )


__all__ = ["RentRevision"]
