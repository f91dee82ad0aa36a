"""Payment ORM model: amounts received for a lease."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class Payment(Base, BaseModel):
    """Model representing a rent payment."""

    __tablename__ = "payments"

    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        nullable=False,
        index=True,
        comment="Lease the payment is for",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Amount received",
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Day the payment was received",
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("idx_payment_lease_date", "lease_id", "payment_date"),)

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, lease_id={self.lease_id}, "
            f"amount={self.amount}, payment_date={self.payment_date})>"
        )


__all__ = ["Payment"]
