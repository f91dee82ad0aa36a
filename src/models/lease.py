"""Lease ORM model: rental contract of a property with base rent and charges."""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Lease(Base, BaseModel):
    """Model representing a lease.

    rent_amount and charges_amount are the base amounts; later changes are
    stored as RentRevision rows and never overwrite these columns.
    """

    __tablename__ = "leases"

    property_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Leased property",
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First day of the lease",
    )
    end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Last day of the lease (open-ended if null)",
    )
    rent_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Base monthly rent",
    )
    charges_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Base monthly provisional charges",
    )
    payment_due_day: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Day of month rent is due (1-31)",
    )

    # Relationships
    tenants: Mapped[list["LeaseTenant"]] = relationship(
        "LeaseTenant",
        back_populates="lease",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("payment_due_day BETWEEN 1 AND 31", name="ck_lease_due_day"),
        Index("idx_lease_property_start", "property_id", "start_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Lease(id={self.id}, property_id={self.property_id}, "
            f"start_date={self.start_date}, end_date={self.end_date}, "
            f"rent_amount={self.rent_amount}, charges_amount={self.charges_amount})>"
        )


class LeaseTenant(Base, BaseModel):
    """Tenant signed on a lease."""

    __tablename__ = "lease_tenants"

    lease_id: Mapped[int] = mapped_column(
        ForeignKey("leases.id"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    lease: Mapped["Lease"] = relationship("Lease", back_populates="tenants")

    def __repr__(self) -> str:
        return f"<LeaseTenant(lease_id={self.lease_id}, tenant_id={self.tenant_id})>"


__all__ = ["Lease", "LeaseTenant"]
