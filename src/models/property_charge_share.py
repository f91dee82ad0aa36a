"""Property charge share ORM model: percentage of a category borne by a property."""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.charges import DocumentCategory
from src.models import Base, BaseModel


class PropertyChargeShare(Base, BaseModel):
    """One row per (property, category)."""

    __tablename__ = "property_charge_shares"

    property_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    category: Mapped[DocumentCategory] = mapped_column(
        SQLEnum(DocumentCategory),
        nullable=False,
    )
    percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        comment="Share of the category in percent (0-100)",
    )

    __table_args__ = (
        UniqueConstraint("property_id", "category", name="uq_charge_share_property_category"),
    )

    def __repr__(self) -> str:
        return (
            f"<PropertyChargeShare(property_id={self.property_id}, "
            f"category={self.category}, percentage={self.percentage})>"
        )


__all__ = ["PropertyChargeShare"]
