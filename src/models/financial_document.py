"""Financial document ORM model: building expense invoices."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, Integer, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.charges import DocumentCategory
from src.models import Base, BaseModel


class FinancialDocument(Base, BaseModel):
    """Expense invoice of a building, optionally included in tenant charges."""

    __tablename__ = "financial_documents"

    building_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    category: Mapped[DocumentCategory] = mapped_column(
        SQLEnum(DocumentCategory),
        nullable=False,
        comment="Expense category",
    )
    document_date: Mapped[date] = mapped_column(
        "date",
        Date,
        nullable=False,
        comment="Invoice date",
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    document_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    included_in_charges: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the document is recoverable from tenants",
    )
    water_consumption: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 3),
        nullable=True,
        comment="Invoiced building consumption in m³ (WATER only)",
    )

    __table_args__ = (Index("idx_document_building_date", "building_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<FinancialDocument(id={self.id}, building_id={self.building_id}, "
            f"category={self.category}, date={self.document_date}, amount={self.amount})>"
        )


__all__ = ["FinancialDocument"]
