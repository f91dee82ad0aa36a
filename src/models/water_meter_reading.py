"""Water meter reading ORM model: cumulative index per property."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class WaterMeterReading(Base, BaseModel):
    """Water meter index (m³) read on a given day."""

    __tablename__ = "water_meter_readings"

    property_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    reading_date: Mapped[date] = mapped_column(Date, nullable=False)
    meter_reading: Mapped[Decimal] = mapped_column(
        Numeric(12, 3),
        nullable=False,
        comment="Cumulative meter index in m³",
    )
    document_path: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index("idx_water_property_date", "property_id", "reading_date"),)

    def __repr__(self) -> str:
        return (
            f"<WaterMeterReading(id={self.id}, property_id={self.property_id}, "
            f"reading_date={self.reading_date}, meter_reading={self.meter_reading})>"
        )


__all__ = ["WaterMeterReading"]
