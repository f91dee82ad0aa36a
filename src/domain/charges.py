"""Building charge entities: expense documents, charge shares and water readings."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from src.domain.money import to_decimal
from src.domain.periods import add_months, as_date
from src.services.errors import ValidationError


class DocumentCategory(str, Enum):
    """Categories of building expenses."""

    ELECTRICITY = "ELECTRICITY"
    WATER = "WATER"
    CLEANING = "CLEANING"
    GARBAGE_TAX = "GARBAGE_TAX"
    HEATING = "HEATING"
    ELEVATOR = "ELEVATOR"
    COMMON_AREA_MAINTENANCE = "COMMON_AREA_MAINTENANCE"
    PROPERTY_TAX = "PROPERTY_TAX"
    RENOVATION_WORK = "RENOVATION_WORK"
    REPAIR_WORK = "REPAIR_WORK"
    INSURANCE = "INSURANCE"
    OTHER = "OTHER"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass(frozen=True)
class FinancialDocument:
    """Dated expense invoice for a building.

    water_consumption (m³) is only meaningful for WATER documents and feeds
    the building-wide consumption total used for water allocation.
    """

    id: int
    building_id: int
    category: DocumentCategory
    date: date
    amount: Decimal
    description: str
    included_in_charges: bool = True
    document_path: str | None = None
    water_consumption: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", DocumentCategory(self.category))
        object.__setattr__(self, "date", as_date(self.date))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.water_consumption is not None:
            object.__setattr__(self, "water_consumption", to_decimal(self.water_consumption))

        if self.amount < 0:
            raise ValidationError("Financial document amount cannot be negative")
        if not self.description or not self.description.strip():
            raise ValidationError("Financial document description cannot be empty")
        if self.date > date.today():
            raise ValidationError("Financial document date cannot be in the future")
        if self.water_consumption is not None and self.water_consumption < 0:
            raise ValidationError("Water consumption cannot be negative")

    @property
    def is_water_bill(self) -> bool:
        return self.category is DocumentCategory.WATER

    def is_within_last_12_months(self, reference_date: date) -> bool:
        return self.date >= add_months(as_date(reference_date), -12)


@dataclass(frozen=True)
class PropertyChargeShare:
    """Configured percentage of a building expense category borne by a property."""

    id: int
    property_id: int
    category: DocumentCategory
    percentage: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", DocumentCategory(self.category))
        object.__setattr__(self, "percentage", to_decimal(self.percentage))
        if not Decimal("0") <= self.percentage <= Decimal("100"):
            raise ValidationError("Charge share percentage must be between 0 and 100")

    @property
    def ratio(self) -> Decimal:
        """Percentage as a fraction (25 -> 0.25)."""
        return self.percentage / Decimal("100")


@dataclass(frozen=True)
class WaterMeterReading:
    """Cumulative water meter index (m³) for a property on a given day."""

    id: int
    property_id: int
    reading_date: date
    meter_reading: Decimal
    document_path: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "reading_date", as_date(self.reading_date))
        object.__setattr__(self, "meter_reading", to_decimal(self.meter_reading))
        if self.reading_date > date.today():
            raise ValidationError("Reading date cannot be in the future")
        if self.meter_reading < 0:
            raise ValidationError("Meter reading cannot be negative")


__all__ = [
    "DocumentCategory",
    "FinancialDocument",
    "PropertyChargeShare",
    "WaterMeterReading",
]
