"""Annual charge settlement for a property in a shared building.

Building expense documents from the trailing 12 months are grouped by
category. Each category is allocated to the property either by its
configured percentage (PERCENTAGE) or, for WATER, by the ratio of the
property's annual meter consumption to the building's invoiced consumption
(WATER_CONSUMPTION).

Settlement totals:
    total_charges_actual = sum(property_share over categories)
    balance              = provisional_charges_paid - total_charges_actual
                           (positive: landlord owes tenant; negative: tenant owes)
    new_monthly_charges  = total_charges_actual / 12

Missing configuration never aborts the computation: the affected category
gets a zero share and a SettlementWarning explains why.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, NamedTuple, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.charges import (
    DocumentCategory,
    FinancialDocument,
    PropertyChargeShare,
    WaterMeterReading,
)
from src.domain.money import to_decimal
from src.domain.periods import add_months, as_date
from src.services.errors import (
    CONSUMPTION_ERROR,
    INSUFFICIENT_READINGS,
    MISSING_PERCENTAGE,
    MISSING_WATER_CONSUMPTION,
    ConsumptionCalculationError,
    SettlementWarning,
)
from src.services.sources import ChargeShareSource, FinancialDocumentSource, WaterReadingSource
from src.services.water_consumption_service import (
    ConsumptionMethod,
    WaterConsumptionCalculator,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
MONTHS_PER_YEAR = 12


class CalculationMethod(str, Enum):
    """How a category's property share was computed."""

    PERCENTAGE = "PERCENTAGE"
    WATER_CONSUMPTION = "WATER_CONSUMPTION"


class SettlementDocument(NamedTuple):
    """Document line shown in a category breakdown."""

    id: int
    date: date
    description: str
    amount: Decimal
    document_path: str | None


class WaterDetail(NamedTuple):
    """Inputs of the consumption-based water allocation."""

    property_consumption: Decimal
    building_total_consumption: Decimal
    dynamic_percentage: Decimal
    consumption_method: ConsumptionMethod
    period_start: date
    period_end: date


class CategoryChargeDetail(NamedTuple):
    """Settlement of one expense category."""

    category: DocumentCategory
    documents: tuple[SettlementDocument, ...]
    total_amount: Decimal
    percentage: Decimal
    property_share: Decimal
    calculation_method: CalculationMethod
    water_detail: WaterDetail | None = None


@dataclass(frozen=True)
class ChargeSettlementResult:
    """Annual settlement of a property's charges."""

    property_id: int
    building_id: int
    reference_date: date
    period_start: date
    period_end: date
    categories: tuple[CategoryChargeDetail, ...]
    total_charges_actual: Decimal
    total_charges_provisional: Decimal
    balance: Decimal
    new_monthly_charges: Decimal
    warnings: tuple[SettlementWarning, ...] = field(default_factory=tuple)

    def category(self, category: DocumentCategory) -> CategoryChargeDetail | None:
        """Breakdown for one category, if any document fell in the window."""
        return next((c for c in self.categories if c.category == category), None)


class ChargeSettlementEngine:
    """Pure settlement computation over already-fetched building data."""

    def __init__(
        self,
        water_calculator: WaterConsumptionCalculator | None = None,
        window_months: int = MONTHS_PER_YEAR,
    ):
        self.water_calculator = water_calculator or WaterConsumptionCalculator()
        self.window_months = window_months

    def period_start(self, reference_date: date) -> date:
        """First day of the settlement window."""
        return add_months(as_date(reference_date), -self.window_months)

    def select_documents(
        self, documents: Iterable[FinancialDocument], reference_date: date
    ) -> list[FinancialDocument]:
        """Documents included in charges and dated on or after the window start."""
        start = self.period_start(reference_date)
        return [doc for doc in documents if doc.included_in_charges and doc.date >= start]

    @staticmethod
    def group_by_category(
        documents: Iterable[FinancialDocument],
    ) -> dict[DocumentCategory, list[FinancialDocument]]:
        """Group documents by category, keeping first-seen category order."""
        grouped: dict[DocumentCategory, list[FinancialDocument]] = {}
        for doc in documents:
            grouped.setdefault(doc.category, []).append(doc)
        return grouped

    def settle(
        self,
        property_id: int,
        building_id: int,
        documents: Iterable[FinancialDocument],
        charge_shares: Iterable[PropertyChargeShare],
        water_readings: Sequence[WaterMeterReading],
        provisional_charges_paid: Decimal,
        reference_date: date,
    ) -> ChargeSettlementResult:
        """Compute the annual settlement of a property.

        Args:
            property_id: Property being settled
            building_id: Building whose documents are allocated
            documents: All expense documents of the building
            charge_shares: Configured percentages of the property
            water_readings: Water meter readings of the property
            provisional_charges_paid: Charges paid in advance over the period
            reference_date: End of the settlement window

        Returns:
            ChargeSettlementResult with category breakdown, totals and warnings
        """
        reference_date = as_date(reference_date)
        provisional = to_decimal(provisional_charges_paid)
        warnings: list[SettlementWarning] = []

        percentages = {share.category: share.percentage for share in charge_shares}
        grouped = self.group_by_category(self.select_documents(documents, reference_date))

        categories: list[CategoryChargeDetail] = []
        for category, category_docs in grouped.items():
            if category is DocumentCategory.WATER:
                detail = self._water_charges(category_docs, water_readings, warnings)
            else:
                detail = self._percentage_charges(
                    category, category_docs, percentages.get(category, Decimal("0")), warnings
                )
            categories.append(detail)

        total_actual = sum((c.property_share for c in categories), Decimal("0"))
        balance = provisional - total_actual
        new_monthly = total_actual / MONTHS_PER_YEAR

        for warning in warnings:
            logger.warning(
                "Settlement property=%s building=%s: %s", property_id, building_id, warning.message
            )
        logger.info(
            "Settlement property=%s building=%s: %d categories, actual=%s, balance=%s",
            property_id,
            building_id,
            len(categories),
            total_actual,
            balance,
        )

        return ChargeSettlementResult(
            property_id=property_id,
            building_id=building_id,
            reference_date=reference_date,
            period_start=self.period_start(reference_date),
            period_end=reference_date,
            categories=tuple(categories),
            total_charges_actual=total_actual,
            total_charges_provisional=provisional,
            balance=balance,
            new_monthly_charges=new_monthly,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _document_lines(documents: Iterable[FinancialDocument]) -> tuple[SettlementDocument, ...]:
        return tuple(
            SettlementDocument(
                id=doc.id,
                date=doc.date,
                description=doc.description,
                amount=doc.amount,
                document_path=doc.document_path,
            )
            for doc in documents
        )

    def _percentage_charges(
        self,
        category: DocumentCategory,
        documents: list[FinancialDocument],
        percentage: Decimal,
        warnings: list[SettlementWarning],
    ) -> CategoryChargeDetail:
        total = sum((doc.amount for doc in documents), Decimal("0"))

        if percentage == 0 and total > 0:
            warnings.append(
                SettlementWarning(
                    code=MISSING_PERCENTAGE,
                    message=(
                        f'No percentage configured for category "{category.label}" '
                        "but invoices exist"
                    ),
                    category=category.value,
                )
            )

        return CategoryChargeDetail(
            category=category,
            documents=self._document_lines(documents),
            total_amount=total,
            percentage=percentage,
            property_share=total * percentage / HUNDRED,
            calculation_method=CalculationMethod.PERCENTAGE,
        )

    def _water_charges(
        self,
        documents: list[FinancialDocument],
        readings: Sequence[WaterMeterReading],
        warnings: list[SettlementWarning],
    ) -> CategoryChargeDetail:
        total = sum((doc.amount for doc in documents), Decimal("0"))
        zero_share = CategoryChargeDetail(
            category=DocumentCategory.WATER,
            documents=self._document_lines(documents),
            total_amount=total,
            percentage=Decimal("0"),
            property_share=Decimal("0"),
            calculation_method=CalculationMethod.WATER_CONSUMPTION,
        )

        try:
            consumption = self.water_calculator.annual_consumption(readings)
        except ConsumptionCalculationError as e:
            warnings.append(
                SettlementWarning(
                    code=CONSUMPTION_ERROR,
                    message=f"Cannot compute water consumption: {e}. No water charge applied",
                    category=DocumentCategory.WATER.value,
                )
            )
            return zero_share

        if consumption is None:
            warnings.append(
                SettlementWarning(
                    code=INSUFFICIENT_READINGS,
                    message=(
                        "Cannot compute water consumption: not enough meter readings. "
                        "No water charge applied"
                    ),
                    category=DocumentCategory.WATER.value,
                )
            )
            return zero_share

        building_consumption = sum(
            (doc.water_consumption or Decimal("0") for doc in documents), Decimal("0")
        )
        if building_consumption == 0:
            warnings.append(
                SettlementWarning(
                    code=MISSING_WATER_CONSUMPTION,
                    message=(
                        "Water invoices have no consumption (m³) recorded. "
                        "Cannot compute water charges"
                    ),
                    category=DocumentCategory.WATER.value,
                )
            )
            return zero_share

        dynamic_percentage = consumption.annual_consumption / building_consumption * HUNDRED
        return zero_share._replace(
            percentage=dynamic_percentage,
            property_share=total * dynamic_percentage / HUNDRED,
            water_detail=WaterDetail(
                property_consumption=consumption.annual_consumption,
                building_total_consumption=building_consumption,
                dynamic_percentage=dynamic_percentage,
                consumption_method=consumption.method,
                period_start=consumption.period_start,
                period_end=consumption.period_end,
            ),
        )


class ChargeSettlementService:
    """Async service fetching building data through sources, then settling."""

    def __init__(
        self,
        document_source: FinancialDocumentSource,
        share_source: ChargeShareSource,
        reading_source: WaterReadingSource,
        engine: ChargeSettlementEngine | None = None,
    ):
        self.document_source = document_source
        self.share_source = share_source
        self.reading_source = reading_source
        self.engine = engine or ChargeSettlementEngine()

    @classmethod
    def from_session(
        cls, session: AsyncSession, engine: ChargeSettlementEngine | None = None
    ) -> "ChargeSettlementService":
        """Build the service on SQLAlchemy repositories sharing one session."""
        from src.services.repositories import (
            SqlAlchemyChargeShareRepository,
            SqlAlchemyFinancialDocumentRepository,
            SqlAlchemyWaterReadingRepository,
        )

        return cls(
            SqlAlchemyFinancialDocumentRepository(session),
            SqlAlchemyChargeShareRepository(session),
            SqlAlchemyWaterReadingRepository(session),
            engine,
        )

    async def calculate(
        self,
        building_id: int,
        property_id: int,
        provisional_charges_paid: Decimal,
        reference_date: date,
    ) -> ChargeSettlementResult:
        """Fetch the building's documents and the property's shares and readings, then settle."""
        documents = await self.document_source.list_for_building(building_id)
        shares = await self.share_source.list_for_property(property_id)
        readings = await self.reading_source.list_for_property(property_id)
        logger.debug(
            "Settlement inputs: %d documents, %d shares, %d readings",
            len(documents),
            len(shares),
            len(readings),
        )
        return self.engine.settle(
            property_id=property_id,
            building_id=building_id,
            documents=documents,
            charge_shares=shares,
            water_readings=readings,
            provisional_charges_paid=provisional_charges_paid,
            reference_date=reference_date,
        )


__all__ = [
    "CalculationMethod",
    "CategoryChargeDetail",
    "ChargeSettlementEngine",
    "ChargeSettlementResult",
    "ChargeSettlementService",
    "SettlementDocument",
    "WaterDetail",
]
