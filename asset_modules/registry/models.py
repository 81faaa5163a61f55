"""
Asset Registry Domain Models.

The nouns of the registry: assets and the capital improvements that raise
their depreciable base.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from asset_engines.depreciation import AssetFinancials, DepreciationMethod
from asset_kernel.logging_config import get_logger

logger = get_logger("modules.registry.models")


class AssetStatus(Enum):
    """Asset lifecycle states."""
    ACTIVE = "active"
    UNDER_MAINTENANCE = "under_maintenance"
    TRANSFERRED = "transferred"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class Asset:
    """A registered fixed asset."""
    id: UUID
    name: str
    serial_number: str
    unit_price: Decimal
    siv_date: date
    useful_life_years: int
    residual_percentage: Decimal | None = None
    salvage_value: Decimal | None = None
    depreciation_method: DepreciationMethod = DepreciationMethod.STRAIGHT_LINE
    status: AssetStatus = AssetStatus.ACTIVE
    department: str | None = None
    category: str | None = None
    location: str | None = None

    def to_financials(self) -> AssetFinancials:
        """Snapshot consumed by the depreciation engine."""
        return AssetFinancials(
            unit_price=self.unit_price,
            siv_date=self.siv_date,
            useful_life_years=self.useful_life_years,
            residual_percentage=self.residual_percentage,
            salvage_value=self.salvage_value,
            depreciation_method=self.depreciation_method,
            asset_id=str(self.id),
            department=self.department,
            category=self.category,
        )


@dataclass(frozen=True)
class CapitalImprovement:
    """An improvement that adds its cost to the asset's depreciable base."""
    id: UUID
    asset_id: UUID
    description: str
    improvement_date: date
    cost: Decimal
    notes: str | None = None


@dataclass(frozen=True)
class BudgetYearReportLine:
    """One asset's row on a budget-year report."""
    asset_id: UUID
    serial_number: str
    name: str
    department: str | None
    category: str | None
    unit_price: Decimal
    salvage_value: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal
    reported_value: Decimal


@dataclass(frozen=True)
class BudgetYearReport:
    """Budget-year valuation of the whole registry."""
    budget_year: str
    period_start: date
    period_end: date
    lines: tuple[BudgetYearReportLine, ...]
    totals_by_department: dict[str, Decimal]
    totals_by_category: dict[str, Decimal]
    total_reported_value: Decimal
    skipped_asset_ids: tuple[UUID, ...] = ()

    @property
    def asset_count(self) -> int:
        return len(self.lines)
