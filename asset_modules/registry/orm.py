"""
Asset Registry ORM Models (``asset_modules.registry.orm``).

Responsibility
--------------
SQLAlchemy persistence models for the asset registry -- assets and their
capital improvements.  Maps frozen domain dataclasses from ``models.py`` to
database tables and produces ``AssetFinancials`` snapshots for the engine.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``asset_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``asset_kernel``.

Imported rows may lack a unit price or SIV date; such rows are stored as
they come and are rejected by engine validation when reported on.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from asset_engines.depreciation import AssetFinancials
from asset_kernel.db.base import TrackedBase


# ---------------------------------------------------------------------------
# AssetModel
# ---------------------------------------------------------------------------

class AssetModel(TrackedBase):
    """
    ORM model for ``Asset`` -- a registered fixed asset.

    Table: ``registry_assets``
    """

    __tablename__ = "registry_assets"

    name: Mapped[str] = mapped_column(String(200))
    serial_number: Mapped[str] = mapped_column(String(100))
    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    siv_date: Mapped[date | None] = mapped_column(nullable=True)
    useful_life_years: Mapped[int] = mapped_column(default=5)
    residual_percentage: Mapped[Decimal | None] = mapped_column(nullable=True)
    salvage_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    depreciation_method: Mapped[str] = mapped_column(
        String(50), default="straight_line",
    )
    status: Mapped[str] = mapped_column(String(50), default="active")
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Relationships (children)
    capital_improvements: Mapped[list["CapitalImprovementModel"]] = relationship(
        back_populates="asset", cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("serial_number", name="uq_registry_assets_serial_number"),
        Index("idx_registry_assets_department", "department"),
        Index("idx_registry_assets_category", "category"),
    )

    def to_financials(self) -> AssetFinancials:
        """Unvalidated snapshot; the engine validates on use."""
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

    def to_dto(self):
        from asset_modules.registry.models import (
            Asset,
            AssetStatus,
            DepreciationMethod,
        )
        return Asset(
            id=self.id,
            name=self.name,
            serial_number=self.serial_number,
            unit_price=self.unit_price,
            siv_date=self.siv_date,
            useful_life_years=self.useful_life_years,
            residual_percentage=self.residual_percentage,
            salvage_value=self.salvage_value,
            depreciation_method=DepreciationMethod.parse(self.depreciation_method),
            status=AssetStatus(self.status),
            department=self.department,
            category=self.category,
            location=self.location,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "AssetModel":
        return cls(
            id=dto.id,
            name=dto.name,
            serial_number=dto.serial_number,
            unit_price=dto.unit_price,
            siv_date=dto.siv_date,
            useful_life_years=dto.useful_life_years,
            residual_percentage=dto.residual_percentage,
            salvage_value=dto.salvage_value,
            depreciation_method=dto.depreciation_method.value,
            status=dto.status.value,
            department=dto.department,
            category=dto.category,
            location=dto.location,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<AssetModel(id={self.id!r}, serial_number={self.serial_number!r}, "
            f"unit_price={self.unit_price!r})>"
        )


# ---------------------------------------------------------------------------
# CapitalImprovementModel
# ---------------------------------------------------------------------------

class CapitalImprovementModel(TrackedBase):
    """
    ORM model for ``CapitalImprovement``.

    Table: ``registry_capital_improvements``
    """

    __tablename__ = "registry_capital_improvements"

    asset_id: Mapped[UUID] = mapped_column(ForeignKey("registry_assets.id"))
    description: Mapped[str] = mapped_column(String(500))
    improvement_date: Mapped[date]
    cost: Mapped[Decimal]
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Relationships (parent)
    asset: Mapped["AssetModel"] = relationship(back_populates="capital_improvements")

    __table_args__ = (
        Index("idx_registry_capital_improvements_asset", "asset_id"),
    )

    def to_dto(self):
        from asset_modules.registry.models import CapitalImprovement
        return CapitalImprovement(
            id=self.id,
            asset_id=self.asset_id,
            description=self.description,
            improvement_date=self.improvement_date,
            cost=self.cost,
            notes=self.notes,
        )

    def __repr__(self) -> str:
        return (
            f"<CapitalImprovementModel(id={self.id!r}, asset_id={self.asset_id!r}, "
            f"cost={self.cost!r})>"
        )
