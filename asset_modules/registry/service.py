"""
Asset Registry Report Service (``asset_modules.registry.service``).

Responsibility
--------------
Reads assets from the registry tables and answers depreciation questions
about them -- current book value, schedules, budget-year reports and
monthly population totals -- by delegating all arithmetic to
``asset_engines.depreciation``.  Also owns the two registry writes that
change an asset's depreciation basis: capital improvements and edits to
the depreciation settings.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``AssetReportService`` composes the pure
depreciation engine with a SQLAlchemy ``Session``, an ``AssetConfig`` and
an injectable ``Clock``.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on exception).
* Settings are validated by the engine *before* they are persisted; an
  edit that would make the asset unreportable is rejected.
* Report amounts are quantized with ``AssetConfig.money_places``; the
  engine itself never rounds.

Failure modes
-------------
* Unknown asset id  -> ``AssetNotFoundError``.
* Malformed stored asset on a single-asset query  -> the engine's
  ``DepreciationError`` propagates.
* Malformed stored asset on a population report  -> skipped and logged
  when ``skip_malformed_assets`` is set, otherwise propagated.

Usage::

    service = AssetReportService(session, AssetConfig.with_defaults(), clock)
    report = service.budget_year_report("2020/2021")
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from asset_engines.depreciation import (
    AssetFinancials,
    DepreciationMethod,
    DepreciationSummary,
    MonthlyDepreciationLine,
    book_value,
    budget_year_summary,
    depreciation_summary,
    monthly_book_value_counts,
    monthly_book_value_totals,
    monthly_schedule,
    parse_budget_year,
    quantize_money,
    validate_financials,
)
from asset_kernel.domain.clock import Clock, SystemClock
from asset_kernel.exceptions import (
    AssetNotFoundError,
    DepreciationError,
    InvalidCapitalImprovementError,
)
from asset_kernel.logging_config import get_logger
from asset_modules.registry.config import AssetConfig
from asset_modules.registry.models import (
    Asset,
    AssetStatus,
    BudgetYearReport,
    BudgetYearReportLine,
    CapitalImprovement,
)
from asset_modules.registry.orm import AssetModel, CapitalImprovementModel

logger = get_logger("modules.registry.service")

_ZERO = Decimal("0")
_UNASSIGNED = "Unassigned"

# Sentinel distinguishing "leave unchanged" from an explicit None.
_UNSET: Any = object()


class AssetReportService:
    """
    Depreciation reporting over the asset registry.

    Contract
    --------
    * Read methods never write to the session.
    * Write methods (``register_asset``, ``record_capital_improvement``,
      ``update_depreciation_settings``) commit on success and roll back on
      any exception.

    Guarantees
    ----------
    * "Today" comes from the injected clock, never from ``date.today()``.
    * The budget-year start month comes from ``AssetConfig``.
    """

    def __init__(
        self,
        session: Session,
        config: AssetConfig | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._config = config or AssetConfig.with_defaults()
        self._clock = clock or SystemClock()

    @property
    def config(self) -> AssetConfig:
        return self._config

    def _money(self, value: Decimal) -> Decimal:
        return quantize_money(value, self._config.money_places)

    def _get_model(self, asset_id: UUID) -> AssetModel:
        model = self._session.get(AssetModel, asset_id)
        if model is None:
            raise AssetNotFoundError(str(asset_id))
        return model

    def _all_models(self) -> Sequence[AssetModel]:
        return self._session.scalars(
            select(AssetModel).order_by(AssetModel.serial_number)
        ).all()

    # =========================================================================
    # Registration
    # =========================================================================

    def register_asset(
        self,
        name: str,
        serial_number: str,
        unit_price: Decimal,
        siv_date: date,
        actor_id: UUID,
        useful_life_years: int = 5,
        residual_percentage: Decimal | None = None,
        salvage_value: Decimal | None = None,
        depreciation_method: DepreciationMethod | str | None = None,
        department: str | None = None,
        category: str | None = None,
        location: str | None = None,
    ) -> Asset:
        """
        Add an asset to the registry.

        Missing method and residual percentage fall back to the configured
        defaults.  The financials are validated before the row is written.
        """
        try:
            if depreciation_method is None:
                depreciation_method = self._config.depreciation_method
            if residual_percentage is None and salvage_value is None:
                residual_percentage = self._config.default_residual_percentage

            asset_id = uuid4()
            financials = validate_financials(AssetFinancials(
                unit_price=unit_price,
                siv_date=siv_date,
                useful_life_years=useful_life_years,
                residual_percentage=residual_percentage,
                salvage_value=salvage_value,
                depreciation_method=depreciation_method,
                asset_id=str(asset_id),
            ))

            logger.info("asset_registration_started", extra={
                "asset_id": str(asset_id),
                "serial_number": serial_number,
                "unit_price": str(financials.unit_price),
                "useful_life_years": financials.useful_life_years,
            })

            asset = Asset(
                id=asset_id,
                name=name,
                serial_number=serial_number,
                unit_price=financials.unit_price,
                siv_date=financials.siv_date,
                useful_life_years=financials.useful_life_years,
                residual_percentage=financials.residual_percentage,
                salvage_value=financials.salvage_value,
                depreciation_method=financials.depreciation_method,
                status=AssetStatus.ACTIVE,
                department=department,
                category=category,
                location=location,
            )
            self._session.add(AssetModel.from_dto(asset, created_by_id=actor_id))
            self._session.commit()
            logger.info("asset_registered", extra={"asset_id": str(asset_id)})
            return asset

        except Exception:
            self._session.rollback()
            raise

    def get_asset(self, asset_id: UUID) -> Asset:
        return self._get_model(asset_id).to_dto()

    # =========================================================================
    # Single-asset queries
    # =========================================================================

    def get_financials(self, asset_id: UUID) -> AssetFinancials:
        """Validated depreciation snapshot of a stored asset."""
        return validate_financials(self._get_model(asset_id).to_financials())

    def current_book_value(self, asset_id: UUID) -> Decimal:
        """Book value as of the clock's today, rounded for display."""
        financials = self.get_financials(asset_id)
        return self._money(book_value(financials, self._clock.today()))

    def summary(self, asset_id: UUID) -> DepreciationSummary:
        """Depreciation position as of the clock's today."""
        return depreciation_summary(self.get_financials(asset_id), self._clock.today())

    def schedule(
        self,
        asset_id: UUID,
        through: date | None = None,
    ) -> tuple[MonthlyDepreciationLine, ...]:
        return monthly_schedule(self.get_financials(asset_id), through)

    # =========================================================================
    # Population reports
    # =========================================================================

    def budget_year_report(self, budget_year: str) -> BudgetYearReport:
        """
        Reported value of every registered asset for one budget year.

        Totals are grouped by department and by category; assets without
        one are grouped under ``"Unassigned"``.
        """
        start_month = self._config.fiscal_year_start_month
        fiscal_year = parse_budget_year(budget_year, start_month)

        logger.info("budget_year_report_started", extra={
            "budget_year": fiscal_year.label,
            "fiscal_year_start_month": start_month,
        })

        lines: list[BudgetYearReportLine] = []
        skipped: list[UUID] = []
        by_department: dict[str, Decimal] = {}
        by_category: dict[str, Decimal] = {}

        for model in self._all_models():
            try:
                valuation = budget_year_summary(
                    model.to_financials(), fiscal_year.label, start_month,
                )
            except DepreciationError as exc:
                if not self._config.skip_malformed_assets:
                    raise
                skipped.append(model.id)
                logger.warning("asset_skipped_in_report", extra={
                    "asset_id": str(model.id),
                    "serial_number": model.serial_number,
                    "error_code": exc.code,
                    "error": str(exc),
                })
                continue

            line = BudgetYearReportLine(
                asset_id=model.id,
                serial_number=model.serial_number,
                name=model.name,
                department=model.department,
                category=model.category,
                unit_price=self._money(Decimal(model.unit_price)),
                salvage_value=self._money(valuation.salvage_value),
                accumulated_depreciation=self._money(valuation.accumulated_depreciation),
                book_value=self._money(valuation.book_value),
                reported_value=self._money(valuation.reported_value),
            )
            lines.append(line)

            department = model.department or _UNASSIGNED
            category = model.category or _UNASSIGNED
            by_department[department] = (
                by_department.get(department, _ZERO) + line.reported_value
            )
            by_category[category] = by_category.get(category, _ZERO) + line.reported_value

        report = BudgetYearReport(
            budget_year=fiscal_year.label,
            period_start=fiscal_year.start,
            period_end=fiscal_year.end,
            lines=tuple(lines),
            totals_by_department=by_department,
            totals_by_category=by_category,
            total_reported_value=sum((line.reported_value for line in lines), _ZERO),
            skipped_asset_ids=tuple(skipped),
        )

        logger.info("budget_year_report_completed", extra={
            "budget_year": report.budget_year,
            "asset_count": report.asset_count,
            "skipped_count": len(skipped),
            "total_reported_value": str(report.total_reported_value),
        })
        return report

    def monthly_totals(self, year: int) -> dict[int, Decimal]:
        """Month-end book value totals across the registry for a calendar year."""
        records = [model.to_financials() for model in self._all_models()]
        totals = monthly_book_value_totals(
            records, year, strict=not self._config.skip_malformed_assets,
        )
        return {month: self._money(value) for month, value in totals.items()}

    def monthly_counts(self, year: int) -> dict[int, int]:
        records = [model.to_financials() for model in self._all_models()]
        return monthly_book_value_counts(
            records, year, strict=not self._config.skip_malformed_assets,
        )

    # =========================================================================
    # Capital improvements
    # =========================================================================

    def record_capital_improvement(
        self,
        asset_id: UUID,
        description: str,
        improvement_date: date,
        cost: Decimal,
        actor_id: UUID,
        notes: str | None = None,
    ) -> CapitalImprovement:
        """
        Record an improvement and add its cost to the asset's unit price.

        The SIV date is unchanged, so the improvement is spread over the
        remaining useful life.
        """
        try:
            model = self._get_model(asset_id)
            cost = Decimal(str(cost))
            if cost <= _ZERO:
                raise InvalidCapitalImprovementError(str(asset_id), cost)

            old_price = model.unit_price if model.unit_price is not None else _ZERO
            new_price = old_price + cost

            logger.info("capital_improvement_started", extra={
                "asset_id": str(asset_id),
                "cost": str(cost),
                "old_unit_price": str(old_price),
                "new_unit_price": str(new_price),
            })

            orm_improvement = CapitalImprovementModel(
                id=uuid4(),
                asset_id=asset_id,
                description=description,
                improvement_date=improvement_date,
                cost=cost,
                notes=notes,
                created_by_id=actor_id,
            )
            self._session.add(orm_improvement)
            model.unit_price = new_price
            model.updated_by_id = actor_id
            self._session.commit()
            return orm_improvement.to_dto()

        except Exception:
            self._session.rollback()
            raise

    def list_capital_improvements(self, asset_id: UUID) -> list[CapitalImprovement]:
        """Improvements of an asset, most recent first."""
        self._get_model(asset_id)
        models = self._session.scalars(
            select(CapitalImprovementModel)
            .where(CapitalImprovementModel.asset_id == asset_id)
            .order_by(CapitalImprovementModel.improvement_date.desc())
        ).all()
        return [m.to_dto() for m in models]

    # =========================================================================
    # Depreciation settings
    # =========================================================================

    def update_depreciation_settings(
        self,
        asset_id: UUID,
        actor_id: UUID,
        useful_life_years: int | None = None,
        residual_percentage: Decimal | None = _UNSET,
        salvage_value: Decimal | None = _UNSET,
        depreciation_method: DepreciationMethod | str | None = None,
        siv_date: date | None = None,
    ) -> AssetFinancials:
        """
        Change how an asset depreciates.

        ``residual_percentage`` and ``salvage_value`` may be set to None to
        clear them; omitted arguments are left as stored.
        """
        try:
            model = self._get_model(asset_id)
            current = model.to_financials()
            changes: dict[str, Any] = {}
            if useful_life_years is not None:
                changes["useful_life_years"] = useful_life_years
            if residual_percentage is not _UNSET:
                changes["residual_percentage"] = residual_percentage
            if salvage_value is not _UNSET:
                changes["salvage_value"] = salvage_value
            if depreciation_method is not None:
                changes["depreciation_method"] = depreciation_method
            if siv_date is not None:
                changes["siv_date"] = siv_date

            updated = validate_financials(AssetFinancials(
                unit_price=current.unit_price,
                siv_date=changes.get("siv_date", current.siv_date),
                useful_life_years=changes.get(
                    "useful_life_years", current.useful_life_years,
                ),
                residual_percentage=changes.get(
                    "residual_percentage", current.residual_percentage,
                ),
                salvage_value=changes.get("salvage_value", current.salvage_value),
                depreciation_method=changes.get(
                    "depreciation_method", current.depreciation_method,
                ),
                asset_id=current.asset_id,
                department=current.department,
                category=current.category,
            ))

            logger.info("depreciation_settings_updated", extra={
                "asset_id": str(asset_id),
                "changed_fields": sorted(changes),
            })

            model.siv_date = updated.siv_date
            model.useful_life_years = updated.useful_life_years
            model.residual_percentage = updated.residual_percentage
            model.salvage_value = updated.salvage_value
            model.depreciation_method = updated.depreciation_method.value
            model.updated_by_id = actor_id
            self._session.commit()
            return updated

        except Exception:
            self._session.rollback()
            raise
