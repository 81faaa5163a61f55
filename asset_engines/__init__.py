"""
Module: asset_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    depreciation engine.  This is the canonical import surface for the
    registry module and for report code.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import asset_kernel exceptions and logging.
    MUST NOT import asset_config or asset_modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
    - Decimal-only arithmetic for all monetary amounts.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from asset_engines import AssetFinancials, book_value_for_budget_year
"""

from asset_kernel.logging_config import get_logger

logger = get_logger("engines")

from asset_engines.depreciation import (
    DEFAULT_FISCAL_YEAR_START_MONTH,
    AnnualDepreciationLine,
    AssetFinancials,
    BudgetYearValuation,
    DepreciationMethod,
    DepreciationSummary,
    FiscalYear,
    MonthlyDepreciationLine,
    Period,
    accumulated_depreciation,
    annual_schedule,
    book_value,
    book_value_for_budget_year,
    book_value_for_month,
    budget_year_for_date,
    budget_year_summary,
    days_in_month,
    depreciation_summary,
    monthly_book_value_counts,
    monthly_book_value_totals,
    monthly_depreciation,
    monthly_schedule,
    parse_budget_year,
    prorated_month_fraction,
    quantize_money,
    resolve_salvage_value,
    validate_financials,
)
from asset_engines.tracer import traced_engine

__all__ = [
    "DEFAULT_FISCAL_YEAR_START_MONTH",
    "AnnualDepreciationLine",
    "AssetFinancials",
    "BudgetYearValuation",
    "DepreciationMethod",
    "DepreciationSummary",
    "FiscalYear",
    "MonthlyDepreciationLine",
    "Period",
    "accumulated_depreciation",
    "annual_schedule",
    "book_value",
    "book_value_for_budget_year",
    "book_value_for_month",
    "budget_year_for_date",
    "budget_year_summary",
    "days_in_month",
    "depreciation_summary",
    "monthly_book_value_counts",
    "monthly_book_value_totals",
    "monthly_depreciation",
    "monthly_schedule",
    "parse_budget_year",
    "prorated_month_fraction",
    "quantize_money",
    "resolve_salvage_value",
    "traced_engine",
    "validate_financials",
]
