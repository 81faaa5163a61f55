"""
Asset Registry Module (``asset_modules.registry``).

Responsibility
--------------
Thin glue for the fixed-asset register: storing assets and their capital
improvements, and reporting book values, schedules, budget-year
valuations and monthly population totals.

Architecture position
---------------------
**Modules layer** -- domain models, ORM models, a config schema and a
service facade.  All depreciation arithmetic is delegated to
``asset_engines.depreciation``.

Failure modes
-------------
* ``AssetNotFoundError`` for unknown asset ids.
* Engine ``DepreciationError`` subclasses for malformed stored assets;
  population reports skip such assets when configured to.
"""

from asset_modules.registry.config import AssetConfig
from asset_modules.registry.models import (
    Asset,
    AssetStatus,
    BudgetYearReport,
    BudgetYearReportLine,
    CapitalImprovement,
)

__all__ = [
    "Asset",
    "AssetConfig",
    "AssetStatus",
    "BudgetYearReport",
    "BudgetYearReportLine",
    "CapitalImprovement",
]
