"""
Asset Modules.

Thin orchestration layers over the asset kernel and the depreciation
engine.  Each module contains:
- Domain models (the nouns)
- ORM models (persistence)
- Configuration schemas (settings)
- A service facade (transaction boundary)

Modules:
- Registry: Fixed assets, capital improvements, depreciation reports

Actual calculation logic lives in ``asset_engines``.
"""

from asset_modules import registry

__all__ = ["registry"]
