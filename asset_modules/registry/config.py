"""
Asset Registry Configuration Schema.

Defines the structure and sensible defaults for depreciation reporting
settings.  Actual values are loaded from YAML by ``asset_config`` at runtime.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from asset_engines.depreciation import (
    DEFAULT_FISCAL_YEAR_START_MONTH,
    DepreciationMethod,
)
from asset_kernel.exceptions import InvalidInputError
from asset_kernel.logging_config import get_logger

logger = get_logger("modules.registry.config")


@dataclass
class AssetConfig:
    """
    Configuration schema for the asset registry.

    Field defaults represent the July-June budget year used by the asset
    reports.  Override at instantiation with organisation-specific values:

        config = AssetConfig(
            fiscal_year_start_month=1,
            **load_from_yaml("assets"),
        )
    """

    # Budget year
    fiscal_year_start_month: int = DEFAULT_FISCAL_YEAR_START_MONTH

    # Depreciation defaults for new assets
    default_depreciation_method: str = "straight_line"
    default_residual_percentage: Decimal = Decimal("0")

    # Reporting
    money_places: int = 2
    skip_malformed_assets: bool = True

    def __post_init__(self):
        month = self.fiscal_year_start_month
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise ValueError(f"fiscal_year_start_month must be 1-12, got {month!r}")
        if self.money_places < 0:
            raise ValueError(f"money_places cannot be negative, got {self.money_places}")
        self.default_residual_percentage = Decimal(str(self.default_residual_percentage))
        if not Decimal("0") <= self.default_residual_percentage <= Decimal("100"):
            raise ValueError(
                f"default_residual_percentage must be 0-100, "
                f"got {self.default_residual_percentage}"
            )
        try:
            DepreciationMethod.parse(self.default_depreciation_method)
        except InvalidInputError as exc:
            raise ValueError(str(exc)) from exc

        logger.info(
            "asset_config_initialized",
            extra={
                "fiscal_year_start_month": self.fiscal_year_start_month,
                "default_depreciation_method": self.default_depreciation_method,
                "default_residual_percentage": str(self.default_residual_percentage),
                "money_places": self.money_places,
                "skip_malformed_assets": self.skip_malformed_assets,
            },
        )

    @property
    def depreciation_method(self) -> DepreciationMethod:
        return DepreciationMethod.parse(self.default_depreciation_method)

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard July-June budget year."""
        logger.info("asset_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from YAML)."""
        logger.info(
            "asset_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
