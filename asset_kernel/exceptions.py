"""
Typed Exception Hierarchy for the Asset Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Depreciation figures feed book-value reports, so a bad asset record must
fail loudly and in a way callers can act on without parsing messages.

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        value = book_value(asset, as_of)
    except Exception as e:
        if "useful life" in str(e):  # FRAGILE - message might change
            flag_asset()

Example - RIGHT way (what this module enables):
    try:
        value = book_value(asset, as_of)
    except InvalidUsefulLifeError as e:
        log.warning("bad_life", extra={"years": e.useful_life_years})
        api_response(code=e.code, asset_id=e.asset_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AssetKernelError (base)
    |
    +-- DepreciationError
    |   +-- InvalidInputError
    |   |   +-- InvalidUsefulLifeError      (also a ZeroDivisionError)
    |   |   +-- NegativeUnitPriceError
    |   |   +-- InvalidSivDateError
    |   |   +-- InvalidResidualPercentageError
    |   |   +-- InvalidBudgetYearError
    |   +-- InconsistentSalvageOverrideError
    |   +-- DepreciationMethodNotImplementedError
    |
    +-- AssetError
        +-- AssetNotFoundError
        +-- InvalidCapitalImprovementError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                                 | When Raised
--------------|--------------------------------------|------------------------------------
Depreciation  | INVALID_INPUT                        | Generic malformed engine input
              | INVALID_USEFUL_LIFE                  | useful_life_years <= 0
              | NEGATIVE_UNIT_PRICE                  | unit_price < 0
              | INVALID_SIV_DATE                     | SIV date missing or unparsable
              | INVALID_RESIDUAL_PERCENTAGE          | residual % outside [0, 100]
              | INVALID_BUDGET_YEAR                  | label not "YYYY/YYYY+1"
              | INCONSISTENT_SALVAGE_OVERRIDE        | salvage value > unit price
              | DEPRECIATION_METHOD_NOT_IMPLEMENTED  | method other than straight line
--------------|--------------------------------------|------------------------------------
Asset         | ASSET_NOT_FOUND                      | Asset ID doesn't exist
              | INVALID_CAPITAL_IMPROVEMENT          | Improvement cost <= 0

===============================================================================
DESIGN DECISIONS
===============================================================================

1. WHY INHERIT FROM Exception (not ValueError, etc.)?
   Domain exceptions should be catchable as a group.  The one exception is
   InvalidUsefulLifeError, which is also a ZeroDivisionError: a zero useful
   life is, arithmetically, a division by zero in the monthly rate, and
   callers that guard the division directly keep working.

2. WHY code CLASS ATTRIBUTE (not instance)?
   Codes are static per exception type and usable without instantiation.

3. WHY STORE ALL CONTEXT AS ATTRIBUTES?
   The structured log formatter copies public attributes into the log
   record as ``exc_<name>`` fields.
"""

from __future__ import annotations

from typing import Any


class AssetKernelError(Exception):
    """
    Base exception for all asset kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ASSET_KERNEL_ERROR"


# Depreciation-related exceptions


class DepreciationError(AssetKernelError):
    """Base exception for depreciation engine errors."""

    code: str = "DEPRECIATION_ERROR"


class InvalidInputError(DepreciationError):
    """Engine input is malformed and no meaningful number can be produced."""

    code: str = "INVALID_INPUT"

    def __init__(self, message: str, asset_id: str | None = None):
        self.asset_id = asset_id
        super().__init__(message)


class InvalidUsefulLifeError(InvalidInputError, ZeroDivisionError):
    """Useful life is zero, negative, or not an integer number of years."""

    code: str = "INVALID_USEFUL_LIFE"

    def __init__(self, useful_life_years: Any, asset_id: str | None = None):
        self.useful_life_years = useful_life_years
        super().__init__(
            f"Useful life must be a positive whole number of years, "
            f"got {useful_life_years!r}",
            asset_id=asset_id,
        )


class NegativeUnitPriceError(InvalidInputError):
    """Acquisition cost is below zero."""

    code: str = "NEGATIVE_UNIT_PRICE"

    def __init__(self, unit_price: Any, asset_id: str | None = None):
        self.unit_price = str(unit_price)
        super().__init__(
            f"Unit price cannot be negative, got {unit_price}",
            asset_id=asset_id,
        )


class InvalidSivDateError(InvalidInputError):
    """SIV (in-service) date is missing or cannot be parsed."""

    code: str = "INVALID_SIV_DATE"

    def __init__(self, siv_date: Any, asset_id: str | None = None):
        self.siv_date = str(siv_date)
        super().__init__(
            f"Invalid SIV date: {siv_date!r}",
            asset_id=asset_id,
        )


class InvalidResidualPercentageError(InvalidInputError):
    """Residual percentage lies outside [0, 100]."""

    code: str = "INVALID_RESIDUAL_PERCENTAGE"

    def __init__(self, residual_percentage: Any, asset_id: str | None = None):
        self.residual_percentage = str(residual_percentage)
        super().__init__(
            f"Residual percentage must be between 0 and 100, "
            f"got {residual_percentage}",
            asset_id=asset_id,
        )


class InvalidBudgetYearError(InvalidInputError):
    """Budget-year label is not of the form ``YYYY/YYYY+1``."""

    code: str = "INVALID_BUDGET_YEAR"

    def __init__(self, label: Any, reason: str = "expected 'YYYY/YYYY+1'"):
        self.label = str(label)
        self.reason = reason
        super().__init__(f"Invalid budget year {label!r}: {reason}")


class InconsistentSalvageOverrideError(DepreciationError):
    """
    Effective salvage value exceeds the unit price.

    Indicates upstream data corruption; the engine refuses to clamp it.
    """

    code: str = "INCONSISTENT_SALVAGE_OVERRIDE"

    def __init__(
        self,
        salvage_value: Any,
        unit_price: Any,
        asset_id: str | None = None,
    ):
        self.salvage_value = str(salvage_value)
        self.unit_price = str(unit_price)
        self.asset_id = asset_id
        super().__init__(
            f"Salvage value {salvage_value} exceeds unit price {unit_price}"
        )


class DepreciationMethodNotImplementedError(DepreciationError):
    """The requested depreciation method has no specified formula."""

    code: str = "DEPRECIATION_METHOD_NOT_IMPLEMENTED"

    def __init__(self, method: str, asset_id: str | None = None):
        self.method = method
        self.asset_id = asset_id
        super().__init__(f"Depreciation method not implemented: {method}")


# Asset registry exceptions


class AssetError(AssetKernelError):
    """Base exception for asset registry errors."""

    code: str = "ASSET_ERROR"


class AssetNotFoundError(AssetError):
    """Asset with given ID was not found."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"Asset not found: {asset_id}")


class InvalidCapitalImprovementError(AssetError):
    """Capital improvement cost must be positive."""

    code: str = "INVALID_CAPITAL_IMPROVEMENT"

    def __init__(self, asset_id: str, cost: Any):
        self.asset_id = asset_id
        self.cost = str(cost)
        super().__init__(
            f"Capital improvement cost must be positive for asset "
            f"{asset_id}, got {cost}"
        )
