"""
Module: asset_engines.depreciation
Responsibility:
    Salvage value, straight-line monthly depreciation, partial-month
    prorating, capped accumulated depreciation, point-in-time book value,
    budget-year (non-calendar fiscal year) valuation and monthly
    aggregation across an asset population.  Every book-value figure in the
    system is computed here; report code only supplies asset snapshots and
    dates.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import asset_kernel exceptions/logging and sibling engine
    modules.  MUST NOT import asset_modules or asset_config.

Invariants enforced:
    - Purity: no clock access; "as of" dates are always parameters.
    - Decimal-only arithmetic; int/float/str inputs are converted with
      ``Decimal(str(value))`` before any arithmetic.
    - Cap: accumulated depreciation never exceeds the depreciable amount
      (``unit_price - salvage``).
    - Floor: book value never drops below salvage value, independently of
      the cap.
    - Pre-service: before the SIV date the book value is the unit price.
    - Saturation: once the useful life has elapsed the book value equals
      the salvage value exactly.

Failure modes:
    - InvalidUsefulLifeError (also ZeroDivisionError) for useful life <= 0.
    - NegativeUnitPriceError, InvalidSivDateError,
      InvalidResidualPercentageError, InvalidInputError for malformed input.
    - InconsistentSalvageOverrideError when salvage exceeds unit price.
    - DepreciationMethodNotImplementedError for any method other than
      straight line.
    - InvalidBudgetYearError for labels not of the form ``YYYY/YYYY+1``.
    - Population aggregation never raises for a single bad record; the
      record is skipped and logged at WARNING.

Usage:
    from datetime import date
    from decimal import Decimal
    from asset_engines.depreciation import AssetFinancials, book_value

    asset = AssetFinancials(
        unit_price=Decimal("3400.00"),
        siv_date=date(2021, 2, 10),
        useful_life_years=10,
        residual_percentage=Decimal("1"),
    )
    book_value(asset, date(2021, 6, 30))
"""

from __future__ import annotations

import calendar
import dataclasses
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

from asset_engines.tracer import traced_engine
from asset_kernel.exceptions import (
    DepreciationError,
    DepreciationMethodNotImplementedError,
    InconsistentSalvageOverrideError,
    InvalidBudgetYearError,
    InvalidInputError,
    InvalidResidualPercentageError,
    InvalidSivDateError,
    InvalidUsefulLifeError,
    NegativeUnitPriceError,
)
from asset_kernel.logging_config import get_logger

logger = get_logger("engines.depreciation")

ENGINE_NAME = "depreciation"
ENGINE_VERSION = "1.0"

# July-June fiscal year unless configured otherwise.
DEFAULT_FISCAL_YEAR_START_MONTH = 7
MONTHS_PER_YEAR = 12

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")

_BUDGET_YEAR_RE = re.compile(r"^\s*(\d{4})\s*(?:/\s*(\d{4})\s*)?$")


# =============================================================================
# Value objects
# =============================================================================


class DepreciationMethod(Enum):
    """Depreciation methods an asset may carry."""
    STRAIGHT_LINE = "straight_line"
    DECLINING_BALANCE = "declining_balance"
    DOUBLE_DECLINING = "double_declining"
    SUM_OF_YEARS_DIGITS = "sum_of_years_digits"
    UNITS_OF_ACTIVITY = "units_of_activity"

    @classmethod
    def parse(cls, value: Any) -> "DepreciationMethod":
        """Accept a member, its value, or its name in any case."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.STRAIGHT_LINE
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise InvalidInputError(f"Unknown depreciation method: {value!r}")


@dataclass(frozen=True)
class AssetFinancials:
    """
    Financial snapshot of one asset -- the only entity the engine touches.

    Contract:
        Frozen dataclass.  Fields are stored as given; every engine entry
        point runs ``validate_financials`` first, which returns a normalized
        copy (Decimal amounts, ``date`` SIV date, enum method) or raises.
    Non-goals:
        Persistence, serial-number uniqueness and audit history belong to
        the asset registry, not to this snapshot.
    """

    unit_price: Decimal
    siv_date: date
    useful_life_years: int
    residual_percentage: Decimal | None = None
    salvage_value: Decimal | None = None
    depreciation_method: DepreciationMethod = DepreciationMethod.STRAIGHT_LINE
    asset_id: str | None = None
    department: str | None = None
    category: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssetFinancials":
        """
        Build a validated snapshot from an asset record.

        Accepts snake_case keys or the camelCase keys used by asset
        imports (``unitPrice``, ``sivDate``, ``usefulLifeYears``,
        ``residualPercentage``, ``salvageValue``, ``depreciationMethod``).

        Raises:
            InvalidInputError (or a subclass) for missing or malformed fields.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(
                f"Asset record must be a mapping, got {type(data).__name__}"
            )

        def pick(snake: str, camel: str) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel)

        asset_id = pick("asset_id", "assetId")
        if asset_id is None:
            asset_id = data.get("id")

        if pick("unit_price", "unitPrice") is None:
            raise InvalidInputError(
                "Asset record is missing unit price",
                asset_id=_str_or_none(asset_id),
            )
        if pick("useful_life_years", "usefulLifeYears") is None:
            raise InvalidUsefulLifeError(None, asset_id=_str_or_none(asset_id))

        snapshot = cls(
            unit_price=pick("unit_price", "unitPrice"),
            siv_date=pick("siv_date", "sivDate"),
            useful_life_years=pick("useful_life_years", "usefulLifeYears"),
            residual_percentage=pick("residual_percentage", "residualPercentage"),
            salvage_value=pick("salvage_value", "salvageValue"),
            depreciation_method=pick("depreciation_method", "depreciationMethod"),
            asset_id=_str_or_none(asset_id),
            department=_str_or_none(data.get("department")),
            category=_str_or_none(data.get("category")),
        )
        return validate_financials(snapshot)

    @property
    def effective_salvage_value(self) -> Decimal:
        """Salvage value after applying the explicit-override rule."""
        return resolve_salvage_value(
            self.unit_price, self.residual_percentage, self.salvage_value,
        )

    @property
    def depreciable_amount(self) -> Decimal:
        """Unit price less effective salvage value."""
        return _to_decimal(self.unit_price, "unit_price") - self.effective_salvage_value


@dataclass(frozen=True)
class Period:
    """An inclusive calendar date range."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidInputError(
                f"Period end {self.end} is before start {self.start}"
            )


@dataclass(frozen=True)
class FiscalYear:
    """A budget year: label plus the calendar dates it covers."""
    label: str
    start_year: int
    start: date
    end: date

    @property
    def period(self) -> Period:
        return Period(self.start, self.end)


@dataclass(frozen=True)
class BudgetYearValuation:
    """
    Valuation of one asset for one budget year.

    ``reported_value`` is the carrying amount shown on budget-year reports:
    the depreciable amount not yet expensed at fiscal-year end.
    ``book_value`` is the gross book value at fiscal-year end (salvage
    included).  They differ by exactly the salvage value until the asset
    saturates.
    """
    fiscal_year: FiscalYear
    salvage_value: Decimal
    depreciable_amount: Decimal
    depreciation_in_year: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal
    reported_value: Decimal


@dataclass(frozen=True)
class MonthlyDepreciationLine:
    """One month of a depreciation schedule."""
    year: int
    month: int
    depreciation_expense: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal


@dataclass(frozen=True)
class AnnualDepreciationLine:
    """One calendar year of a depreciation schedule."""
    year: int
    depreciation_expense: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal


@dataclass(frozen=True)
class DepreciationSummary:
    """Point-in-time depreciation position of one asset."""
    as_of: date
    unit_price: Decimal
    salvage_value: Decimal
    depreciable_amount: Decimal
    current_book_value: Decimal
    accumulated_depreciation: Decimal
    remaining_depreciable_amount: Decimal
    depreciation_method: DepreciationMethod
    useful_life_years: int
    residual_percentage: Decimal
    siv_date: date

    @property
    def is_fully_depreciated(self) -> bool:
        return self.remaining_depreciable_amount <= _ZERO


AsOf = date | datetime | str | Period


# =============================================================================
# Input normalization
# =============================================================================


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def _to_decimal(value: Any, field_name: str, asset_id: str | None = None) -> Decimal:
    """Convert a numeric input to a finite Decimal."""
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(
            f"{field_name} must be numeric, got {value!r}", asset_id=asset_id,
        )
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidInputError(
                f"{field_name} must be numeric, got {value!r}", asset_id=asset_id,
            ) from exc
    else:
        raise InvalidInputError(
            f"{field_name} must be numeric, got {type(value).__name__}",
            asset_id=asset_id,
        )
    if not result.is_finite():
        raise InvalidInputError(
            f"{field_name} must be finite, got {value!r}", asset_id=asset_id,
        )
    return result


def _parse_iso_date(text: str) -> date:
    """Parse a whole ISO date or datetime string; anything else is ValueError."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def _to_date(value: Any, asset_id: str | None = None) -> date:
    """Convert a date, datetime or ISO string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return _parse_iso_date(value.strip())
        except ValueError as exc:
            raise InvalidSivDateError(value, asset_id=asset_id) from exc
    raise InvalidSivDateError(value, asset_id=asset_id)


def _to_query_date(value: Any, what: str) -> date:
    """Convert a query date; malformed values are generic input errors."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return _parse_iso_date(value.strip())
        except ValueError as exc:
            raise InvalidInputError(f"Invalid {what}: {value!r}") from exc
    raise InvalidInputError(f"Invalid {what}: {value!r}")


def _to_useful_life(value: Any, asset_id: str | None = None) -> int:
    if isinstance(value, bool) or value is None:
        raise InvalidUsefulLifeError(value, asset_id=asset_id)
    if isinstance(value, int):
        years = value
    else:
        try:
            as_decimal = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidUsefulLifeError(value, asset_id=asset_id) from exc
        if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
            raise InvalidUsefulLifeError(value, asset_id=asset_id)
        years = int(as_decimal)
    if years <= 0:
        raise InvalidUsefulLifeError(value, asset_id=asset_id)
    return years


def validate_financials(asset: AssetFinancials) -> AssetFinancials:
    """
    Validate an asset snapshot and return a normalized copy.

    Postconditions:
        - unit_price, residual_percentage, salvage_value are Decimal (or None
          for the optional fields).
        - siv_date is a ``date``; useful_life_years is a positive ``int``.
        - Effective salvage value is within [0, unit_price].

    Raises:
        NegativeUnitPriceError, InvalidSivDateError, InvalidUsefulLifeError,
        InvalidResidualPercentageError, InvalidInputError,
        InconsistentSalvageOverrideError.
    """
    asset_id = asset.asset_id

    unit_price = _to_decimal(asset.unit_price, "unit_price", asset_id)
    if unit_price < _ZERO:
        raise NegativeUnitPriceError(unit_price, asset_id=asset_id)

    siv_date = _to_date(asset.siv_date, asset_id)
    useful_life_years = _to_useful_life(asset.useful_life_years, asset_id)

    residual_percentage = None
    if asset.residual_percentage is not None:
        residual_percentage = _to_decimal(
            asset.residual_percentage, "residual_percentage", asset_id,
        )
        if residual_percentage < _ZERO or residual_percentage > _HUNDRED:
            raise InvalidResidualPercentageError(
                residual_percentage, asset_id=asset_id,
            )

    salvage_value = None
    if asset.salvage_value is not None:
        salvage_value = _to_decimal(asset.salvage_value, "salvage_value", asset_id)
        if salvage_value < _ZERO:
            raise InvalidInputError(
                f"Salvage value cannot be negative, got {salvage_value}",
                asset_id=asset_id,
            )

    effective_salvage = resolve_salvage_value(
        unit_price, residual_percentage, salvage_value,
    )
    if effective_salvage > unit_price:
        logger.warning(
            "salvage_override_exceeds_unit_price",
            extra={
                "asset_id": asset_id,
                "salvage_value": str(effective_salvage),
                "unit_price": str(unit_price),
            },
        )
        raise InconsistentSalvageOverrideError(
            effective_salvage, unit_price, asset_id=asset_id,
        )

    return dataclasses.replace(
        asset,
        unit_price=unit_price,
        siv_date=siv_date,
        useful_life_years=useful_life_years,
        residual_percentage=residual_percentage,
        salvage_value=salvage_value,
        depreciation_method=DepreciationMethod.parse(asset.depreciation_method),
    )


def _require_straight_line(asset: AssetFinancials) -> None:
    if asset.depreciation_method is not DepreciationMethod.STRAIGHT_LINE:
        raise DepreciationMethodNotImplementedError(
            asset.depreciation_method.value, asset_id=asset.asset_id,
        )


def quantize_money(value: Decimal, places: int = 2) -> Decimal:
    """Round a computed amount for display (ROUND_HALF_UP)."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


# =============================================================================
# Calendar helpers
# =============================================================================


def days_in_month(year: int, month: int) -> int:
    """Days in a calendar month, leap-year aware."""
    if not 1 <= month <= MONTHS_PER_YEAR:
        raise InvalidInputError(f"Month must be 1-12, got {month}")
    return calendar.monthrange(year, month)[1]


def month_end(year: int, month: int) -> date:
    return date(year, month, days_in_month(year, month))


def _month_index(year: int, month: int) -> int:
    return year * MONTHS_PER_YEAR + (month - 1)


def _index_to_year_month(index: int) -> tuple[int, int]:
    year, zero_based = divmod(index, MONTHS_PER_YEAR)
    return year, zero_based + 1


# =============================================================================
# Core formulas
# =============================================================================


def resolve_salvage_value(
    unit_price: Any,
    residual_percentage: Any = None,
    explicit_salvage_value: Any = None,
) -> Decimal:
    """
    Resolve the salvage value of an asset.

    An explicit salvage value always wins, even when it implies a different
    residual percentage than the one stated.  Otherwise a positive residual
    percentage is applied to the unit price; otherwise salvage is zero.
    No clamping happens here.
    """
    if explicit_salvage_value is not None:
        return _to_decimal(explicit_salvage_value, "salvage_value")
    if residual_percentage is not None:
        percentage = _to_decimal(residual_percentage, "residual_percentage")
        if percentage > _ZERO:
            return _to_decimal(unit_price, "unit_price") * (percentage / _HUNDRED)
    return _ZERO


def monthly_depreciation(
    unit_price: Any,
    salvage_value: Any,
    useful_life_years: Any,
) -> Decimal:
    """
    Straight-line depreciation for one full month.

    Formula: (unit_price - salvage_value) / (useful_life_years * 12)

    Raises:
        InvalidUsefulLifeError: useful life <= 0 (a ZeroDivisionError).
    """
    years = _to_useful_life(useful_life_years)
    depreciable_amount = (
        _to_decimal(unit_price, "unit_price")
        - _to_decimal(salvage_value, "salvage_value")
    )
    return depreciable_amount / Decimal(years * MONTHS_PER_YEAR)


def prorated_month_fraction(
    siv_date: Any,
    target_month: int,
    target_year: int,
) -> Decimal:
    """
    Fraction of a calendar month during which the asset was in service.

    The SIV day itself counts: an asset placed in service on the 10th of a
    28-day month accrues 19/28 of that month.  Later months accrue fully;
    earlier months accrue nothing.
    """
    siv = _to_date(siv_date)
    dim = days_in_month(target_year, target_month)
    target = _month_index(target_year, target_month)
    siv_index = _month_index(siv.year, siv.month)
    if target < siv_index:
        return _ZERO
    if target > siv_index:
        return _ONE
    return Decimal(dim - siv.day + 1) / Decimal(dim)


def _final_month_index(asset: AssetFinancials) -> int:
    """Month in which the useful life runs out and the asset saturates."""
    siv = asset.siv_date
    total_months = asset.useful_life_years * MONTHS_PER_YEAR
    # A partial first month pushes the remainder into one extra month.
    extra = 0 if siv.day == 1 else 1
    return _month_index(siv.year, siv.month) + total_months - 1 + extra


def _cumulative_through(asset: AssetFinancials, index: int) -> Decimal:
    """
    Capped accumulated depreciation from the SIV month through ``index``.

    Preconditions: ``asset`` is validated and straight-line.
    """
    siv = asset.siv_date
    siv_index = _month_index(siv.year, siv.month)
    if index < siv_index:
        return _ZERO

    salvage = asset.effective_salvage_value
    depreciable = asset.unit_price - salvage
    if index >= _final_month_index(asset):
        # Absorbs the sub-cent residue of a non-terminating monthly rate.
        return depreciable

    rate = monthly_depreciation(asset.unit_price, salvage, asset.useful_life_years)
    first = prorated_month_fraction(siv, siv.month, siv.year)
    raw = rate * (first + Decimal(index - siv_index))
    return min(raw, depreciable)


def _book_value_at(asset: AssetFinancials, as_of: date) -> Decimal:
    if as_of < asset.siv_date:
        return asset.unit_price
    salvage = asset.effective_salvage_value
    accumulated = _cumulative_through(asset, _month_index(as_of.year, as_of.month))
    return max(asset.unit_price - accumulated, salvage)


def _prepare(asset: AssetFinancials) -> AssetFinancials:
    normalized = validate_financials(asset)
    _require_straight_line(normalized)
    return normalized


@traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("asset", "period_start", "period_end"))
def accumulated_depreciation(
    asset: AssetFinancials,
    period_start: Any,
    period_end: Any,
) -> Decimal:
    """
    Depreciation accrued over the calendar months overlapping a period.

    Each month from the SIV month onward contributes
    ``monthly_depreciation * prorated_month_fraction``.  The running total
    is capped at the depreciable amount, so the result for any period is
    at most ``unit_price - salvage``.

    Raises:
        InvalidInputError: period_end before period_start.
    """
    asset = _prepare(asset)
    start = _to_query_date(period_start, "period start")
    end = _to_query_date(period_end, "period end")
    if end < start:
        raise InvalidInputError(f"Period end {end} is before start {start}")

    through_end = _cumulative_through(asset, _month_index(end.year, end.month))
    before_start = _cumulative_through(asset, _month_index(start.year, start.month) - 1)
    return through_end - before_start


@traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("asset", "as_of"))
def book_value(asset: AssetFinancials, as_of: AsOf) -> Decimal:
    """
    Book value at a date, or at the end of a ``Period``.

    ``max(unit_price - capped_accumulated_depreciation, salvage_value)``;
    exactly ``unit_price`` before the SIV date.  The month containing
    ``as_of`` counts as accrued.
    """
    asset = _prepare(asset)
    when = as_of.end if isinstance(as_of, Period) else _to_query_date(as_of, "as-of date")
    return _book_value_at(asset, when)


def book_value_for_month(asset: AssetFinancials, year: int, month: int) -> Decimal:
    """Book value at the end of a calendar month."""
    asset = _prepare(asset)
    return _book_value_at(asset, month_end(year, month))


# =============================================================================
# Budget years
# =============================================================================


def _check_start_month(start_month: int) -> int:
    if (
        isinstance(start_month, bool)
        or not isinstance(start_month, int)
        or not 1 <= start_month <= MONTHS_PER_YEAR
    ):
        raise InvalidInputError(
            f"Fiscal year start month must be 1-12, got {start_month!r}"
        )
    return start_month


def _fiscal_year(start_year: int, start_month: int) -> FiscalYear:
    start = date(start_year, start_month, 1)
    if start_month == 1:
        end = date(start_year, 12, 31)
    else:
        end = month_end(start_year + 1, start_month - 1)
    # Calendar budget years are labelled by their single year.
    label = str(start_year) if start_month == 1 else f"{start_year}/{start_year + 1}"
    return FiscalYear(
        label=label,
        start_year=start_year,
        start=start,
        end=end,
    )


def parse_budget_year(
    label: Any,
    fiscal_year_start_month: int = DEFAULT_FISCAL_YEAR_START_MONTH,
) -> FiscalYear:
    """
    Parse a budget-year label into the fiscal year it denotes.

    ``"2020/2021"`` with a July start covers 2020-07-01 through 2021-06-30.
    A bare ``"2020"`` is read as the start year.
    """
    start_month = _check_start_month(fiscal_year_start_month)
    match = _BUDGET_YEAR_RE.match(str(label)) if label is not None else None
    if match is None:
        raise InvalidBudgetYearError(label)
    start_year = int(match.group(1))
    if match.group(2) is not None and int(match.group(2)) != start_year + 1:
        raise InvalidBudgetYearError(label, reason="years must be consecutive")
    return _fiscal_year(start_year, start_month)


def budget_year_for_date(
    when: Any,
    fiscal_year_start_month: int = DEFAULT_FISCAL_YEAR_START_MONTH,
) -> FiscalYear:
    """The fiscal year containing a date."""
    start_month = _check_start_month(fiscal_year_start_month)
    day = _to_query_date(when, "date")
    start_year = day.year if day.month >= start_month else day.year - 1
    return _fiscal_year(start_year, start_month)


@traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("asset", "budget_year_label"))
def budget_year_summary(
    asset: AssetFinancials,
    budget_year_label: Any,
    fiscal_year_start_month: int | None = None,
) -> BudgetYearValuation:
    """Full valuation of one asset for one budget year."""
    asset = _prepare(asset)
    fiscal_year = parse_budget_year(
        budget_year_label,
        DEFAULT_FISCAL_YEAR_START_MONTH if fiscal_year_start_month is None
        else fiscal_year_start_month,
    )
    salvage = asset.effective_salvage_value
    depreciable = asset.unit_price - salvage

    end_index = _month_index(fiscal_year.end.year, fiscal_year.end.month)
    start_index = _month_index(fiscal_year.start.year, fiscal_year.start.month)
    accumulated = _cumulative_through(asset, end_index)
    in_year = accumulated - _cumulative_through(asset, start_index - 1)

    return BudgetYearValuation(
        fiscal_year=fiscal_year,
        salvage_value=salvage,
        depreciable_amount=depreciable,
        depreciation_in_year=in_year,
        accumulated_depreciation=accumulated,
        book_value=_book_value_at(asset, fiscal_year.end),
        reported_value=max(depreciable - accumulated, _ZERO),
    )


def book_value_for_budget_year(
    asset: AssetFinancials,
    budget_year_label: Any,
    fiscal_year_start_month: int | None = None,
) -> Decimal:
    """
    Carrying amount reported for a budget year such as ``"2020/2021"``.

    This is the depreciable amount not yet expensed by fiscal-year end
    (salvage excluded), the figure the budget-year asset reports show.
    Example: 3400.00 at 1 % residual, in service 2021-02-10, 10 years,
    July start -> about 3234.77 for "2020/2021".

    It is not a book value, so the book-value guarantees do not apply:

    * a budget year ending before the SIV date returns the full
      depreciable amount (3366.00 above), not the unit price;
    * once the asset is fully depreciated it returns 0, not salvage.

    Use ``budget_year_summary(...).book_value`` or ``book_value`` for the
    gross carrying amount, which stays within [salvage, unit_price].
    """
    return budget_year_summary(
        asset, budget_year_label, fiscal_year_start_month,
    ).reported_value


# =============================================================================
# Schedules and summaries
# =============================================================================


def monthly_schedule(
    asset: AssetFinancials,
    through: Any = None,
) -> tuple[MonthlyDepreciationLine, ...]:
    """
    Month-by-month schedule from the SIV month until saturation.

    The SIV month is prorated and the final month absorbs rounding, so the
    expenses sum exactly to the depreciable amount and the last book value
    equals salvage.  ``through`` truncates the schedule at that month.
    """
    asset = _prepare(asset)
    siv = asset.siv_date
    first_index = _month_index(siv.year, siv.month)
    last_index = _final_month_index(asset)
    if through is not None:
        limit = _to_query_date(through, "schedule end")
        last_index = min(last_index, _month_index(limit.year, limit.month))

    salvage = asset.effective_salvage_value
    depreciable = asset.unit_price - salvage
    lines: list[MonthlyDepreciationLine] = []
    previous = _ZERO
    for index in range(first_index, last_index + 1):
        accumulated = _cumulative_through(asset, index)
        year, month = _index_to_year_month(index)
        lines.append(MonthlyDepreciationLine(
            year=year,
            month=month,
            depreciation_expense=accumulated - previous,
            accumulated_depreciation=accumulated,
            book_value=max(asset.unit_price - accumulated, salvage),
        ))
        previous = accumulated
        if accumulated >= depreciable:
            break
    return tuple(lines)


def annual_schedule(asset: AssetFinancials) -> tuple[AnnualDepreciationLine, ...]:
    """Calendar-year roll-up of ``monthly_schedule``."""
    by_year: dict[int, list[MonthlyDepreciationLine]] = {}
    for line in monthly_schedule(asset):
        by_year.setdefault(line.year, []).append(line)

    return tuple(
        AnnualDepreciationLine(
            year=year,
            depreciation_expense=sum(
                (line.depreciation_expense for line in lines), _ZERO,
            ),
            accumulated_depreciation=lines[-1].accumulated_depreciation,
            book_value=lines[-1].book_value,
        )
        for year, lines in sorted(by_year.items())
    )


def depreciation_summary(asset: AssetFinancials, as_of: Any) -> DepreciationSummary:
    """Depreciation position of one asset at a date."""
    asset = _prepare(asset)
    when = _to_query_date(as_of, "as-of date")
    salvage = asset.effective_salvage_value
    current = _book_value_at(asset, when)
    return DepreciationSummary(
        as_of=when,
        unit_price=asset.unit_price,
        salvage_value=salvage,
        depreciable_amount=asset.unit_price - salvage,
        current_book_value=current,
        accumulated_depreciation=asset.unit_price - current,
        remaining_depreciable_amount=current - salvage,
        depreciation_method=asset.depreciation_method,
        useful_life_years=asset.useful_life_years,
        residual_percentage=asset.residual_percentage or _ZERO,
        siv_date=asset.siv_date,
    )


# =============================================================================
# Population aggregation
# =============================================================================


def _record_id(record: Any) -> str | None:
    if isinstance(record, AssetFinancials):
        return record.asset_id
    if isinstance(record, Mapping):
        for key in ("asset_id", "assetId", "id"):
            if record.get(key) is not None:
                return str(record[key])
    return None


def _coerce_record(record: Any) -> AssetFinancials:
    if isinstance(record, AssetFinancials):
        return validate_financials(record)
    return AssetFinancials.from_dict(record)


def _aggregate_months(
    assets: Iterable[Any],
    year: int,
    strict: bool = False,
) -> tuple[dict[int, Decimal], dict[int, int]]:
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidInputError(f"Year must be an integer, got {year!r}")

    totals = {month: _ZERO for month in range(1, MONTHS_PER_YEAR + 1)}
    counts = {month: 0 for month in range(1, MONTHS_PER_YEAR + 1)}
    skipped = 0
    included = 0

    for record in assets:
        try:
            asset = _coerce_record(record)
            _require_straight_line(asset)
            values: dict[int, Decimal] = {}
            for month in range(1, MONTHS_PER_YEAR + 1):
                end = month_end(year, month)
                if asset.siv_date > end:
                    continue
                values[month] = _book_value_at(asset, end)
        except DepreciationError as exc:
            if strict:
                raise
            skipped += 1
            logger.warning(
                "asset_skipped_in_aggregation",
                extra={
                    "asset_id": _record_id(record),
                    "error_code": exc.code,
                    "error": str(exc),
                    "year": year,
                },
            )
            continue

        included += 1
        for month, value in values.items():
            totals[month] += value
            counts[month] += 1

    logger.info(
        "monthly_book_values_aggregated",
        extra={"year": year, "assets_included": included, "assets_skipped": skipped},
    )
    return totals, counts


@traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("year",))
def monthly_book_value_totals(
    assets: Iterable[Any],
    year: int,
    strict: bool = False,
) -> dict[int, Decimal]:
    """
    Sum of month-end book values across an asset population.

    Assets not yet in service at a month end are left out of that month's
    sum entirely.  Malformed records are skipped and logged so the batch
    completes, unless ``strict`` is set, in which case the first
    ``DepreciationError`` propagates.  All twelve months are present in
    the result.
    """
    totals, _ = _aggregate_months(assets, year, strict)
    return totals


def monthly_book_value_counts(
    assets: Iterable[Any],
    year: int,
    strict: bool = False,
) -> dict[int, int]:
    """Number of assets contributing to each month of the totals."""
    _, counts = _aggregate_months(assets, year, strict)
    return counts
