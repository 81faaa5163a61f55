"""
Property-based tests for the straight-line depreciation engine.

Hypothesis generates asset snapshots and dates and checks the properties
every valuation must keep, whatever the inputs:

- Floor and ceiling: salvage <= book value <= unit price.
- Pre-service: before the SIV date the book value is the unit price.
- Monotonicity: book value never rises as the as-of date moves forward.
- Saturation: once the useful life has run out the book value is salvage.
- Lifetime total: depreciation from SIV to saturation is the depreciable
  amount, and the monthly schedule adds up to it and ends at salvage.
- Budget years: the reported value is never negative and never above
  the gross book value at fiscal-year end.
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from asset_engines.depreciation import (
    AssetFinancials,
    accumulated_depreciation,
    book_value,
    budget_year_summary,
    monthly_schedule,
)

PROPERTY_SETTINGS = settings(max_examples=150, deadline=None)

# Far enough past any generated SIV date plus a 40-year life.
AFTER_ALL_LIVES = date(2090, 12, 31)


@composite
def assets(draw):
    """Valid straight-line snapshots, salvage from a residual percentage."""
    return AssetFinancials(
        unit_price=draw(st.decimals(
            min_value=Decimal("0.00"),
            max_value=Decimal("10000000.00"),
            places=2,
            allow_nan=False,
            allow_infinity=False,
        )),
        siv_date=draw(st.dates(min_value=date(1990, 1, 1), max_value=date(2040, 12, 31))),
        useful_life_years=draw(st.integers(min_value=1, max_value=40)),
        residual_percentage=draw(st.one_of(
            st.none(),
            st.decimals(
                min_value=Decimal("0"),
                max_value=Decimal("99.99"),
                places=2,
                allow_nan=False,
                allow_infinity=False,
            ),
        )),
        asset_id="AST-PROP",
    )


query_dates = st.dates(min_value=date(1985, 1, 1), max_value=AFTER_ALL_LIVES)


def _salvage(asset: AssetFinancials) -> Decimal:
    return asset.effective_salvage_value


class TestBookValueProperties:

    @PROPERTY_SETTINGS
    @given(asset=assets(), as_of=query_dates)
    def test_floor_and_ceiling(self, asset, as_of):
        value = book_value(asset, as_of)
        assert _salvage(asset) <= value <= asset.unit_price

    @PROPERTY_SETTINGS
    @given(asset=assets(), days_before=st.integers(min_value=1, max_value=3650))
    def test_pre_service_is_unit_price(self, asset, days_before):
        as_of = asset.siv_date - timedelta(days=days_before)
        assert book_value(asset, as_of) == asset.unit_price

    @PROPERTY_SETTINGS
    @given(asset=assets(), first=query_dates, second=query_dates)
    def test_monotonically_non_increasing(self, asset, first, second):
        earlier, later = sorted((first, second))
        assert book_value(asset, later) <= book_value(asset, earlier)

    @PROPERTY_SETTINGS
    @given(asset=assets())
    def test_saturates_at_salvage(self, asset):
        assert book_value(asset, AFTER_ALL_LIVES) == _salvage(asset)


class TestLifetimeProperties:

    @PROPERTY_SETTINGS
    @given(asset=assets())
    def test_lifetime_accumulation_is_depreciable_amount(self, asset):
        total = accumulated_depreciation(asset, asset.siv_date, AFTER_ALL_LIVES)
        assert total == asset.unit_price - _salvage(asset)

    @PROPERTY_SETTINGS
    @given(asset=assets())
    def test_schedule_sums_to_depreciable_amount(self, asset):
        lines = monthly_schedule(asset)
        expensed = sum((line.depreciation_expense for line in lines), Decimal("0"))

        assert abs(expensed - (asset.unit_price - _salvage(asset))) < Decimal("1e-9")
        assert lines[-1].book_value == _salvage(asset)
        assert all(line.depreciation_expense >= 0 for line in lines)

    @PROPERTY_SETTINGS
    @given(asset=assets())
    def test_schedule_never_longer_than_life_plus_one_month(self, asset):
        assert len(monthly_schedule(asset)) <= asset.useful_life_years * 12 + 1


class TestBudgetYearProperties:

    @PROPERTY_SETTINGS
    @given(asset=assets(), start_year=st.integers(min_value=1985, max_value=2080))
    def test_reported_value_bounded_by_gross(self, asset, start_year):
        valuation = budget_year_summary(asset, f"{start_year}/{start_year + 1}")

        assert valuation.reported_value >= 0
        assert valuation.reported_value <= valuation.book_value
        assert valuation.depreciation_in_year >= 0
        assert valuation.accumulated_depreciation <= valuation.depreciable_amount
