"""ORM round-trip tests for the asset registry module."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from asset_engines.depreciation import DepreciationMethod, book_value_for_budget_year, quantize_money
from asset_modules.registry.models import Asset, AssetStatus
from asset_modules.registry.orm import AssetModel, CapitalImprovementModel


# ---------------------------------------------------------------------------
# Local helpers -- create parent rows with correct ORM field names
# ---------------------------------------------------------------------------

def _make_asset(session, test_actor_id, **overrides):
    """Create an AssetModel with sensible defaults."""
    fields = dict(
        name="Laptop",
        serial_number=f"SN-{uuid4().hex[:8]}",
        unit_price=Decimal("3400.00"),
        siv_date=date(2021, 2, 10),
        useful_life_years=10,
        residual_percentage=Decimal("1"),
        depreciation_method="straight_line",
        status="active",
        department="Finance",
        category="IT Equipment",
        created_by_id=test_actor_id,
    )
    fields.update(overrides)
    asset = AssetModel(**fields)
    session.add(asset)
    session.flush()
    return asset


# ===================================================================
# AssetModel
# ===================================================================

class TestAssetModelORM:

    def test_create_and_query(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id, serial_number="SN-0001")
        queried = session.get(AssetModel, asset.id)
        assert queried is not None
        assert queried.serial_number == "SN-0001"
        assert queried.unit_price == Decimal("3400.00")
        assert queried.siv_date == date(2021, 2, 10)
        assert queried.useful_life_years == 10
        assert queried.salvage_value is None

    def test_serial_number_unique(self, session, test_actor_id):
        _make_asset(session, test_actor_id, serial_number="SN-DUP")
        with pytest.raises(IntegrityError):
            _make_asset(session, test_actor_id, serial_number="SN-DUP")

    def test_nullable_import_fields(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id, unit_price=None, siv_date=None)
        queried = session.get(AssetModel, asset.id)
        assert queried.unit_price is None
        assert queried.siv_date is None

    def test_to_financials(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id)
        financials = asset.to_financials()
        assert financials.asset_id == str(asset.id)
        assert financials.department == "Finance"
        assert quantize_money(
            book_value_for_budget_year(financials, "2020/2021"),
        ) == Decimal("3234.77")

    def test_dto_round_trip(self, session, test_actor_id):
        dto = Asset(
            id=uuid4(),
            name="Projector",
            serial_number="SN-PROJ",
            unit_price=Decimal("900.00"),
            siv_date=date(2022, 9, 1),
            useful_life_years=4,
            salvage_value=Decimal("100.00"),
            status=AssetStatus.UNDER_MAINTENANCE,
            location="Room 12",
        )
        session.add(AssetModel.from_dto(dto, created_by_id=test_actor_id))
        session.flush()

        loaded = session.get(AssetModel, dto.id).to_dto()
        assert loaded.id == dto.id
        assert loaded.status is AssetStatus.UNDER_MAINTENANCE
        assert loaded.depreciation_method is DepreciationMethod.STRAIGHT_LINE
        assert loaded.salvage_value == Decimal("100.00")
        assert loaded.location == "Room 12"

    def test_audit_columns(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id)
        session.commit()
        queried = session.get(AssetModel, asset.id)
        assert queried.created_by_id == test_actor_id
        assert queried.updated_by_id is None


# ===================================================================
# CapitalImprovementModel
# ===================================================================

class TestCapitalImprovementModelORM:

    def test_create_and_query(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id)
        improvement = CapitalImprovementModel(
            asset_id=asset.id,
            description="Memory upgrade",
            improvement_date=date(2022, 1, 15),
            cost=Decimal("250.00"),
            created_by_id=test_actor_id,
        )
        session.add(improvement)
        session.flush()

        queried = session.get(CapitalImprovementModel, improvement.id)
        assert queried.asset_id == asset.id
        assert queried.cost == Decimal("250.00")
        assert queried.notes is None

    def test_relationship(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id)
        for cost in (Decimal("100"), Decimal("200")):
            session.add(CapitalImprovementModel(
                asset_id=asset.id,
                description="Upgrade",
                improvement_date=date(2022, 1, 15),
                cost=cost,
                created_by_id=test_actor_id,
            ))
        session.flush()
        session.refresh(asset)

        assert sorted(i.cost for i in asset.capital_improvements) == [
            Decimal("100"), Decimal("200"),
        ]
        assert asset.capital_improvements[0].asset is asset

    def test_to_dto(self, session, test_actor_id):
        asset = _make_asset(session, test_actor_id)
        improvement = CapitalImprovementModel(
            asset_id=asset.id,
            description="New battery",
            improvement_date=date(2023, 3, 1),
            cost=Decimal("80.00"),
            notes="warranty expired",
            created_by_id=test_actor_id,
        )
        session.add(improvement)
        session.flush()

        dto = improvement.to_dto()
        assert dto.asset_id == asset.id
        assert dto.description == "New battery"
        assert dto.notes == "warranty expired"
