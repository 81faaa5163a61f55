"""
Tests for registry configuration loading.

Covers:
- AssetConfig defaults and validation
- YAML loading through get_active_config (default set, explicit path,
  ASSET_CONFIG_PATH environment variable)
- ASSET_CONFIG_TRACE audit record
"""

from decimal import Decimal

import pytest
import yaml

from asset_config import CONFIG_PATH_ENV_VAR, get_active_config
from asset_config.loader import compute_checksum, load_yaml_file, parse_asset_config
from asset_engines.depreciation import DepreciationMethod
from asset_modules.registry.config import AssetConfig


def _write_config(tmp_path, registry: dict, name: str = "assets.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump({
        "config_id": "test",
        "version": 3,
        "registry": registry,
    }))
    return path


class TestAssetConfig:
    """Tests for the AssetConfig schema."""

    def test_defaults(self):
        config = AssetConfig.with_defaults()
        assert config.fiscal_year_start_month == 7
        assert config.depreciation_method is DepreciationMethod.STRAIGHT_LINE
        assert config.default_residual_percentage == Decimal("0")
        assert config.money_places == 2
        assert config.skip_malformed_assets is True

    def test_from_dict_coerces_percentage(self):
        config = AssetConfig.from_dict({"default_residual_percentage": "5.5"})
        assert config.default_residual_percentage == Decimal("5.5")

    @pytest.mark.parametrize("month", [0, 13, "7", True])
    def test_invalid_start_month(self, month):
        with pytest.raises(ValueError):
            AssetConfig(fiscal_year_start_month=month)

    def test_negative_places(self):
        with pytest.raises(ValueError):
            AssetConfig(money_places=-1)

    def test_residual_out_of_range(self):
        with pytest.raises(ValueError):
            AssetConfig(default_residual_percentage=Decimal("101"))

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            AssetConfig(default_depreciation_method="magic")

    def test_initialization_logged(self, captured_logs):
        AssetConfig(fiscal_year_start_month=1)
        records = [r for r in captured_logs() if r["message"] == "asset_config_initialized"]
        assert records[-1]["fiscal_year_start_month"] == 1


class TestGetActiveConfig:
    """Tests for the single runtime configuration entrypoint."""

    def test_default_set(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)
        config = get_active_config()
        assert config.fiscal_year_start_month == 7
        assert config.money_places == 2

    def test_explicit_path(self, tmp_path):
        path = _write_config(tmp_path, {"fiscal_year_start_month": 1, "money_places": 4})
        config = get_active_config(path)
        assert config.fiscal_year_start_month == 1
        assert config.money_places == 4

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = _write_config(tmp_path, {"fiscal_year_start_month": 10})
        monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(path))
        assert get_active_config().fiscal_year_start_month == 10

    def test_explicit_path_wins_over_environment(self, tmp_path, monkeypatch):
        env_path = _write_config(tmp_path, {"fiscal_year_start_month": 10}, "env.yaml")
        arg_path = _write_config(tmp_path, {"fiscal_year_start_month": 4}, "arg.yaml")
        monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(env_path))
        assert get_active_config(arg_path).fiscal_year_start_month == 4

    def test_missing_registry_section_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("config_id: empty\n")
        assert get_active_config(path) == AssetConfig()

    def test_unknown_key_rejected(self, tmp_path):
        path = _write_config(tmp_path, {"fiscal_year_start": 7})
        with pytest.raises(ValueError, match="fiscal_year_start"):
            get_active_config(path)

    def test_invalid_value_rejected(self, tmp_path):
        path = _write_config(tmp_path, {"fiscal_year_start_month": 14})
        with pytest.raises(ValueError):
            get_active_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_yaml_file(path)

    def test_trace_emitted(self, tmp_path, captured_logs):
        path = _write_config(tmp_path, {"fiscal_year_start_month": 1})
        get_active_config(path)

        traces = [r for r in captured_logs() if r["message"] == "ASSET_CONFIG_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["config_id"] == "test"
        assert trace["config_version"] == 3
        assert trace["checksum"] == compute_checksum(load_yaml_file(path))
        assert trace["fiscal_year_start_month"] == 1


class TestLoaderHelpers:

    def test_checksum_is_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_checksum_changes_with_content(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})

    def test_parse_asset_config_rejects_non_mapping_section(self):
        with pytest.raises(ValueError):
            parse_asset_config({"registry": ["fiscal_year_start_month"]})
