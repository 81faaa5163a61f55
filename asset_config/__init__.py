"""
asset_config -- single public entrypoint for registry configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- YAML-driven settings.  The kernel and engines MUST
    NEVER import from ``asset_config``; they receive plain parameters.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``ASSET_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying each report back to the settings that produced it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from asset_config.loader import compute_checksum, load_yaml_file, parse_asset_config
from asset_modules.registry.config import AssetConfig

_logger = logging.getLogger("asset_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_PATH_ENV_VAR = "ASSET_CONFIG_PATH"


def get_active_config(path: Path | str | None = None) -> AssetConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: the ``path`` argument, then the ``ASSET_CONFIG_PATH``
    environment variable, then ``asset_config/sets/default.yaml``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ValueError: If the file content is invalid.
    """
    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV_VAR) or _DEFAULT_CONFIG_PATH
    config_path = Path(path)

    data = load_yaml_file(config_path)
    config = parse_asset_config(data)

    _logger.info(
        "ASSET_CONFIG_TRACE",
        extra={
            "trace_type": "ASSET_CONFIG_TRACE",
            "config_id": data.get("config_id"),
            "config_version": data.get("version"),
            "config_path": str(config_path),
            "checksum": compute_checksum(data),
            "fiscal_year_start_month": config.fiscal_year_start_month,
        },
    )
    return config


__all__ = ["CONFIG_PATH_ENV_VAR", "get_active_config"]
