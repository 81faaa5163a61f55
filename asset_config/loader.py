"""
Configuration Loader (``asset_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses its ``registry`` section into
an ``AssetConfig``.  The single public entry point for runtime config is
``asset_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown keys in the ``registry`` section raise ``ValueError``; a typo
  never silently falls back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from ``AssetConfig.__post_init__``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from asset_modules.registry.config import AssetConfig

_REGISTRY_KEYS = frozenset(f.name for f in dataclasses.fields(AssetConfig))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return data


def parse_asset_config(data: dict[str, Any]) -> AssetConfig:
    """Parse the ``registry`` section of a config document."""
    section = data.get("registry") or {}
    if not isinstance(section, dict):
        raise ValueError("'registry' section must be a mapping")
    unknown = sorted(set(section) - _REGISTRY_KEYS)
    if unknown:
        raise ValueError(f"Unknown registry config keys: {', '.join(unknown)}")
    return AssetConfig.from_dict(section)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
