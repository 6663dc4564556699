"""
Configuration Loader (``rental_config.loader``).

Responsibility
--------------
Loads a configuration set's ``root.yaml`` and parses it into a frozen
``RentalConfig``.  This is build/test tooling; the single public entry
point for runtime config is ``rental_config.get_active_config()``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from rental_config.schema import RentalConfig

ROOT_FILE_NAME = "root.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _require_int(section: str, data: dict[str, Any], key: str, minimum: int) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{section}.{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{section}.{key} must be >= {minimum}, got {value}")
    return value


def parse_config(data: dict[str, Any]) -> RentalConfig:
    """
    Parse a ``RentalConfig`` from the contents of ``root.yaml``.

    Raises:
        KeyError: if a required key is missing.
        ValueError: if a value is of the wrong type or out of range.
    """
    issuance = data["issuance"]
    marketplace = data["marketplace"]

    fee_percent = _require_int("marketplace", marketplace, "fee_percent", 0)
    if fee_percent > 100:
        raise ValueError(f"marketplace.fee_percent must be <= 100, got {fee_percent}")

    return RentalConfig(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        mint_price=_require_int("issuance", issuance, "mint_price", 0),
        supply_cap=_require_int("issuance", issuance, "supply_cap", 1),
        fee_percent=fee_percent,
        min_rental_days=_require_int("marketplace", marketplace, "min_rental_days", 1),
        seconds_per_day=_require_int("marketplace", marketplace, "seconds_per_day", 1),
        checksum=compute_checksum(data),
        description=str(data.get("description", "")),
    )


def load_config_set(config_dir: Path) -> RentalConfig:
    """Load and parse the configuration set stored in ``config_dir``."""
    return parse_config(load_yaml_file(config_dir / ROOT_FILE_NAME))
