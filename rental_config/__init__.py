"""
rental_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component may read configuration
    files or environment variables for ledger constants directly.

Architecture position:
    Configuration -- YAML-driven, validated at load time.  This package
    sits above ``rental_kernel``.  The kernel MUST NEVER import from
    ``rental_config``; ``rental_config.bridges`` translates a loaded
    config into kernel inputs.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Fingerprint pinning: when an APPROVED_FINGERPRINT file exists, the
      checksum of the loaded set must match the pinned value.
    - Deterministic loading: the same YAML always produces the same
      checksum.

Failure modes:
    - ``FileNotFoundError`` -- no such configuration set.
    - ``KeyError`` / ``ValueError`` -- missing or invalid values.
    - ``ConfigIntegrityError`` -- checksum mismatch against the pin file.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``RENTAL_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, tying a deployment to the exact constants it ran with.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rental_config.integrity import ConfigIntegrityError, verify_fingerprint_pin
from rental_config.loader import ROOT_FILE_NAME, load_config_set
from rental_config.schema import RentalConfig

_logger = logging.getLogger("rental_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = [
    "ConfigIntegrityError",
    "RentalConfig",
    "get_active_config",
]


def get_active_config(
    config_set: str = "default",
    config_dir: Path | None = None,
) -> RentalConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_set: Name of the configuration set directory.
        config_dir: Override path to configuration sets directory.
            Defaults to rental_config/sets/.

    Returns:
        RentalConfig -- frozen and checksummed.

    Raises:
        FileNotFoundError: If the configuration set does not exist.
        KeyError: If a required key is missing.
        ValueError: If a value is invalid.
        ConfigIntegrityError: If APPROVED_FINGERPRINT exists and does
            not match the loaded checksum.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    set_dir = sets_dir / config_set
    if not (set_dir / ROOT_FILE_NAME).is_file():
        raise FileNotFoundError(
            f"Configuration set '{config_set}' not found in {sets_dir}"
        )

    config = load_config_set(set_dir)

    # Emit RENTAL_CONFIG_TRACE
    _logger.info(
        "RENTAL_CONFIG_TRACE",
        extra={
            "trace_type": "RENTAL_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "mint_price": config.mint_price,
            "supply_cap": config.supply_cap,
            "fee_percent": config.fee_percent,
        },
    )

    # Verify checksum against approved pin (no-op if no pin file)
    verify_fingerprint_pin(
        config_id=config.config_id,
        checksum=config.checksum,
        config_dir=set_dir,
    )

    return config
