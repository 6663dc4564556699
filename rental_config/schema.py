"""
RentalConfig schema.

The frozen runtime configuration of the two ledgers.  YAML fragments are
parsed into this type by the loader; the kernel never sees it directly and
receives LedgerParameters through rental_config.bridges instead.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RentalConfig:
    """Validated, checksummed configuration set."""

    config_id: str
    version: int
    mint_price: int
    supply_cap: int
    fee_percent: int
    min_rental_days: int
    seconds_per_day: int
    checksum: str = ""
    description: str = ""
