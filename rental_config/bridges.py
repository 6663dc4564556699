"""
Config -> Kernel Bridges.

Functions that convert a RentalConfig into kernel-compatible inputs.
These live in rental_config (the producer) because the kernel must NEVER
import rental_config.

Usage:
    from rental_config.bridges import build_ledger_parameters

    config = get_active_config()
    parameters = build_ledger_parameters(config)
    registry = AssetRegistry(session, clock, parameters, accounts)
"""

from __future__ import annotations

from rental_config.schema import RentalConfig
from rental_kernel.domain.parameters import LedgerParameters


def build_ledger_parameters(config: RentalConfig) -> LedgerParameters:
    """Build the kernel's LedgerParameters from a loaded config."""
    return LedgerParameters(
        mint_price=config.mint_price,
        supply_cap=config.supply_cap,
        fee_percent=config.fee_percent,
        min_rental_days=config.min_rental_days,
        seconds_per_day=config.seconds_per_day,
    )
