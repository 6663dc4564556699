"""Selectors for the rental kernel (read side)."""

from rental_kernel.selectors.ledger_selector import LedgerSelector

__all__ = [
    "LedgerSelector",
]
