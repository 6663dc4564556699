"""
Rental Kernel

A two-ledger system for a limited-supply collectible pass:
- Issuance and ownership registry with a delegated, time-boxed usage right
- Peer-to-peer lease marketplace with escrowed rent and a platform fee
- Atomic operations (savepoint per call, state before funds)
- Lazy expiry of usage rights
- Append-only event log
"""

__version__ = "0.1.0"
