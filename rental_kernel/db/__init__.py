"""Database layer - engine, base classes, and column types."""

from rental_kernel.db.base import UUID, AmountString, Base, UUIDString
from rental_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)
from rental_kernel.db.types import Account, Amount, Timestamp

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "UUIDString",
    "AmountString",
    "UUID",
    "Account",
    "Amount",
    "Timestamp",
]
