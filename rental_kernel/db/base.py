"""
Module: rental_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the UUID primary key convention, the account and amount column types, and
    the type annotation map shared by every model.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - UUID primary keys: every model inherits a uuid4-generated primary key.
    - Account identity: accounts are UUIDs stored as String(36); the zero
      UUID is the "no account" sentinel (see domain/accounts.py).
    - Exact amounts: AmountString stores arbitrary-precision integers as
      decimal strings.  Amounts are never floats and never truncated to
      64 bits (the original asset priced in wei, 2 * 10**18 per mint).

Failure modes:
    - ValueError from AmountString if a negative or non-integer amount is
      bound to a column.
"""

from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on SELECT.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class AmountString(TypeDecorator):
    """
    Non-negative integer amount stored as a decimal string.

    Contract:
        Python side is always ``int``.  Storage is ``String(80)``, wide
        enough for any 256-bit unsigned value.

    Guarantees:
        - process_bind_param rejects negative values and non-ints.
        - process_result_value returns ``int``.
    """

    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Amount must be an int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"Amount must be non-negative, got {value}")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is not None:
            return int(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - UUID annotations map to UUIDString.
        - int maps to BigInteger -- timestamps and sequences.
    """

    type_annotation_map: ClassVar[dict] = {
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


# Re-export UUID for convenience
UUID = PyUUID
