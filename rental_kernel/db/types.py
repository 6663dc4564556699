"""
Module: rental_kernel.db.types
Responsibility: Annotated column declarations for ledger models.  Centralizes
    the column types so that every model declares amounts, accounts and
    timestamps identically.
Architecture position: Kernel > DB.  May be imported by models/ and services/.
    MUST NOT import from models/, services/, selectors/ or domain/.

Invariants enforced:
    CRITICAL: No floats anywhere in the kernel.  Amounts are Python ints in
    the smallest unit; fee splits use integer division.
"""

from typing import Annotated
from uuid import UUID

from sqlalchemy import BigInteger
from sqlalchemy.orm import mapped_column

from rental_kernel.db.base import AmountString, UUIDString
from rental_kernel.exceptions import InvalidAmountError

# Non-negative integer amount in the smallest unit (e.g. wei), defaults to 0
Amount = Annotated[int, mapped_column(AmountString(), nullable=False, default=0)]

# Account identifier
Account = Annotated[UUID, mapped_column(UUIDString(), nullable=False)]

# Epoch seconds (UTC), 0 when unset
Timestamp = Annotated[int, mapped_column(BigInteger, nullable=False, default=0)]


def require_amount(value: int, field: str = "amount") -> int:
    """
    Validate an amount argument at a service boundary.

    Preconditions: value is an int (bool is rejected).
    Postconditions: Returns value unchanged when it is >= 0.

    Raises:
        InvalidAmountError: If value is not a non-negative int.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAmountError(field, value)
    return value
