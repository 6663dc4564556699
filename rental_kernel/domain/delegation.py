"""
Delegation and settlement rules -- pure functions, zero I/O.

Responsibility:
    The decisions the services make about time and money, expressed as
    pure functions so they can be tested without a database:
      - is_active: lazy expiry of a usage delegation
      - lease_expiry: absolute expiry of a lease accepted now
      - split_rent: platform fee / owner proceeds split

Invariants enforced:
    LAZY_EXPIRY     -- a delegation is active iff it names a delegate and
                       now <= expires.  Nothing else clears it.
    EXACT_FEE_SPLIT -- fee + owner_proceeds == rent; fee truncates toward
                       zero.
"""

from dataclasses import dataclass
from uuid import UUID

from rental_kernel.domain.accounts import is_zero


def is_active(delegate: UUID | None, expires: int, now: int) -> bool:
    """True when a delegate is stored and the delegation has not expired.

    A delegation expiring at ``expires`` is still active at that exact
    second and lapses from ``expires + 1``.
    """
    return not is_zero(delegate) and now <= expires


def lease_expiry(now: int, duration_days: int, seconds_per_day: int) -> int:
    """Expiry timestamp for a lease of ``duration_days`` starting at ``now``."""
    return now + duration_days * seconds_per_day


@dataclass(frozen=True)
class RentSplit:
    """How an accepted lease's rent is distributed."""

    rent: int
    fee: int
    owner_proceeds: int


def split_rent(rent: int, fee_percent: int) -> RentSplit:
    """
    Split ``rent`` into the platform fee and the owner's proceeds.

    Preconditions: rent >= 0, 0 <= fee_percent <= 100.
    Postconditions: fee == rent * fee_percent // 100 and
        fee + owner_proceeds == rent.
    """
    fee = rent * fee_percent // 100
    split = RentSplit(rent=rent, fee=fee, owner_proceeds=rent - fee)
    # INVARIANT: EXACT_FEE_SPLIT
    assert split.fee + split.owner_proceeds == rent
    return split
