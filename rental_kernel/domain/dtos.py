"""
Immutable DTOs returned by services and selectors.

No ORM dependencies: callers never receive a live model instance.
"""

from dataclasses import dataclass
from uuid import UUID

from rental_kernel.domain.accounts import ZERO_ACCOUNT


@dataclass(frozen=True)
class AssetInfo:
    """Ownership view of an issued asset."""

    token_id: int
    owner: UUID
    mint_price: int
    approved: UUID
    minted_at: int


@dataclass(frozen=True)
class DelegationInfo:
    """
    Stored usage delegation for an asset.

    ``delegate`` is the stored value; ``active`` applies the lazy expiry
    check at the time the DTO was built.
    """

    token_id: int
    delegate: UUID
    expires: int
    rent: int
    starts: int
    rent_payer: UUID
    active: bool

    @property
    def current_delegate(self) -> UUID:
        return self.delegate if self.active else ZERO_ACCOUNT

    @classmethod
    def empty(cls, token_id: int) -> "DelegationInfo":
        return cls(
            token_id=token_id,
            delegate=ZERO_ACCOUNT,
            expires=0,
            rent=0,
            starts=0,
            rent_payer=ZERO_ACCOUNT,
            active=False,
        )


@dataclass(frozen=True)
class LeaseTerms:
    """A standing offer to lease an asset's usage right."""

    token_id: int
    rent: int
    duration_days: int
    lister: UUID
    listed_at: int


@dataclass(frozen=True)
class LeaseSettlement:
    """Outcome of an accepted lease."""

    token_id: int
    renter: UUID
    owner: UUID
    rent: int
    fee: int
    owner_proceeds: int
    expires: int


@dataclass(frozen=True)
class LedgerEventInfo:
    """An observable event from the append-only event log."""

    seq: int
    kind: str
    token_id: int | None
    payload: dict
    occurred_at: int
