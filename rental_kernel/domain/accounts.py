"""
Account identities used by the ledgers.

Accounts are UUIDs.  ZERO_ACCOUNT is the "none" sentinel: the delegate of
an asset with no delegation, the approval of an asset with no approval.
It can never own an asset.
"""

from dataclasses import dataclass
from uuid import UUID, uuid4

ZERO_ACCOUNT = UUID(int=0)


def is_zero(account: UUID | None) -> bool:
    """True for None or the zero account."""
    return account is None or account == ZERO_ACCOUNT


def new_account() -> UUID:
    """Allocate a fresh account identifier."""
    return uuid4()


@dataclass(frozen=True)
class RegistryAccounts:
    """
    Accounts wired into an AssetRegistry at construction.

    operator: the only account allowed to withdraw issuance proceeds.
    proceeds: holds issuance payments until withdrawal.
    escrow: holds delegation rent until it is refunded.
    """

    operator: UUID
    proceeds: UUID
    escrow: UUID

    @classmethod
    def generate(cls, operator: UUID) -> "RegistryAccounts":
        return cls(operator=operator, proceeds=new_account(), escrow=new_account())


@dataclass(frozen=True)
class MarketplaceAccounts:
    """
    Accounts wired into a LeaseMarketplace at construction.

    operator: the only account allowed to withdraw platform fees.
    holder: the marketplace's own account.  It receives fees and is the
        account owners approve so the marketplace may delegate usage.
    """

    operator: UUID
    holder: UUID

    @classmethod
    def generate(cls, operator: UUID) -> "MarketplaceAccounts":
        return cls(operator=operator, holder=new_account())
