"""
Module: rental_kernel.models.delegation
Responsibility: ORM persistence for the usage-delegation sub-ledger.
Architecture position: Kernel > Models.  May import from db/ and
    domain/ only.

Invariants enforced:
    EXCLUSIVE_DELEGATION -- one row per asset (uq_delegation_token_id), so
                            at most one stored delegation, and therefore at
                            most one active delegation, exists per asset.
    LAZY_EXPIRY          -- no column marks a delegation as expired.
                            Activity is computed from (delegate, expires)
                            by domain.delegation.is_active at every read.

Failure modes:
    - IntegrityError on a second row for the same token_id.
"""

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import Account, Amount, Timestamp
from rental_kernel.domain.accounts import ZERO_ACCOUNT
from rental_kernel.domain.delegation import is_active


class UsageDelegation(Base):
    """
    Who holds the usage right of an asset, until when, at what rent.

    Contract:
        The row is created on the first delegation and reused afterwards.
        Revocation resets every field to its empty value instead of
        deleting the row.

    Guarantees:
        - delegate == ZERO_ACCOUNT means "no delegation stored".
        - rent is the amount held in registry escrow for this delegation
          and refundable to the asset owner on revocation; rent_payer
          records which account funded it.
    """

    __tablename__ = "usage_delegations"

    token_id: Mapped[int] = mapped_column(
        ForeignKey("assets.token_id"),
        nullable=False,
        unique=True,
    )

    delegate: Mapped[Account] = mapped_column(default=ZERO_ACCOUNT)

    expires: Mapped[Timestamp]

    rent: Mapped[Amount]

    starts: Mapped[Timestamp]

    rent_payer: Mapped[Account] = mapped_column(default=ZERO_ACCOUNT)

    def is_active_at(self, now: int) -> bool:
        return is_active(self.delegate, self.expires, now)

    def clear(self) -> None:
        """Reset to the empty delegation."""
        self.delegate = ZERO_ACCOUNT
        self.expires = 0
        self.rent = 0
        self.starts = 0
        self.rent_payer = ZERO_ACCOUNT

    def __repr__(self) -> str:
        return (
            f"<UsageDelegation #{self.token_id} delegate={self.delegate} "
            f"expires={self.expires}>"
        )
