"""
Module: rental_kernel.models.asset
Responsibility: ORM persistence for issued assets (passes) and for
    operator approvals.
Architecture position: Kernel > Models.  May import from db/ and
    domain/accounts.py only.

Invariants enforced:
    SINGLE_OWNER -- owner is NOT NULL and never the zero account (enforced
                    by AssetRegistry; the column carries no sentinel).
    SUPPLY_CAP   -- token_id values are allocated 1..cap from the locked
                    "token_id" counter; uq_asset_token_id rejects reuse.

Failure modes:
    - IntegrityError on duplicate token_id or duplicate (owner, operator).
"""

from sqlalchemy import BigInteger, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import Account, Amount, Timestamp
from rental_kernel.domain.accounts import ZERO_ACCOUNT


class Asset(Base):
    """
    An issued pass.

    Guarantees:
        - token_id is unique and sequential from 1.
        - mint_price records the payment received at issuance and never
          changes.
        - approved is ZERO_ACCOUNT unless the owner approved an account
          for this asset; it is cleared on every ownership transfer.

    Non-goals:
        - Ownership never changes because of leasing.  Only the usage
          delegation does.
    """

    __tablename__ = "assets"

    __table_args__ = (
        UniqueConstraint("token_id", name="uq_asset_token_id"),
        Index("idx_asset_owner", "owner"),
    )

    token_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    owner: Mapped[Account]

    mint_price: Mapped[Amount]

    # Single-asset approval
    approved: Mapped[Account] = mapped_column(default=ZERO_ACCOUNT)

    minted_at: Mapped[Timestamp]

    def __repr__(self) -> str:
        return f"<Asset #{self.token_id} owner={self.owner}>"


class OperatorApproval(Base):
    """
    ``operator`` may act on every asset ``owner`` holds.

    A row exists only while the approval is granted; revoking deletes it.
    """

    __tablename__ = "operator_approvals"

    __table_args__ = (
        UniqueConstraint("owner", "operator", name="uq_operator_approval"),
    )

    owner: Mapped[Account]

    operator: Mapped[Account]

    def __repr__(self) -> str:
        return f"<OperatorApproval {self.owner} -> {self.operator}>"
