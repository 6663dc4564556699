"""
Module: rental_kernel.models.lease
Responsibility: ORM persistence for standing lease offers.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Single-use: a row exists only between create_lease and either
      revoke_lease or a successful accept_lease, which delete it.
    - One offer per asset (uq_lease_token_id); re-listing overwrites.
    - Staleness: ``lister`` records the owner at creation time.  When the
      asset's owner is no longer the lister, LeaseMarketplace treats the
      row as absent.
"""

from sqlalchemy import BigInteger, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import Account, Amount, Timestamp


class Lease(Base):
    """A standing offer to grant usage for ``duration_days`` at ``rent``."""

    __tablename__ = "leases"

    token_id: Mapped[int] = mapped_column(
        ForeignKey("assets.token_id"),
        nullable=False,
        unique=True,
    )

    rent: Mapped[Amount]

    duration_days: Mapped[int] = mapped_column(BigInteger, nullable=False)

    lister: Mapped[Account]

    listed_at: Mapped[Timestamp]

    def __repr__(self) -> str:
        return (
            f"<Lease #{self.token_id} rent={self.rent} "
            f"days={self.duration_days}>"
        )
