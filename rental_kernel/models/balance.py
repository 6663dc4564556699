"""
Module: rental_kernel.models.balance
Responsibility: ORM persistence for the host funds ledger -- one balance
    per account.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - balance is never negative (AmountString rejects negative binds;
      FundsService checks before debiting).
    - Conservation: FundsService moves amounts between rows; only
      ``deposit`` creates funds.
"""

from sqlalchemy import Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import Account, Amount


class AccountBalance(Base):
    """Spendable balance of one account."""

    __tablename__ = "account_balances"

    __table_args__ = (
        UniqueConstraint("account", name="uq_account_balance_account"),
    )

    account: Mapped[Account]

    balance: Mapped[Amount]

    # False models a recipient that cannot accept funds
    accepts_funds: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<AccountBalance {self.account}: {self.balance}>"
