"""
FundsService -- the host fund-movement primitive.

Responsibility:
    Credits and debits account balances.  The ledgers treat this as the
    opaque "move money" call of the host environment: every movement is
    all-or-nothing and may fail the enclosing operation.

Architecture position:
    Kernel > Services.  Called by AssetRegistry and LeaseMarketplace as
    the LAST step of an operation, after all ledger state is written.

Invariants enforced:
    - Conservation: transfer() debits and credits the same amount; only
      deposit() introduces funds.
    - No negative balances: debit() raises before writing.
    - Recipient refusal: credit() to an account that does not accept funds
      raises FundsRejectedError, failing (and rolling back) the caller's
      whole operation.

Failure modes:
    - InsufficientFundsError, FundsRejectedError, InvalidAmountError.
"""

from uuid import UUID

from sqlalchemy import select

from rental_kernel.db.types import require_amount
from rental_kernel.exceptions import FundsRejectedError, InsufficientFundsError
from rental_kernel.logging_config import get_logger
from rental_kernel.models.balance import AccountBalance
from rental_kernel.services.base import BaseService

logger = get_logger("services.funds")


class FundsService(BaseService):
    """Balance ledger for every account the kernel pays or charges."""

    def _find(self, account: UUID) -> AccountBalance | None:
        return self.session.execute(
            select(AccountBalance).where(AccountBalance.account == account)
        ).scalar_one_or_none()

    def _get_or_create(self, account: UUID) -> AccountBalance:
        row = self._find(account)
        if row is None:
            row = AccountBalance(account=account, balance=0, accepts_funds=True)
            self.session.add(row)
            self.session.flush()
        return row

    def balance_of(self, account: UUID) -> int:
        row = self._find(account)
        return row.balance if row is not None else 0

    def accepts_funds(self, account: UUID) -> bool:
        row = self._find(account)
        return row.accepts_funds if row is not None else True

    def set_accepts_funds(self, account: UUID, accepts: bool) -> None:
        """Mark whether ``account`` can receive funds."""
        row = self._get_or_create(account)
        row.accepts_funds = accepts
        self.session.flush()

    def deposit(self, account: UUID, amount: int) -> int:
        """
        Fund an account from outside the ledgers (faucet, test setup).

        Returns:
            The new balance.
        """
        require_amount(amount)
        row = self._get_or_create(account)
        row.balance += amount
        self.session.flush()
        logger.debug(
            "funds_deposited",
            extra={"account": str(account), "amount": amount},
        )
        return row.balance

    def credit(self, account: UUID, amount: int) -> int:
        """
        Add ``amount`` to ``account``.

        Raises:
            FundsRejectedError: If the account does not accept funds.
        """
        require_amount(amount)
        row = self._get_or_create(account)
        if not row.accepts_funds:
            raise FundsRejectedError(account, amount)
        row.balance += amount
        self.session.flush()
        logger.debug(
            "funds_credited",
            extra={"account": str(account), "amount": amount},
        )
        return row.balance

    def debit(self, account: UUID, amount: int) -> int:
        """
        Remove ``amount`` from ``account``.

        Raises:
            InsufficientFundsError: If the balance is below ``amount``.
        """
        require_amount(amount)
        row = self._find(account)
        balance = row.balance if row is not None else 0
        if balance < amount:
            raise InsufficientFundsError(account, balance, amount)
        if amount == 0:
            return balance
        row.balance = balance - amount
        self.session.flush()
        logger.debug(
            "funds_debited",
            extra={"account": str(account), "amount": amount},
        )
        return row.balance

    def transfer(self, source: UUID, destination: UUID, amount: int) -> None:
        """Move ``amount`` from ``source`` to ``destination`` atomically."""
        with self.unit_of_work("funds_transfer", actor_id=source):
            self.debit(source, amount)
            self.credit(destination, amount)
