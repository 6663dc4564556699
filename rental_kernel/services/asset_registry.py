"""
AssetRegistry -- issuance, ownership and the usage-delegation sub-ledger.

Responsibility:
    Owns asset identity (sequential token ids up to the supply cap),
    ownership and approvals, and the second, time-boxed usage right that
    can be delegated separately from ownership.

Architecture position:
    Kernel > Services.  Depends on FundsService, EventRecorder and
    SequenceService.  Has NO dependency on LeaseMarketplace; the
    marketplace reaches in through is_owner / is_approved_or_owner /
    delegate_usage like any other approved account.

Invariants enforced:
    SINGLE_OWNER         -- issue() assigns an owner; transfer_ownership()
                            reassigns it; the zero account never owns.
    SUPPLY_CAP           -- issue() allocates from the locked token-id
                            counter and rejects ids past the cap.
    EXCLUSIVE_DELEGATION -- delegate_usage() rejects a second active
                            delegation (DoubleDelegationError).
    LAZY_EXPIRY          -- current_delegate() is the only place rights
                            lapse; it compares against the clock on read.
    STATE_BEFORE_FUNDS   -- every operation writes ledger rows and events
                            first and moves funds last.
    OPERATOR_WITHDRAWAL  -- withdraw() is restricted to accounts.operator.

Failure modes:
    See rental_kernel.exceptions; every failure rolls back the whole
    operation (BaseService.unit_of_work).
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rental_kernel.db.types import require_amount
from rental_kernel.domain.accounts import ZERO_ACCOUNT, RegistryAccounts, is_zero
from rental_kernel.domain.clock import Clock
from rental_kernel.domain.dtos import AssetInfo, DelegationInfo
from rental_kernel.domain.parameters import LedgerParameters
from rental_kernel.exceptions import (
    AssetNotFoundError,
    DoubleDelegationError,
    IncorrectPaymentError,
    InsufficientPaymentError,
    InvalidExpiryError,
    InvalidRecipientError,
    NoActiveDelegationError,
    NotOperatorError,
    NotOwnerError,
    NotOwnerOrApprovedError,
    SupplyExhaustedError,
    TokenInUseError,
)
from rental_kernel.logging_config import get_logger
from rental_kernel.models.asset import Asset, OperatorApproval
from rental_kernel.models.delegation import UsageDelegation
from rental_kernel.models.ledger_event import EventKind
from rental_kernel.services.base import BaseService
from rental_kernel.services.event_recorder import EventRecorder
from rental_kernel.services.funds_service import FundsService
from rental_kernel.services.sequence_service import SequenceService

logger = get_logger("services.asset_registry")


class AssetRegistry(BaseService):
    """
    Issuance-and-ownership registry with delegated usage rights.

    Contract:
        Constructed per session with an injected clock, the ledger
        parameters and the registry's accounts.  Public mutating methods
        each run as one atomic unit of work.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock,
        parameters: LedgerParameters,
        accounts: RegistryAccounts,
    ):
        super().__init__(session)
        self._clock = clock
        self._parameters = parameters
        self._accounts = accounts
        self._funds = FundsService(session)
        self._events = EventRecorder(session)
        self._sequences = SequenceService(session)

    @property
    def accounts(self) -> RegistryAccounts:
        return self._accounts

    @property
    def parameters(self) -> LedgerParameters:
        return self._parameters

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _get_asset(self, token_id: int) -> Asset:
        asset = self.session.execute(
            select(Asset).where(Asset.token_id == token_id)
        ).scalar_one_or_none()
        if asset is None:
            raise AssetNotFoundError(token_id)
        return asset

    def _get_delegation(self, token_id: int) -> UsageDelegation | None:
        return self.session.execute(
            select(UsageDelegation).where(UsageDelegation.token_id == token_id)
        ).scalar_one_or_none()

    def _is_operator_for(self, owner: UUID, account: UUID) -> bool:
        row = self.session.execute(
            select(OperatorApproval.id).where(
                OperatorApproval.owner == owner,
                OperatorApproval.operator == account,
            )
        ).scalar_one_or_none()
        return row is not None

    def _approved_or_owner(self, asset: Asset, account: UUID) -> bool:
        return (
            asset.owner == account
            or (not is_zero(asset.approved) and asset.approved == account)
            or self._is_operator_for(asset.owner, account)
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def owner_of(self, token_id: int) -> UUID:
        """Current owner of ``token_id``."""
        return self._get_asset(token_id).owner

    def is_owner(self, token_id: int, account: UUID) -> bool:
        return self.owner_of(token_id) == account

    def is_approved_or_owner(self, token_id: int, account: UUID) -> bool:
        """True if ``account`` owns, is approved for, or operates the asset."""
        return self._approved_or_owner(self._get_asset(token_id), account)

    def get_approved(self, token_id: int) -> UUID:
        return self._get_asset(token_id).approved

    def is_approved_for_all(self, owner: UUID, operator: UUID) -> bool:
        return self._is_operator_for(owner, operator)

    def get_asset(self, token_id: int) -> AssetInfo:
        asset = self._get_asset(token_id)
        return AssetInfo(
            token_id=asset.token_id,
            owner=asset.owner,
            mint_price=asset.mint_price,
            approved=asset.approved,
            minted_at=asset.minted_at,
        )

    def total_issued(self) -> int:
        """Number of assets issued so far."""
        return self._sequences.current_value(SequenceService.TOKEN_ID)

    def balance(self) -> int:
        """Withdrawable issuance proceeds."""
        return self._funds.balance_of(self._accounts.proceeds)

    def escrowed_rent(self) -> int:
        """Delegation rent currently held for refund."""
        return self._funds.balance_of(self._accounts.escrow)

    def current_delegate(self, token_id: int) -> UUID:
        """
        The account currently holding usage rights, or ZERO_ACCOUNT.

        Returns ZERO_ACCOUNT when no delegation was ever set, when it was
        revoked, or when now > expires.  Pure read: an expired delegation
        is not cleared.
        """
        self._get_asset(token_id)
        delegation = self._get_delegation(token_id)
        if delegation is None:
            return ZERO_ACCOUNT
        if not delegation.is_active_at(self._clock.epoch_seconds()):
            return ZERO_ACCOUNT
        return delegation.delegate

    def delegation_info(self, token_id: int) -> DelegationInfo:
        """Stored delegation fields plus the lazy activity check."""
        self._get_asset(token_id)
        delegation = self._get_delegation(token_id)
        if delegation is None:
            return DelegationInfo.empty(token_id)
        return DelegationInfo(
            token_id=token_id,
            delegate=delegation.delegate,
            expires=delegation.expires,
            rent=delegation.rent,
            starts=delegation.starts,
            rent_payer=delegation.rent_payer,
            active=delegation.is_active_at(self._clock.epoch_seconds()),
        )

    def delegate_expires(self, token_id: int) -> int:
        return self.delegation_info(token_id).expires

    def delegate_rent(self, token_id: int) -> int:
        return self.delegation_info(token_id).rent

    def delegate_starts(self, token_id: int) -> int:
        return self.delegation_info(token_id).starts

    # -------------------------------------------------------------------------
    # Issuance
    # -------------------------------------------------------------------------

    def issue(self, payment: int, caller: UUID) -> int:
        """
        Mint the next asset to ``caller``.

        Preconditions:
            - payment >= mint_price
            - fewer than supply_cap assets issued
            - caller's balance covers payment

        Postconditions:
            - A new Asset with the next sequential token id is owned by
              caller; the full payment sits in the proceeds account.

        Raises:
            InsufficientPaymentError, SupplyExhaustedError,
            InsufficientFundsError.

        Returns:
            The new token id.
        """
        require_amount(payment, "payment")
        with self.unit_of_work("issue", actor_id=caller):
            if payment < self._parameters.mint_price:
                raise InsufficientPaymentError(self._parameters.mint_price, payment)
            # INVARIANT: SUPPLY_CAP
            # The savepoint rolls the counter back when the id is past the cap.
            token_id = self._sequences.next_value(SequenceService.TOKEN_ID)
            if token_id > self._parameters.supply_cap:
                raise SupplyExhaustedError(self._parameters.supply_cap)
            now = self._clock.epoch_seconds()
            self.session.add(
                Asset(
                    token_id=token_id,
                    owner=caller,
                    mint_price=payment,
                    approved=ZERO_ACCOUNT,
                    minted_at=now,
                )
            )
            self.session.flush()
            self._events.record(
                EventKind.ASSET_ISSUED, token_id, now, owner=caller, price=payment
            )

            self._funds.transfer(caller, self._accounts.proceeds, payment)

        logger.info(
            "asset_issued",
            extra={"issued_token_id": token_id, "owner": str(caller), "payment": payment},
        )
        return token_id

    # -------------------------------------------------------------------------
    # Ownership and approvals
    # -------------------------------------------------------------------------

    def transfer_ownership(
        self,
        token_id: int,
        from_account: UUID,
        to_account: UUID,
        caller: UUID,
    ) -> None:
        """
        Move ownership of ``token_id`` from ``from_account`` to ``to_account``.

        Blocked while another account holds an active usage delegation.
        Clears the single-asset approval.

        Raises:
            NotOwnerOrApprovedError, NotOwnerError, InvalidRecipientError,
            TokenInUseError.
        """
        with self.unit_of_work("transfer_ownership", actor_id=caller, token_id=token_id):
            asset = self._get_asset(token_id)
            if not self._approved_or_owner(asset, caller):
                raise NotOwnerOrApprovedError(token_id, caller)
            if asset.owner != from_account:
                raise NotOwnerError(token_id, from_account)
            if is_zero(to_account):
                raise InvalidRecipientError(token_id)

            now = self._clock.epoch_seconds()
            delegation = self._get_delegation(token_id)
            if delegation is not None and delegation.is_active_at(now):
                raise TokenInUseError(token_id, delegation.delegate, delegation.expires)

            asset.owner = to_account
            asset.approved = ZERO_ACCOUNT
            self._events.record(
                EventKind.OWNERSHIP_TRANSFERRED,
                token_id,
                now,
                from_account=from_account,
                to_account=to_account,
            )

        logger.info(
            "ownership_transferred",
            extra={"from_account": str(from_account), "to_account": str(to_account)},
        )

    def approve(self, token_id: int, approved: UUID, caller: UUID) -> None:
        """
        Approve ``approved`` to act on ``token_id`` (ZERO_ACCOUNT clears it).

        Raises:
            NotOwnerOrApprovedError: caller is neither owner nor an operator
                of the owner.
        """
        with self.unit_of_work("approve", actor_id=caller, token_id=token_id):
            asset = self._get_asset(token_id)
            if asset.owner != caller and not self._is_operator_for(asset.owner, caller):
                raise NotOwnerOrApprovedError(token_id, caller)
            asset.approved = approved
            self._events.record(
                EventKind.APPROVAL_SET,
                token_id,
                self._clock.epoch_seconds(),
                owner=asset.owner,
                approved=approved,
            )

    def set_approval_for_all(self, operator: UUID, approved: bool, caller: UUID) -> None:
        """Grant or revoke ``operator``'s right to act on all of caller's assets."""
        with self.unit_of_work("set_approval_for_all", actor_id=caller):
            row = self.session.execute(
                select(OperatorApproval).where(
                    OperatorApproval.owner == caller,
                    OperatorApproval.operator == operator,
                )
            ).scalar_one_or_none()
            if approved and row is None:
                self.session.add(OperatorApproval(owner=caller, operator=operator))
            elif not approved and row is not None:
                self.session.delete(row)
            self._events.record(
                EventKind.OPERATOR_APPROVAL_SET,
                None,
                self._clock.epoch_seconds(),
                owner=caller,
                operator=operator,
                approved=approved,
            )

    # -------------------------------------------------------------------------
    # Usage delegation
    # -------------------------------------------------------------------------

    def delegate_usage(
        self,
        token_id: int,
        delegate: UUID,
        expires: int,
        caller: UUID,
        rent: int = 0,
        payment: int | None = None,
        as_of: int | None = None,
    ) -> DelegationInfo:
        """
        Grant usage of ``token_id`` to ``delegate`` until ``expires``.

        Preconditions:
            - caller owns the asset or is approved for it
            - expires > now
            - no active delegation exists
            - payment == rent (payment may be omitted when rent == 0)

        Postconditions:
            - The delegation row holds delegate/expires/rent/starts=now.
            - rent (if any) is escrowed from caller.  A stale, expired
              delegation's escrow is refunded to the current owner first.

        Args:
            as_of: Time snapshot supplied by an enclosing operation so the
                whole call sees one "now".  Defaults to reading the clock.

        Raises:
            NotOwnerError, InvalidExpiryError, DoubleDelegationError,
            IncorrectPaymentError, InvalidRecipientError.
        """
        require_amount(rent, "rent")
        received = 0 if payment is None else require_amount(payment, "payment")
        with self.unit_of_work("delegate_usage", actor_id=caller, token_id=token_id):
            asset = self._get_asset(token_id)
            if not self._approved_or_owner(asset, caller):
                raise NotOwnerError(token_id, caller)
            if is_zero(delegate):
                raise InvalidRecipientError(token_id)

            now = self._clock.epoch_seconds() if as_of is None else as_of
            if expires <= now:
                raise InvalidExpiryError(token_id, expires, now)

            delegation = self._get_delegation(token_id)
            # INVARIANT: EXCLUSIVE_DELEGATION
            if delegation is not None and delegation.is_active_at(now):
                raise DoubleDelegationError(
                    token_id, delegation.delegate, delegation.expires
                )
            if received != rent:
                raise IncorrectPaymentError(token_id, rent, received)

            stale_refund = 0
            if delegation is None:
                delegation = UsageDelegation(token_id=token_id)
                self.session.add(delegation)
            else:
                stale_refund = delegation.rent

            delegation.delegate = delegate
            delegation.expires = expires
            delegation.rent = rent
            delegation.starts = now
            delegation.rent_payer = caller if rent > 0 else ZERO_ACCOUNT
            self.session.flush()
            self._events.record(
                EventKind.USAGE_DELEGATED,
                token_id,
                now,
                delegate=delegate,
                expires=expires,
                rent=rent,
            )

            if stale_refund > 0:
                self._funds.transfer(self._accounts.escrow, asset.owner, stale_refund)
            if rent > 0:
                self._funds.transfer(caller, self._accounts.escrow, rent)

            info = DelegationInfo(
                token_id=token_id,
                delegate=delegate,
                expires=expires,
                rent=rent,
                starts=now,
                rent_payer=delegation.rent_payer,
                active=True,
            )

        logger.info(
            "usage_delegated",
            extra={"delegate": str(delegate), "expires": expires, "rent": rent},
        )
        return info

    def revoke_delegation(self, token_id: int, caller: UUID) -> int:
        """
        Clear the delegation of ``token_id`` and refund its escrowed rent.

        The full stored rent is refunded to the current owner,
        regardless of elapsed time (no proration).  A stored delegation
        that has already expired can still be revoked to release escrow.

        Raises:
            NotOwnerOrApprovedError, NoActiveDelegationError.

        Returns:
            The refunded amount.
        """
        with self.unit_of_work("revoke_delegation", actor_id=caller, token_id=token_id):
            asset = self._get_asset(token_id)
            if not self._approved_or_owner(asset, caller):
                raise NotOwnerOrApprovedError(token_id, caller)
            delegation = self._get_delegation(token_id)
            if delegation is None or is_zero(delegation.delegate):
                raise NoActiveDelegationError(token_id)

            refund = delegation.rent
            former_delegate = delegation.delegate
            delegation.clear()
            self.session.flush()
            self._events.record(
                EventKind.DELEGATION_REVOKED,
                token_id,
                self._clock.epoch_seconds(),
                delegate=former_delegate,
                refund=refund,
            )

            if refund > 0:
                self._funds.transfer(self._accounts.escrow, asset.owner, refund)

        logger.info(
            "delegation_revoked",
            extra={"delegate": str(former_delegate), "refund": refund},
        )
        return refund

    # -------------------------------------------------------------------------
    # Withdrawal
    # -------------------------------------------------------------------------

    def withdraw(self, caller: UUID) -> int:
        """
        Move all issuance proceeds to the operator.

        Raises:
            NotOperatorError: caller is not the configured operator.

        Returns:
            The withdrawn amount.
        """
        with self.unit_of_work("registry_withdraw", actor_id=caller):
            # INVARIANT: OPERATOR_WITHDRAWAL
            if caller != self._accounts.operator:
                raise NotOperatorError(caller)
            amount = self._funds.balance_of(self._accounts.proceeds)
            self._events.record(
                EventKind.FUNDS_WITHDRAWN,
                None,
                self._clock.epoch_seconds(),
                operator=caller,
                amount=amount,
                source="registry",
            )
            self._funds.transfer(self._accounts.proceeds, caller, amount)

        logger.info("registry_funds_withdrawn", extra={"amount": amount})
        return amount
