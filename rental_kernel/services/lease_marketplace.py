"""
LeaseMarketplace -- lease lifecycle and escrowed-fund accounting.

Responsibility:
    Lets an owner list the usage right of an asset for a fixed period and
    rent, lets a counterparty accept it by paying into escrow, and splits
    the escrowed payment between the platform fee and the owner.

Architecture position:
    Kernel > Services.  Depends on AssetRegistry (reads ownership,
    checks approval, invokes delegation), FundsService and EventRecorder.

State machine (per asset):
    NoLease --create_lease--> Listed
    Listed  --create_lease--> Listed      (terms overwritten)
    Listed  --revoke_lease--> NoLease
    Listed  --accept_lease--> NoLease     (usage delegated, rent settled)

Invariants enforced:
    EXACT_FEE_SPLIT     -- fee = rent * fee_percent // 100 and the owner
                           receives rent - fee; the renter pays exactly rent.
    STATE_BEFORE_FUNDS  -- accept_lease() deletes the lease and records the
                           delegation before any funds move, so a recipient
                           re-entering the marketplace sees the settled
                           state.
    OPERATION_ATOMICITY -- a failure anywhere in accept_lease(), including
                           inside AssetRegistry.delegate_usage() or a fund
                           movement, rolls back the whole call.
    OPERATOR_WITHDRAWAL -- withdraw_funds() is restricted to the operator.

Stale listings:
    A lease remembers its lister.  Once the asset's owner is no longer the
    lister, the lease is treated as absent: lease_terms() returns None and
    accept_lease()/revoke_lease() raise NotListedError.  The new owner may
    list afresh, which overwrites the stale row.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rental_kernel.db.types import require_amount
from rental_kernel.domain.accounts import MarketplaceAccounts
from rental_kernel.domain.clock import Clock
from rental_kernel.domain.delegation import lease_expiry, split_rent
from rental_kernel.domain.dtos import LeaseSettlement, LeaseTerms
from rental_kernel.domain.parameters import LedgerParameters
from rental_kernel.exceptions import (
    IncorrectPaymentError,
    NotListedError,
    NotOperatorError,
    NotOwnerError,
    RentalPeriodTooShortError,
    SelfRentalError,
    UnapprovedMarketplaceError,
)
from rental_kernel.logging_config import get_logger
from rental_kernel.models.lease import Lease
from rental_kernel.models.ledger_event import EventKind
from rental_kernel.services.asset_registry import AssetRegistry
from rental_kernel.services.base import BaseService
from rental_kernel.services.event_recorder import EventRecorder
from rental_kernel.services.funds_service import FundsService

logger = get_logger("services.lease_marketplace")


class LeaseMarketplace(BaseService):
    """
    Peer-to-peer leasing of usage rights.

    Contract:
        Owners must approve ``accounts.holder`` in the registry (per asset
        or as an operator) before a lease on their asset can be accepted.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock,
        parameters: LedgerParameters,
        registry: AssetRegistry,
        accounts: MarketplaceAccounts,
    ):
        super().__init__(session)
        self._clock = clock
        self._parameters = parameters
        self._registry = registry
        self._accounts = accounts
        self._funds = FundsService(session)
        self._events = EventRecorder(session)

    @property
    def accounts(self) -> MarketplaceAccounts:
        return self._accounts

    @property
    def min_rental_days(self) -> int:
        return self._parameters.min_rental_days

    @property
    def fee_percent(self) -> int:
        return self._parameters.fee_percent

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _find_lease(self, token_id: int) -> Lease | None:
        return self.session.execute(
            select(Lease).where(Lease.token_id == token_id)
        ).scalar_one_or_none()

    def _live_lease(self, token_id: int, owner: UUID) -> Lease | None:
        lease = self._find_lease(token_id)
        if lease is None or lease.lister != owner:
            return None
        return lease

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def lease_terms(self, token_id: int) -> LeaseTerms | None:
        """Live lease terms for ``token_id``, or None when not listed."""
        lease = self._live_lease(token_id, self._registry.owner_of(token_id))
        if lease is None:
            return None
        return LeaseTerms(
            token_id=lease.token_id,
            rent=lease.rent,
            duration_days=lease.duration_days,
            lister=lease.lister,
            listed_at=lease.listed_at,
        )

    def fee_balance(self) -> int:
        """Platform fees accumulated and not yet withdrawn."""
        return self._funds.balance_of(self._accounts.holder)

    def is_approved_for_marketplace(self, token_id: int) -> bool:
        return self._registry.is_approved_or_owner(token_id, self._accounts.holder)

    # -------------------------------------------------------------------------
    # Lease lifecycle
    # -------------------------------------------------------------------------

    def create_lease(
        self,
        token_id: int,
        duration_days: int,
        rent: int,
        caller: UUID,
    ) -> LeaseTerms:
        """
        List ``token_id`` for ``duration_days`` days at ``rent``.

        Overwrites any previous listing of the asset.  The duration is
        checked before ownership, so a too-short period is reported as
        such whoever the caller is.

        Raises:
            RentalPeriodTooShortError, NotOwnerError, InvalidAmountError.
        """
        with self.unit_of_work("create_lease", actor_id=caller, token_id=token_id):
            if duration_days < self._parameters.min_rental_days:
                raise RentalPeriodTooShortError(
                    duration_days, self._parameters.min_rental_days
                )
            if not self._registry.is_owner(token_id, caller):
                raise NotOwnerError(token_id, caller)
            require_amount(rent, "rent")

            now = self._clock.epoch_seconds()
            lease = self._find_lease(token_id)
            if lease is None:
                lease = Lease(token_id=token_id)
                self.session.add(lease)
            lease.rent = rent
            lease.duration_days = duration_days
            lease.lister = caller
            lease.listed_at = now
            self.session.flush()
            self._events.record(
                EventKind.LEASE_CREATED,
                token_id,
                now,
                rent=rent,
                duration_days=duration_days,
            )

        logger.info(
            "lease_created",
            extra={"rent": rent, "duration_days": duration_days},
        )
        return LeaseTerms(
            token_id=token_id,
            rent=rent,
            duration_days=duration_days,
            lister=caller,
            listed_at=now,
        )

    def revoke_lease(self, token_id: int, caller: UUID) -> None:
        """
        Withdraw the listing of ``token_id``.

        Raises:
            NotOwnerError, NotListedError.
        """
        with self.unit_of_work("revoke_lease", actor_id=caller, token_id=token_id):
            if not self._registry.is_owner(token_id, caller):
                raise NotOwnerError(token_id, caller)
            lease = self._live_lease(token_id, caller)
            if lease is None:
                raise NotListedError(token_id)
            self.session.delete(lease)
            self.session.flush()
            self._events.record(
                EventKind.LEASE_REVOKED, token_id, self._clock.epoch_seconds()
            )

        logger.info("lease_revoked")

    def accept_lease(self, token_id: int, payment: int, caller: UUID) -> LeaseSettlement:
        """
        Rent ``token_id`` on its listed terms.

        Preconditions (checked in this order):
            - caller is not the owner              (SelfRentalError)
            - a live lease exists                  (NotListedError)
            - the owner approved the marketplace   (UnapprovedMarketplaceError)
            - payment == listed rent               (IncorrectPaymentError)

        Postconditions:
            - The lease is gone.
            - caller holds usage until now + duration_days days, with no
              refundable rent stored on the delegation.
            - caller paid rent; the marketplace holds fee; the owner
              received rent - fee.

        Raises:
            The errors above, DoubleDelegationError if someone else still
            holds usage, and FundsError subclasses from the fund movement.
        """
        require_amount(payment, "payment")
        with self.unit_of_work("accept_lease", actor_id=caller, token_id=token_id):
            owner = self._registry.owner_of(token_id)
            if caller == owner:
                raise SelfRentalError(token_id, caller)
            lease = self._live_lease(token_id, owner)
            if lease is None:
                raise NotListedError(token_id)
            if not self.is_approved_for_marketplace(token_id):
                raise UnapprovedMarketplaceError(token_id, self._accounts.holder)
            if payment != lease.rent:
                raise IncorrectPaymentError(token_id, lease.rent, payment)

            now = self._clock.epoch_seconds()
            split = split_rent(lease.rent, self._parameters.fee_percent)
            expires = lease_expiry(
                now, lease.duration_days, self._parameters.seconds_per_day
            )

            # INVARIANT: STATE_BEFORE_FUNDS -- clear the listing and record
            # the delegation before moving any money.
            self.session.delete(lease)
            self.session.flush()
            self._registry.delegate_usage(
                token_id,
                caller,
                expires,
                caller=self._accounts.holder,
                rent=0,
                as_of=now,
            )
            self._events.record(
                EventKind.LEASE_ACCEPTED,
                token_id,
                now,
                renter=caller,
                owner=owner,
                fee=split.fee,
                owner_proceeds=split.owner_proceeds,
                expires=expires,
            )

            self._funds.transfer(caller, self._accounts.holder, split.rent)
            self._funds.transfer(self._accounts.holder, owner, split.owner_proceeds)

        logger.info(
            "lease_accepted",
            extra={
                "renter": str(caller),
                "fee": split.fee,
                "owner_proceeds": split.owner_proceeds,
                "expires": expires,
            },
        )
        return LeaseSettlement(
            token_id=token_id,
            renter=caller,
            owner=owner,
            rent=split.rent,
            fee=split.fee,
            owner_proceeds=split.owner_proceeds,
            expires=expires,
        )

    # -------------------------------------------------------------------------
    # Withdrawal
    # -------------------------------------------------------------------------

    def withdraw_funds(self, caller: UUID) -> int:
        """
        Move every accumulated fee to the operator.

        Raises:
            NotOperatorError: caller is not the configured operator.

        Returns:
            The withdrawn amount.
        """
        with self.unit_of_work("withdraw_funds", actor_id=caller):
            # INVARIANT: OPERATOR_WITHDRAWAL
            if caller != self._accounts.operator:
                raise NotOperatorError(caller)
            amount = self._funds.balance_of(self._accounts.holder)
            self._events.record(
                EventKind.FUNDS_WITHDRAWN,
                None,
                self._clock.epoch_seconds(),
                operator=caller,
                amount=amount,
                source="marketplace",
            )
            self._funds.transfer(self._accounts.holder, caller, amount)

        logger.info("marketplace_funds_withdrawn", extra={"amount": amount})
        return amount
