"""
Module: rental_kernel.selectors.ledger_selector
Responsibility: Read-only queries over both ledgers: assets, usage
    delegations, leases, fund balances and the event log.  Also computes
    the canonical event-log hash used to compare replicas or detect
    tampering.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ (DTOs, clock, delegation rules) and selectors/base.py.  MUST
    NOT import from services/ or outer layers.

Invariants enforced:
    LAZY_EXPIRY -- get_delegation() reports ``active`` by applying
                   domain.delegation.is_active at read time.  Nothing is
                   cleared or rewritten by a read.

Failure modes:
    - Returns None or empty lists when no matching rows exist (never raises
      on absence of data).
"""

import hashlib
import json
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock
from rental_kernel.domain.dtos import (
    AssetInfo,
    DelegationInfo,
    LeaseTerms,
    LedgerEventInfo,
)
from rental_kernel.models.asset import Asset
from rental_kernel.models.balance import AccountBalance
from rental_kernel.models.delegation import UsageDelegation
from rental_kernel.models.lease import Lease
from rental_kernel.models.ledger_event import EventKind, LedgerEvent
from rental_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector[Asset]):
    """
    Selector for ledger queries.

    Contract:
        All public query methods return frozen DTOs or plain values.
        Multi-row results are ordered deterministically (token_id for
        assets, seq for events).

    Non-goals:
        - Does NOT enforce authorization; the read side is public.
    """

    def __init__(self, session: Session, clock: Clock):
        super().__init__(session)
        self._clock = clock

    @staticmethod
    def _asset_dto(asset: Asset) -> AssetInfo:
        return AssetInfo(
            token_id=asset.token_id,
            owner=asset.owner,
            mint_price=asset.mint_price,
            approved=asset.approved,
            minted_at=asset.minted_at,
        )

    @staticmethod
    def _event_dto(event: LedgerEvent) -> LedgerEventInfo:
        return LedgerEventInfo(
            seq=event.seq,
            kind=EventKind(event.kind).value,
            token_id=event.token_id,
            payload=dict(event.payload or {}),
            occurred_at=event.occurred_at,
        )

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    def get_asset(self, token_id: int) -> AssetInfo | None:
        asset = self.session.execute(
            select(Asset).where(Asset.token_id == token_id)
        ).scalar_one_or_none()
        if asset is None:
            return None
        return self._asset_dto(asset)

    def assets_owned_by(self, owner: UUID) -> list[AssetInfo]:
        assets = self.session.execute(
            select(Asset).where(Asset.owner == owner).order_by(Asset.token_id)
        ).scalars().all()
        return [self._asset_dto(asset) for asset in assets]

    def total_issued(self) -> int:
        return self.session.execute(select(func.count(Asset.id))).scalar_one()

    # -------------------------------------------------------------------------
    # Delegations and leases
    # -------------------------------------------------------------------------

    def get_delegation(self, token_id: int) -> DelegationInfo | None:
        """
        Stored delegation of ``token_id`` with the activity check applied.

        Returns None for an unknown token, and an empty DelegationInfo for
        an asset that was never delegated.
        """
        if self.get_asset(token_id) is None:
            return None
        delegation = self.session.execute(
            select(UsageDelegation).where(UsageDelegation.token_id == token_id)
        ).scalar_one_or_none()
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

    def get_lease(self, token_id: int) -> LeaseTerms | None:
        """
        Stored lease row for ``token_id``.

        Unlike LeaseMarketplace.lease_terms(), this returns a stale listing
        (lister no longer owns the asset) as well; compare ``lister`` with
        the asset owner to tell them apart.
        """
        lease = self.session.execute(
            select(Lease).where(Lease.token_id == token_id)
        ).scalar_one_or_none()
        if lease is None:
            return None
        return LeaseTerms(
            token_id=lease.token_id,
            rent=lease.rent,
            duration_days=lease.duration_days,
            lister=lease.lister,
            listed_at=lease.listed_at,
        )

    # -------------------------------------------------------------------------
    # Funds
    # -------------------------------------------------------------------------

    def balance_of(self, account: UUID) -> int:
        row = self.session.execute(
            select(AccountBalance).where(AccountBalance.account == account)
        ).scalar_one_or_none()
        return row.balance if row is not None else 0

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def events_for_token(self, token_id: int) -> list[LedgerEventInfo]:
        events = self.session.execute(
            select(LedgerEvent)
            .where(LedgerEvent.token_id == token_id)
            .order_by(LedgerEvent.seq)
        ).scalars().all()
        return [self._event_dto(event) for event in events]

    def events_of_kind(self, kind: EventKind) -> list[LedgerEventInfo]:
        events = self.session.execute(
            select(LedgerEvent)
            .where(LedgerEvent.kind == EventKind(kind).value)
            .order_by(LedgerEvent.seq)
        ).scalars().all()
        return [self._event_dto(event) for event in events]

    def canonical_hash(self) -> str:
        """
        Deterministic SHA-256 digest of the whole event log.

        Events are serialized in seq order with sorted payload keys, so the
        same log always produces the same hash regardless of backend or
        dict ordering.

        Returns:
            64-character hex digest.
        """
        events = self.session.execute(
            select(LedgerEvent).order_by(LedgerEvent.seq)
        ).scalars().all()
        canonical = [
            {
                "seq": event.seq,
                "kind": event.kind,
                "token_id": event.token_id,
                "payload": event.payload or {},
                "occurred_at": event.occurred_at,
            }
            for event in events
        ]
        data = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(data.encode("utf-8")).hexdigest()
