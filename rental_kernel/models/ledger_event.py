"""
Module: rental_kernel.models.ledger_event
Responsibility: ORM persistence for observable ledger events, the record
    external indexers consume.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Append-only: EventRecorder only inserts.
    - seq is unique and monotonically increasing, allocated by
      SequenceService inside the emitting operation, so a rolled-back
      operation leaves no event behind.
"""

from enum import Enum

from sqlalchemy import JSON, BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import Timestamp


class EventKind(str, Enum):
    """Kinds of observable events."""

    ASSET_ISSUED = "asset_issued"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"
    APPROVAL_SET = "approval_set"
    OPERATOR_APPROVAL_SET = "operator_approval_set"
    USAGE_DELEGATED = "usage_delegated"
    DELEGATION_REVOKED = "delegation_revoked"
    LEASE_CREATED = "lease_created"
    LEASE_REVOKED = "lease_revoked"
    LEASE_ACCEPTED = "lease_accepted"
    FUNDS_WITHDRAWN = "funds_withdrawn"


class LedgerEvent(Base):
    """One emitted event."""

    __tablename__ = "ledger_events"

    __table_args__ = (
        Index("idx_ledger_event_token", "token_id"),
        Index("idx_ledger_event_kind", "kind"),
    )

    seq: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
    )

    kind: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    # None for account-level events such as withdrawals
    token_id: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    occurred_at: Mapped[Timestamp]

    def __repr__(self) -> str:
        return f"<LedgerEvent {self.seq} {self.kind}>"
