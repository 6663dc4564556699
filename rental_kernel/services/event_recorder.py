"""
EventRecorder -- append-only log of observable ledger events.

Responsibility:
    Inserts one LedgerEvent per observable state change (issuance,
    transfer, delegation, lease lifecycle, withdrawal) so that external
    consumers can index the ledgers from the log alone.

Invariants enforced:
    - Events are written inside the emitting operation's unit of work; a
      rejected operation emits nothing.
    - seq comes from SequenceService.LEDGER_EVENT, strictly increasing.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from rental_kernel.logging_config import get_logger
from rental_kernel.models.ledger_event import EventKind, LedgerEvent
from rental_kernel.services.sequence_service import SequenceService

logger = get_logger("services.events")


def _jsonable(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) >= 2**53:
        # Keep wei-scale amounts exact through JSON backends
        return str(value)
    return value


class EventRecorder:
    """Appends LedgerEvent rows."""

    def __init__(self, session: Session):
        self._session = session
        self._sequences = SequenceService(session)

    def record(
        self,
        kind: EventKind,
        token_id: int | None,
        occurred_at: int,
        **payload: Any,
    ) -> LedgerEvent:
        """
        Append an event.

        Args:
            kind: What happened.
            token_id: The asset concerned, or None for account-level events.
            occurred_at: Epoch seconds of the emitting operation.
            **payload: Event fields (UUIDs and large ints are stringified).
        """
        seq = self._sequences.next_value(SequenceService.LEDGER_EVENT)
        event = LedgerEvent(
            seq=seq,
            kind=kind.value,
            token_id=token_id,
            payload={key: _jsonable(val) for key, val in payload.items()},
            occurred_at=occurred_at,
        )
        self._session.add(event)
        self._session.flush()
        logger.debug(
            "ledger_event_recorded",
            extra={"seq": seq, "kind": kind.value, "event_token_id": token_id},
        )
        return event
