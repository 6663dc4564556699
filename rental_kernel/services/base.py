"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer, and the per-operation unit of
    work that makes each ledger operation atomic.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    OPERATION_ATOMICITY -- every public mutating operation runs inside
        ``unit_of_work()``, a SAVEPOINT.  If anything inside raises,
        including a nested call into another service or a fund movement,
        the savepoint is rolled back and the ledgers are exactly as before
        the call.
    Transaction boundaries -- services flush within the caller's
        transaction and never commit.  The caller (session_scope(), a
        script, or the test harness) owns commit/rollback.

Failure modes:
    - Rejections (RentalKernelError) are logged at WARNING as
      ``operation_rejected`` with their code and re-raised unchanged.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from rental_kernel.exceptions import RentalKernelError
from rental_kernel.logging_config import LogContext, get_logger

logger = get_logger("services")


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage the outer transaction lifecycle.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    @contextmanager
    def unit_of_work(
        self,
        operation: str,
        actor_id: object | None = None,
        token_id: int | None = None,
    ) -> Iterator[None]:
        """
        Run one ledger operation atomically.

        Nested units of work (the marketplace calling the registry) open
        nested savepoints; an inner failure unwinds the outer one as well.
        """
        with LogContext.bind(
            operation=operation,
            actor_id=str(actor_id) if actor_id is not None else None,
            token_id=str(token_id) if token_id is not None else None,
        ):
            try:
                with self.session.begin_nested():
                    yield
                    self.session.flush()
            except RentalKernelError as exc:
                logger.warning(
                    "operation_rejected",
                    extra={"error_code": exc.code, "reason": str(exc)},
                )
                raise
