"""ORM models for the rental kernel."""

from rental_kernel.models.asset import Asset, OperatorApproval
from rental_kernel.models.balance import AccountBalance
from rental_kernel.models.delegation import UsageDelegation
from rental_kernel.models.lease import Lease
from rental_kernel.models.ledger_event import EventKind, LedgerEvent
from rental_kernel.models.sequence import SequenceCounter

__all__ = [
    "AccountBalance",
    "Asset",
    "EventKind",
    "Lease",
    "LedgerEvent",
    "OperatorApproval",
    "SequenceCounter",
    "UsageDelegation",
]
