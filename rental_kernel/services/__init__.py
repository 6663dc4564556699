"""Services for the rental kernel (write side)."""

from rental_kernel.services.asset_registry import AssetRegistry
from rental_kernel.services.event_recorder import EventRecorder
from rental_kernel.services.funds_service import FundsService
from rental_kernel.services.lease_marketplace import LeaseMarketplace
from rental_kernel.services.sequence_service import SequenceService

__all__ = [
    "AssetRegistry",
    "EventRecorder",
    "FundsService",
    "LeaseMarketplace",
    "SequenceService",
]
