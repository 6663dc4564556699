"""
Kernel Invariants Contract.

These invariants are structural law. No configuration set may override
them; configuration chooses the price floor, the cap and the fee
percentage, never whether these rules apply.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across AssetRegistry, LeaseMarketplace,
FundsService and the delegation rules in domain/delegation.py.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    SINGLE_OWNER = "single_owner"
    """Every issued asset has exactly one non-zero owner. Enforced by
    AssetRegistry.issue and transfer_ownership."""

    SUPPLY_CAP = "supply_cap"
    """Issued count never exceeds the configured cap. Enforced by
    AssetRegistry.issue against the locked token-id counter."""

    EXCLUSIVE_DELEGATION = "exclusive_delegation"
    """At most one active usage delegation per asset. Enforced by
    AssetRegistry.delegate_usage (DoubleDelegationError)."""

    LAZY_EXPIRY = "lazy_expiry"
    """Usage rights lapse when now > expires, evaluated on read by
    domain.delegation.is_active. No background process clears state."""

    EXACT_FEE_SPLIT = "exact_fee_split"
    """fee + owner_proceeds == rent for every accepted lease, with fee
    truncated toward zero. Enforced by domain.delegation.split_rent."""

    OPERATION_ATOMICITY = "operation_atomicity"
    """A rejected operation leaves every ledger unchanged. Enforced by
    the per-operation savepoint in BaseService.unit_of_work."""

    STATE_BEFORE_FUNDS = "state_before_funds"
    """Ledger state is written before any fund movement in the same
    operation."""

    OPERATOR_WITHDRAWAL = "operator_withdrawal"
    """Only the injected operator account may withdraw accumulated
    proceeds or fees."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "rental_config",
    "scripts",
)
