"""
Adversarial: failures deep inside an operation must leave no trace.

A lease acceptance touches the lease book, the usage delegation, the
event log and three balances.  Every failure path, including one raised
by the last fund movement, must roll all of it back.
"""

from uuid import uuid4

import pytest

from rental_kernel.domain.accounts import ZERO_ACCOUNT
from rental_kernel.domain.parameters import LedgerParameters
from rental_kernel.exceptions import (
    DoubleDelegationError,
    FundsRejectedError,
    InsufficientFundsError,
    SupplyExhaustedError,
)
from rental_kernel.services.asset_registry import AssetRegistry
from tests.conftest import DAY, MINT_PRICE


class TestAcceptLeaseRollback:

    def test_owner_refusing_proceeds_unwinds_everything(
        self, marketplace, registry, listed_asset, create_account, funds, ledger_selector
    ):
        token_id, owner = listed_asset(rent=100)
        renter = create_account(100)
        funds.set_accepts_funds(owner, False)
        hash_before = ledger_selector.canonical_hash()

        with pytest.raises(FundsRejectedError):
            marketplace.accept_lease(token_id, 100, renter)

        assert marketplace.lease_terms(token_id) is not None
        assert registry.current_delegate(token_id) == ZERO_ACCOUNT
        assert funds.balance_of(renter) == 100
        assert marketplace.fee_balance() == 0
        assert ledger_selector.canonical_hash() == hash_before

    def test_renter_without_funds(
        self, marketplace, registry, listed_asset, create_account, ledger_selector
    ):
        token_id, _ = listed_asset(rent=100)
        renter = create_account(99)
        events_before = len(ledger_selector.events_for_token(token_id))

        with pytest.raises(InsufficientFundsError):
            marketplace.accept_lease(token_id, 100, renter)

        assert marketplace.lease_terms(token_id) is not None
        assert registry.current_delegate(token_id) == ZERO_ACCOUNT
        assert len(ledger_selector.events_for_token(token_id)) == events_before

    def test_active_direct_delegation_blocks_lease(
        self, marketplace, registry, listed_asset, create_account, funds,
        deterministic_clock,
    ):
        token_id, owner = listed_asset(rent=100)
        friend = uuid4()
        registry.delegate_usage(
            token_id, friend, deterministic_clock.epoch_seconds() + DAY, caller=owner
        )
        renter = create_account(100)

        with pytest.raises(DoubleDelegationError):
            marketplace.accept_lease(token_id, 100, renter)

        assert registry.current_delegate(token_id) == friend
        assert marketplace.lease_terms(token_id) is not None
        assert funds.balance_of(renter) == 100

    def test_lease_acceptable_once_rollback_cause_removed(
        self, marketplace, registry, listed_asset, create_account, funds
    ):
        token_id, owner = listed_asset(rent=100)
        renter = create_account(100)
        funds.set_accepts_funds(owner, False)
        with pytest.raises(FundsRejectedError):
            marketplace.accept_lease(token_id, 100, renter)

        funds.set_accepts_funds(owner, True)
        marketplace.accept_lease(token_id, 100, renter)

        assert registry.current_delegate(token_id) == renter


class TestRevokeDelegationRollback:

    def test_refund_rejected_keeps_delegation(
        self, registry, issue_asset, create_account, funds, deterministic_clock
    ):
        token_id, owner = issue_asset()
        funds.deposit(owner, 500)
        bob = uuid4()
        expires = deterministic_clock.epoch_seconds() + DAY
        registry.delegate_usage(
            token_id, bob, expires, caller=owner, rent=500, payment=500
        )
        funds.set_accepts_funds(owner, False)

        with pytest.raises(FundsRejectedError):
            registry.revoke_delegation(token_id, owner)

        assert registry.current_delegate(token_id) == bob
        assert registry.escrowed_rent() == 500


class TestFormerOwnerRefusingFunds:
    """
    An expired delegation keeps its escrowed rent after the asset changes
    hands.  The former owner refusing funds must not block the new owner.
    """

    @pytest.fixture
    def handed_over(self, registry, issue_asset, create_account, funds, deterministic_clock):
        token_id, alice = issue_asset()
        funds.deposit(alice, 30)
        registry.delegate_usage(
            token_id, uuid4(), deterministic_clock.epoch_seconds() + DAY,
            alice, rent=30, payment=30,
        )
        deterministic_clock.advance(DAY + 1)
        bob = create_account(0)
        registry.transfer_ownership(token_id, alice, bob, alice)
        funds.set_accepts_funds(alice, False)
        return token_id, alice, bob

    def test_new_owner_delegates(self, registry, funds, handed_over, deterministic_clock):
        token_id, alice, bob = handed_over
        carol = uuid4()

        registry.delegate_usage(
            token_id, carol, deterministic_clock.epoch_seconds() + DAY, bob
        )

        assert registry.current_delegate(token_id) == carol
        assert funds.balance_of(bob) == 30
        assert funds.balance_of(alice) == 0
        assert registry.escrowed_rent() == 0

    def test_new_owner_revokes(self, registry, funds, handed_over):
        token_id, alice, bob = handed_over

        assert registry.revoke_delegation(token_id, bob) == 30

        assert funds.balance_of(bob) == 30
        assert funds.balance_of(alice) == 0
        assert registry.escrowed_rent() == 0

    def test_new_owner_leases(
        self, registry, marketplace, funds, handed_over, create_account
    ):
        token_id, alice, bob = handed_over
        registry.approve(token_id, marketplace.accounts.holder, bob)
        marketplace.create_lease(token_id, 1, 100, bob)
        renter = create_account(100)

        marketplace.accept_lease(token_id, 100, renter)

        assert registry.current_delegate(token_id) == renter
        assert funds.balance_of(bob) == 30 + 98
        assert funds.balance_of(alice) == 0
        assert registry.escrowed_rent() == 0


class TestSupplyCapUnderPressure:

    def test_cap_holds_after_rejected_issue(
        self, session, deterministic_clock, registry_accounts, create_account, funds
    ):
        small = AssetRegistry(
            session,
            deterministic_clock,
            LedgerParameters(mint_price=MINT_PRICE, supply_cap=2),
            registry_accounts,
        )
        payer = create_account(5 * MINT_PRICE)

        # A failed issuance must not consume a token id
        with pytest.raises(InsufficientFundsError):
            small.issue(MINT_PRICE, create_account(0))
        assert small.issue(MINT_PRICE, payer) == 1
        assert small.issue(MINT_PRICE, payer) == 2

        with pytest.raises(SupplyExhaustedError):
            small.issue(MINT_PRICE, payer)
        assert small.total_issued() == 2
        assert funds.balance_of(payer) == 3 * MINT_PRICE

    def test_rejection_at_cap_does_not_consume_token_id(
        self, session, deterministic_clock, registry_accounts, create_account
    ):
        payer = create_account(3 * MINT_PRICE)
        capped = AssetRegistry(
            session,
            deterministic_clock,
            LedgerParameters(mint_price=MINT_PRICE, supply_cap=1),
            registry_accounts,
        )
        assert capped.issue(MINT_PRICE, payer) == 1
        for _ in range(2):
            with pytest.raises(SupplyExhaustedError):
                capped.issue(MINT_PRICE, payer)
        assert capped.total_issued() == 1

        raised = AssetRegistry(
            session,
            deterministic_clock,
            LedgerParameters(mint_price=MINT_PRICE, supply_cap=2),
            registry_accounts,
        )
        assert raised.issue(MINT_PRICE, payer) == 2
