"""
Hypothesis-Based Fuzzing of the rental ledgers.

Property-based testing using Hypothesis to generate adversarial inputs
and verify invariants hold.

Boundaries fuzzed here:
- Fee split: fee truncates toward zero and fee + proceeds == rent
- Lazy expiry: activity flips exactly one second after expiry
- Lease settlement: funds are conserved across renter, owner and
  marketplace for any rent (wei scale included)
- Payment mismatch: any payment other than the rent is rejected with
  every balance unchanged
- Supply cap: issuance stops exactly at the cap whatever the number of
  attempts

Database-backed properties share one session across examples, so they
assert on deltas rather than absolute state.
"""

from uuid import uuid4

import pytest
from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st

from rental_kernel.domain.accounts import ZERO_ACCOUNT
from rental_kernel.domain.delegation import is_active, lease_expiry, split_rent
from rental_kernel.domain.parameters import LedgerParameters
from rental_kernel.exceptions import IncorrectPaymentError, SupplyExhaustedError
from rental_kernel.services.asset_registry import AssetRegistry

rents = st.integers(min_value=0, max_value=10**30)
percents = st.integers(min_value=0, max_value=100)

DB_SETTINGS = settings(
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


class TestFeeSplitProperties:

    @given(rent=rents, fee_percent=percents)
    @settings(max_examples=500)
    def test_split_is_exact(self, rent, fee_percent):
        split = split_rent(rent, fee_percent)
        assert split.fee + split.owner_proceeds == rent
        assert 0 <= split.fee <= rent

    @given(rent=rents, fee_percent=percents)
    @settings(max_examples=500)
    def test_fee_truncates_toward_zero(self, rent, fee_percent):
        fee = split_rent(rent, fee_percent).fee
        assert fee * 100 <= rent * fee_percent < (fee + 1) * 100

    @given(rent=st.integers(min_value=0, max_value=49))
    def test_two_percent_of_small_rent_is_zero(self, rent):
        assert split_rent(rent, 2).fee == 0


class TestLazyExpiryProperties:

    @given(
        now=st.integers(min_value=0, max_value=2**40),
        offset=st.integers(min_value=-(2**20), max_value=2**20),
    )
    def test_active_until_expiry_inclusive(self, now, offset):
        expires = now + offset
        assert is_active(uuid4(), expires, now) == (offset >= 0)

    @given(now=st.integers(min_value=0, max_value=2**40))
    def test_zero_delegate_never_active(self, now):
        assert not is_active(ZERO_ACCOUNT, now + 1, now)

    @given(
        now=st.integers(min_value=0, max_value=2**40),
        days=st.integers(min_value=1, max_value=3650),
    )
    def test_expiry_is_whole_days_ahead(self, now, days):
        assert lease_expiry(now, days, 86_400) - now == days * 86_400


class TestSettlementProperties:

    @given(rent=st.integers(min_value=0, max_value=10**24))
    @DB_SETTINGS
    def test_funds_conserved(self, rent, marketplace, listed_asset, create_account, funds):
        token_id, owner = listed_asset(rent=rent)
        renter = create_account(rent)
        holder = marketplace.accounts.holder
        parties = (renter, owner, holder)
        before = {account: funds.balance_of(account) for account in parties}

        settlement = marketplace.accept_lease(token_id, rent, renter)

        after = {account: funds.balance_of(account) for account in parties}
        assert sum(after.values()) == sum(before.values())
        assert after[renter] == before[renter] - rent
        assert after[owner] == before[owner] + settlement.owner_proceeds
        assert after[holder] == before[holder] + settlement.fee

    @given(
        rent=st.integers(min_value=0, max_value=10**24),
        payment=st.integers(min_value=0, max_value=10**24),
    )
    @DB_SETTINGS
    def test_mismatched_payment_changes_nothing(
        self, rent, payment, marketplace, listed_asset, create_account, funds
    ):
        assume(payment != rent)
        token_id, owner = listed_asset(rent=rent)
        renter = create_account(max(rent, payment))
        renter_before = funds.balance_of(renter)
        owner_before = funds.balance_of(owner)

        with pytest.raises(IncorrectPaymentError):
            marketplace.accept_lease(token_id, payment, renter)

        assert funds.balance_of(renter) == renter_before
        assert funds.balance_of(owner) == owner_before
        assert marketplace.lease_terms(token_id) is not None


class TestSupplyCapProperties:

    @given(
        headroom=st.integers(min_value=1, max_value=5),
        attempts=st.integers(min_value=0, max_value=8),
    )
    @DB_SETTINGS
    def test_cap_never_exceeded(
        self, headroom, attempts, session, deterministic_clock, registry_accounts,
        create_account,
    ):
        def registry_with_cap(cap):
            return AssetRegistry(
                session,
                deterministic_clock,
                LedgerParameters(mint_price=1, supply_cap=cap),
                registry_accounts,
            )

        baseline = registry_with_cap(1).total_issued()
        capped = registry_with_cap(baseline + headroom)
        payer = create_account(attempts)

        rejected = 0
        for _ in range(attempts):
            try:
                capped.issue(1, payer)
            except SupplyExhaustedError:
                rejected += 1

        assert capped.total_issued() == baseline + min(attempts, headroom)
        assert rejected == max(0, attempts - headroom)
