"""
Pure delegation and settlement rules.

No database: is_active, lease_expiry and split_rent are plain functions.
"""

from uuid import uuid4

import pytest

from rental_kernel.domain.accounts import ZERO_ACCOUNT, is_zero
from rental_kernel.domain.delegation import is_active, lease_expiry, split_rent
from rental_kernel.domain.parameters import LedgerParameters

NOW = 1_700_000_000


class TestIsActive:
    """Lazy expiry: active iff a delegate is stored and now <= expires."""

    def test_active_before_expiry(self):
        assert is_active(uuid4(), NOW + 10, NOW)

    def test_active_at_exact_expiry_second(self):
        assert is_active(uuid4(), NOW, NOW)

    def test_inactive_one_second_after_expiry(self):
        assert not is_active(uuid4(), NOW, NOW + 1)

    def test_zero_delegate_never_active(self):
        assert not is_active(ZERO_ACCOUNT, NOW + 10, NOW)

    def test_none_delegate_never_active(self):
        assert not is_active(None, NOW + 10, NOW)


class TestZeroAccount:

    def test_zero_account_is_zero(self):
        assert is_zero(ZERO_ACCOUNT)

    def test_fresh_account_is_not_zero(self):
        assert not is_zero(uuid4())


class TestLeaseExpiry:

    def test_one_day(self):
        assert lease_expiry(NOW, 1, 86_400) == NOW + 86_400

    def test_seven_days(self):
        assert lease_expiry(NOW, 7, 86_400) == NOW + 7 * 86_400

    def test_custom_day_length(self):
        assert lease_expiry(0, 3, 60) == 180


class TestSplitRent:
    """fee = rent * fee_percent // 100; owner receives the rest."""

    def test_hundred_at_two_percent(self):
        split = split_rent(100, 2)
        assert split.fee == 2
        assert split.owner_proceeds == 98

    def test_small_rent_truncates_fee_to_zero(self):
        split = split_rent(49, 2)
        assert split.fee == 0
        assert split.owner_proceeds == 49

    def test_fee_truncates_toward_zero(self):
        split = split_rent(150, 2)
        assert split.fee == 3
        assert split.owner_proceeds == 147
        split = split_rent(199, 2)
        assert split.fee == 3
        assert split.owner_proceeds == 196

    def test_zero_rent(self):
        split = split_rent(0, 2)
        assert (split.rent, split.fee, split.owner_proceeds) == (0, 0, 0)

    def test_wei_scale_rent_is_exact(self):
        rent = 10**18 + 1
        split = split_rent(rent, 2)
        assert split.fee == 2 * 10**16
        assert split.fee + split.owner_proceeds == rent

    def test_hundred_percent_fee(self):
        split = split_rent(500, 100)
        assert split.fee == 500
        assert split.owner_proceeds == 0


class TestLedgerParameters:

    def test_defaults(self):
        params = LedgerParameters(mint_price=2 * 10**18, supply_cap=1000)
        assert params.fee_percent == 2
        assert params.min_rental_days == 1
        assert params.seconds_per_day == 86_400

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"mint_price": -1, "supply_cap": 10},
            {"mint_price": 1, "supply_cap": 0},
            {"mint_price": 1, "supply_cap": 10, "fee_percent": 101},
            {"mint_price": 1, "supply_cap": 10, "fee_percent": -1},
            {"mint_price": 1, "supply_cap": 10, "min_rental_days": 0},
            {"mint_price": 1, "supply_cap": 10, "seconds_per_day": 0},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            LedgerParameters(**kwargs)

    def test_frozen(self):
        params = LedgerParameters(mint_price=1, supply_cap=1)
        with pytest.raises(AttributeError):
            params.supply_cap = 2
