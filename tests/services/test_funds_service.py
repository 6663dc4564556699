"""
FundsService: balance movement primitive.
"""

from uuid import uuid4

import pytest

from rental_kernel.exceptions import (
    FundsRejectedError,
    InsufficientFundsError,
    InvalidAmountError,
)


class TestBalances:

    def test_unknown_account_has_zero_balance(self, funds):
        assert funds.balance_of(uuid4()) == 0

    def test_unknown_account_accepts_funds(self, funds):
        assert funds.accepts_funds(uuid4())

    def test_deposit_accumulates(self, funds):
        account = uuid4()
        funds.deposit(account, 10)
        assert funds.deposit(account, 5) == 15
        assert funds.balance_of(account) == 15

    def test_deposit_negative_rejected(self, funds):
        with pytest.raises(InvalidAmountError):
            funds.deposit(uuid4(), -1)

    def test_deposit_non_integer_rejected(self, funds):
        with pytest.raises(InvalidAmountError):
            funds.deposit(uuid4(), 1.5)


class TestTransfer:

    def test_transfer_moves_exact_amount(self, funds, create_account):
        source = create_account(100)
        destination = uuid4()

        funds.transfer(source, destination, 40)

        assert funds.balance_of(source) == 60
        assert funds.balance_of(destination) == 40

    def test_insufficient_funds(self, funds, create_account):
        source = create_account(10)
        with pytest.raises(InsufficientFundsError) as exc_info:
            funds.transfer(source, uuid4(), 11)
        assert exc_info.value.balance == 10
        assert exc_info.value.requested == 11
        assert funds.balance_of(source) == 10

    def test_zero_transfer_from_empty_account(self, funds):
        destination = uuid4()
        funds.transfer(uuid4(), destination, 0)
        assert funds.balance_of(destination) == 0

    def test_rejected_credit_rolls_back_debit(self, funds, create_account):
        source = create_account(100)
        refuser = uuid4()
        funds.set_accepts_funds(refuser, False)

        with pytest.raises(FundsRejectedError) as exc_info:
            funds.transfer(source, refuser, 30)

        assert exc_info.value.account == str(refuser)
        assert funds.balance_of(source) == 100
        assert funds.balance_of(refuser) == 0

    def test_acceptance_can_be_restored(self, funds, create_account):
        source = create_account(100)
        account = uuid4()
        funds.set_accepts_funds(account, False)
        funds.set_accepts_funds(account, True)

        funds.transfer(source, account, 100)
        assert funds.balance_of(account) == 100

    def test_wei_scale_amounts_exact(self, funds, create_account):
        amount = 123_456_789_012_345_678_901_234
        source = create_account(amount + 1)
        destination = uuid4()

        funds.transfer(source, destination, amount)

        assert funds.balance_of(destination) == amount
        assert funds.balance_of(source) == 1
