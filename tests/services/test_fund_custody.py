"""
Tests for FundCustody: pooled deposits and owner-only withdrawal.
"""

import pytest

from marketplace_kernel.db.types import MAX_AMOUNT
from marketplace_kernel.domain.payout import InMemoryWallet
from marketplace_kernel.exceptions import EscrowOverflowError, UnauthorizedError
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.fund_custody import FundCustody


class TestDeposit:

    def test_deposits_accumulate(self, session):
        custody = FundCustody(session)
        assert custody.deposit(30) == 30
        assert custody.deposit(12) == 42
        assert custody.balance == 42

    def test_overflow_rejected(self, session):
        custody = FundCustody(session)
        custody.deposit(MAX_AMOUNT - 1)
        with pytest.raises(EscrowOverflowError) as exc_info:
            custody.deposit(2)
        assert exc_info.value.limit == MAX_AMOUNT
        assert custody.balance == MAX_AMOUNT - 1

    def test_fill_to_exact_limit(self, session):
        custody = FundCustody(session)
        custody.deposit(MAX_AMOUNT - 1)
        assert custody.deposit(1) == MAX_AMOUNT


class TestWithdraw:

    def test_owner_drains_pool(self, session, system_owner):
        wallet = InMemoryWallet()
        custody = FundCustody(session)
        custody.deposit(75)

        assert custody.withdraw(system_owner, wallet) == 75
        assert custody.balance == 0
        assert wallet.holdings_of(system_owner) == 75

    def test_non_owner_rejected(self, session, alice):
        wallet = InMemoryWallet()
        custody = FundCustody(session)
        custody.deposit(75)

        with pytest.raises(UnauthorizedError):
            custody.withdraw(alice, wallet)
        assert custody.balance == 75
        assert wallet.transfers == []

    def test_zero_balance_still_transfers(self, session, system_owner):
        wallet = InMemoryWallet()
        assert FundCustody(session).withdraw(system_owner, wallet) == 0
        assert wallet.transfers == [(system_owner, 0)]

    def test_allowed_while_stopped(self, session, system_owner):
        AccessController(session).toggle_active(system_owner)
        custody = FundCustody(session)
        custody.deposit(5)
        assert custody.withdraw(system_owner, InMemoryWallet()) == 5

    def test_balance_zeroed_before_transfer(self, session, system_owner):
        observed = []

        class ObservingWallet(InMemoryWallet):
            def transfer(self, recipient, amount):
                observed.append(FundCustody(session).balance)
                super().transfer(recipient, amount)

        custody = FundCustody(session)
        custody.deposit(40)
        custody.withdraw(system_owner, ObservingWallet())
        assert observed == [0]

    def test_second_withdraw_gets_nothing(self, session, system_owner):
        wallet = InMemoryWallet()
        custody = FundCustody(session)
        custody.deposit(40)
        custody.withdraw(system_owner, wallet)
        assert custody.withdraw(system_owner, wallet) == 0
        assert wallet.holdings_of(system_owner) == 40
