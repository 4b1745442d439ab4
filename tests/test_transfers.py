"""
Tests for transfers (atomic money movement between two accounts).

These tests verify:
  - A successful transfer moves the amount and writes one ledger row per side
  - Both ledger rows share a single timestamp
  - Preconditions fail in order: amount, funds, recipient
  - Failed transfers leave both balances and both histories untouched
  - A failure mid-transfer rolls back every partial effect
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from bankapp.exceptions import ErrorKind, RecipientNotFoundError
from bankapp.services.account_service import AccountService
from bankapp.stores.account_store import AccountStore
from bankapp.stores.transaction_store import TransactionStore


class TickingClock:
    """Returns a later timestamp on every call and counts the calls."""

    def __init__(self):
        self.calls = 0
        self._start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.calls += 1
        return self._start + timedelta(seconds=self.calls)


async def state_of(service, account):
    """(balance, history) as persisted right now."""
    balance = (await service.get_account(account.id)).unwrap().balance
    history = (await service.get_transaction_history(account)).unwrap()
    return balance, history


class TestTransferSuccess:
    """Tests for successful transfer operations."""

    async def test_transfer_moves_money(self, service, funded_alice, bob):
        receipt = (await service.transfer_amount(funded_alice, "bob", Decimal("20.00"))).unwrap()
        assert receipt.amount == Decimal("20.00")
        assert receipt.from_account.balance == Decimal("80.00")
        assert receipt.to_account.balance == Decimal("20.00")

        alice_balance, _ = await state_of(service, funded_alice)
        bob_balance, _ = await state_of(service, bob)
        assert alice_balance == Decimal("80.00")
        assert bob_balance == Decimal("20.00")

    async def test_transfer_writes_labelled_ledger_rows(self, service, funded_alice, bob):
        receipt = (await service.transfer_amount(funded_alice, "bob", Decimal("20.00"))).unwrap()

        assert receipt.debit.description == "Transfer Out to bob"
        assert receipt.debit.account_id == funded_alice.id
        assert receipt.debit.amount == Decimal("20.00")

        assert receipt.credit.description == "Transfer In from alice"
        assert receipt.credit.account_id == bob.id
        assert receipt.credit.amount == Decimal("20.00")

        _, alice_history = await state_of(service, funded_alice)
        _, bob_history = await state_of(service, bob)
        assert [t.description for t in alice_history] == ["Deposit", "Transfer Out to bob"]
        assert [t.description for t in bob_history] == ["Transfer In from alice"]

    async def test_ledger_rows_share_one_timestamp(self, uow_factory, bob):
        clock = TickingClock()
        service = AccountService(uow_factory=uow_factory, clock=clock)
        alice = (await service.register_account("alice", "pw")).unwrap()
        await service.deposit(alice, Decimal("50.00"))
        calls_before = clock.calls

        receipt = (await service.transfer_amount(alice, "bob", Decimal("10.00"))).unwrap()

        assert clock.calls == calls_before + 1
        assert receipt.debit.created_at == receipt.credit.created_at

    async def test_transfer_exact_balance(self, service, funded_alice, bob):
        receipt = (await service.transfer_amount(funded_alice, "bob", Decimal("100.00"))).unwrap()
        assert receipt.from_account.balance == Decimal("0.00")
        assert receipt.to_account.balance == Decimal("100.00")

    async def test_transfers_back_and_forth_keep_ledger_consistent(self, service, funded_alice, bob):
        await service.transfer_amount(funded_alice, "bob", Decimal("50.00"))
        await service.transfer_amount(funded_alice, "bob", Decimal("30.00"))
        await service.transfer_amount(bob, "alice", Decimal("20.00"))

        alice_check = (await service.verify_balance(funded_alice)).unwrap()
        bob_check = (await service.verify_balance(bob)).unwrap()

        # alice: 100 - 50 - 30 + 20, bob: 50 + 30 - 20
        assert alice_check.balance == Decimal("40.00")
        assert bob_check.balance == Decimal("60.00")
        assert alice_check.match is True
        assert bob_check.match is True


class TestTransferFailures:
    """Tests for transfer rejection scenarios. None of them may change state."""

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-20.00")])
    async def test_non_positive_amount_rejected(self, service, funded_alice, bob, amount):
        alice_before = await state_of(service, funded_alice)
        bob_before = await state_of(service, bob)

        result = await service.transfer_amount(funded_alice, "bob", amount)

        assert result.error.kind == ErrorKind.INVALID_AMOUNT
        assert await state_of(service, funded_alice) == alice_before
        assert await state_of(service, bob) == bob_before

    async def test_insufficient_funds_rejected(self, service, funded_alice, bob):
        alice_before = await state_of(service, funded_alice)
        bob_before = await state_of(service, bob)

        result = await service.transfer_amount(funded_alice, "bob", Decimal("100.01"))

        assert result.error.kind == ErrorKind.INSUFFICIENT_FUNDS
        assert await state_of(service, funded_alice) == alice_before
        assert await state_of(service, bob) == bob_before

    async def test_unknown_recipient_rejected_without_partial_debit(self, service, funded_alice):
        alice_before = await state_of(service, funded_alice)

        result = await service.transfer_amount(funded_alice, "nobody", Decimal("10.00"))

        assert result.error.kind == ErrorKind.RECIPIENT_NOT_FOUND
        assert await state_of(service, funded_alice) == alice_before
        with pytest.raises(RecipientNotFoundError):
            result.unwrap()

    async def test_amount_checked_before_funds(self, service, alice, bob):
        result = await service.transfer_amount(alice, "bob", Decimal("-1.00"))
        assert result.error.kind == ErrorKind.INVALID_AMOUNT

    async def test_funds_checked_before_recipient(self, service, alice):
        result = await service.transfer_amount(alice, "nobody", Decimal("5.00"))
        assert result.error.kind == ErrorKind.INSUFFICIENT_FUNDS

    async def test_transfer_to_self_rejected(self, service, funded_alice):
        alice_before = await state_of(service, funded_alice)

        result = await service.transfer_amount(funded_alice, "alice", Decimal("10.00"))

        assert result.error.kind == ErrorKind.INVALID_RECIPIENT
        assert await state_of(service, funded_alice) == alice_before

    async def test_stale_sender_cannot_overdraw(self, service, funded_alice, bob):
        """funded_alice still says 100.00 after the money is gone."""
        await service.withdraw(funded_alice, Decimal("95.00"))
        result = await service.transfer_amount(funded_alice, "bob", Decimal("50.00"))
        assert result.error.kind == ErrorKind.INSUFFICIENT_FUNDS
        assert result.error.context["available"] == Decimal("5.00")


class TestTransferAtomicity:
    """
    Tests that a transfer is all-or-nothing.

    A failure is injected after some of the four writes (two balance
    updates, two ledger rows) have already been flushed; afterwards neither
    account may show any trace of the transfer.
    """

    async def test_failure_on_credit_row_rolls_back_everything(self, service, funded_alice, bob):
        alice_before = await state_of(service, funded_alice)
        bob_before = await state_of(service, bob)

        original_append = TransactionStore.append
        calls = 0

        async def fail_second_append(self, *args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise RuntimeError("crash between debit and credit rows")
            return await original_append(self, *args, **kwargs)

        with patch.object(TransactionStore, "append", fail_second_append):
            with pytest.raises(RuntimeError):
                await service.transfer_amount(funded_alice, "bob", Decimal("40.00"))

        # Both balance updates and the debit row had been flushed
        assert calls == 2
        assert await state_of(service, funded_alice) == alice_before
        assert await state_of(service, bob) == bob_before

    async def test_failure_after_debit_rolls_back_debit(self, service, funded_alice, bob):
        """Crash after the sender was debited but before the recipient was credited."""
        async def fail_credit(self, account_id, amount):
            raise RuntimeError("crash after debit")

        with patch.object(AccountStore, "credit", fail_credit):
            with pytest.raises(RuntimeError):
                await service.transfer_amount(funded_alice, "bob", Decimal("40.00"))

        alice_balance, alice_history = await state_of(service, funded_alice)
        bob_balance, bob_history = await state_of(service, bob)
        assert alice_balance == Decimal("100.00")
        assert bob_balance == Decimal("0.00")
        assert len(alice_history) == 1
        assert bob_history == []

    async def test_service_usable_after_rollback(self, service, funded_alice, bob):
        async def broken_append(self, *args, **kwargs):
            raise RuntimeError("ledger unavailable")

        with patch.object(TransactionStore, "append", broken_append):
            with pytest.raises(RuntimeError):
                await service.transfer_amount(funded_alice, "bob", Decimal("10.00"))

        receipt = (await service.transfer_amount(funded_alice, "bob", Decimal("10.00"))).unwrap()
        assert receipt.from_account.balance == Decimal("90.00")
        assert receipt.to_account.balance == Decimal("10.00")
