"""
Account service: the business logic of the banking core.

This module handles:
  - Registration (unique username, hashed password, zero balance)
  - Lookup by username or id
  - Deposits, withdrawals and transfers, each writing its ledger rows
  - Transaction history and a balance integrity check
  - Account deletion, with the ledger cascade done as an explicit step

Atomicity:
  Every balance change and the ledger row that explains it are written in
  the SAME UnitOfWork. If anything raises before the block exits, both are
  rolled back, so the stored balance always equals the signed sum of the
  account's transactions. A transfer's two balance updates and two ledger
  rows share one UnitOfWork too: all four commit or none do.

Expected failures:
  Preconditions (amount, funds, recipient) are checked before anything is
  written and reported through a Result with an ErrorKind. Only unexpected
  failures raise.

Stale handles and concurrency:
  Operations take an AccountRecord the caller loaded earlier, but only its
  id is trusted. Balances are changed with conditional UPDATEs
  (AccountStore.credit and AccountStore.debit) evaluated against the
  persisted balance, so a stale handle or a concurrent call on the same
  account can neither lose an update nor overdraw it.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError

from bankapp.database import CENT, MAX_BALANCE
from bankapp.exceptions import ErrorKind
from bankapp.models.transaction import DEPOSIT, TRANSFER_IN_PREFIX, TRANSFER_OUT_PREFIX, WITHDRAWAL
from bankapp.result import Result, insufficient_funds
from bankapp.schemas.account import AccountRecord, BalanceCheck
from bankapp.schemas.transaction import BalanceChange, TransactionRecord, TransferReceipt, signed_amount
from bankapp.security import hash_password
from bankapp.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(amount) -> Decimal | None:
    """
    Normalize a monetary amount to a two-place Decimal.

    Returns None for anything that is not a finite, strictly positive amount
    with at most two decimal places and no larger than MAX_BALANCE. Floats
    go through str() so 0.1 means Decimal("0.1"), not its binary expansion.
    """
    if isinstance(amount, bool):
        return None
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        if not value.is_finite() or value <= 0:
            return None
        quantized = value.quantize(CENT)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if quantized != value or quantized > MAX_BALANCE:
        return None
    return quantized


class AccountService:
    """
    Orchestrates the account and transaction stores.

    Args:
        uow_factory: Builds a fresh UnitOfWork per operation.
        hash_password: One-way password hasher used at registration.
        clock: Returns the current timestamp for new ledger rows.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        hash_password: Callable[[str], str] = hash_password,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._uow_factory = uow_factory
        self._hash_password = hash_password
        self._clock = clock

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    async def register_account(self, username: str, password: str) -> Result[AccountRecord]:
        """
        Create an account with a zero balance.

        Fails with DUPLICATE_USERNAME when the username is taken, including
        when a concurrent registration wins the race at insert time.
        """
        if not username or not username.strip():
            return Result.failure(ErrorKind.INVALID_USERNAME, "Username must not be empty")

        async with self._uow_factory() as uow:
            if await uow.accounts.username_exists(username):
                logger.info("Registration rejected: username %r already exists", username)
                return Result.failure(
                    ErrorKind.DUPLICATE_USERNAME, f"Username {username} already exists"
                )
            try:
                account = await uow.accounts.add(username, self._hash_password(password))
            except IntegrityError:
                await uow.rollback()
                logger.info("Registration lost a race for username %r", username)
                return Result.failure(
                    ErrorKind.DUPLICATE_USERNAME, f"Username {username} already exists"
                )

        logger.info("Registered account %d for %r", account.id, username)
        return Result.success(account)

    async def find_account_by_username(self, username: str) -> Result[AccountRecord]:
        async with self._uow_factory() as uow:
            account = await uow.accounts.find_by_username(username)
        if account is None:
            return Result.failure(ErrorKind.ACCOUNT_NOT_FOUND, f"Account {username} not found")
        return Result.success(account)

    async def get_account(self, account_id: int) -> Result[AccountRecord]:
        async with self._uow_factory() as uow:
            account = await uow.accounts.get(account_id)
        if account is None:
            return Result.failure(ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account_id} not found")
        return Result.success(account)

    # ------------------------------------------------------------------
    # Balance-changing operations
    # ------------------------------------------------------------------

    async def deposit(self, account: AccountRecord, amount) -> Result[BalanceChange]:
        """
        Add money to an account and record a "Deposit" ledger row.

        There is no business limit; only a balance above MAX_BALANCE, which
        the cents column cannot hold, is rejected as INVALID_AMOUNT.
        """
        value = parse_amount(amount)
        if value is None:
            return Result.failure(
                ErrorKind.INVALID_AMOUNT, "Deposit amount must be greater than zero"
            )

        async with self._uow_factory() as uow:
            current = await uow.accounts.lock(account.id)
            if current is None:
                return Result.failure(
                    ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account.id} not found"
                )
            updated = await uow.accounts.credit(current.id, value)
            if updated is None:
                return await self._rejected_credit(uow, current.id, value)
            txn = await uow.transactions.append(updated.id, value, DEPOSIT, self._clock())

        logger.info("Deposited %s into account %d", value, updated.id)
        return Result.success(BalanceChange(account=updated, transaction=txn))

    async def withdraw(self, account: AccountRecord, amount) -> Result[BalanceChange]:
        """
        Take money out of an account and record a "Withdrawal" ledger row.

        Fails with INSUFFICIENT_FUNDS when the amount exceeds the balance.
        """
        value = parse_amount(amount)
        if value is None:
            return Result.failure(
                ErrorKind.INVALID_AMOUNT, "Withdrawal amount must be greater than zero"
            )

        async with self._uow_factory() as uow:
            current = await uow.accounts.lock(account.id)
            if current is None:
                return Result.failure(
                    ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account.id} not found"
                )
            logger.info("Current balance of account %d: %s", current.id, current.balance)
            updated = await uow.accounts.debit(current.id, value)
            if updated is None:
                return await self._rejected_debit(uow, current.id, value)
            logger.info("New balance of account %d after withdrawal: %s", updated.id, updated.balance)
            txn = await uow.transactions.append(updated.id, value, WITHDRAWAL, self._clock())

        return Result.success(BalanceChange(account=updated, transaction=txn))

    async def transfer_amount(
        self,
        from_account: AccountRecord,
        to_username: str,
        amount,
    ) -> Result[TransferReceipt]:
        """
        Move money to another account, identified by username.

        Preconditions are checked in this order: INVALID_AMOUNT,
        INSUFFICIENT_FUNDS, RECIPIENT_NOT_FOUND, then INVALID_RECIPIENT for a
        transfer to oneself.

        Both ledger rows carry the same timestamp, captured once.
        """
        value = parse_amount(amount)
        if value is None:
            return Result.failure(
                ErrorKind.INVALID_AMOUNT, "Transfer amount must be greater than zero"
            )

        async with self._uow_factory() as uow:
            sender = await uow.accounts.get(from_account.id)
            if sender is None:
                return Result.failure(
                    ErrorKind.ACCOUNT_NOT_FOUND, f"Account {from_account.id} not found"
                )
            if sender.balance < value:
                return insufficient_funds(value, sender.balance)

            recipient = await uow.accounts.find_by_username(to_username)
            if recipient is None:
                logger.info("Transfer from account %d rejected: no recipient %r", sender.id, to_username)
                return Result.failure(
                    ErrorKind.RECIPIENT_NOT_FOUND, f"Recipient account {to_username} not found"
                )
            if recipient.id == sender.id:
                return Result.failure(
                    ErrorKind.INVALID_RECIPIENT, "Cannot transfer to the same account"
                )

            # Lock both rows in id order before either UPDATE
            await uow.accounts.lock_many(sender.id, recipient.id)

            now = self._clock()
            debited = await uow.accounts.debit(sender.id, value)
            if debited is None:
                return await self._rejected_debit(uow, sender.id, value)
            credited = await uow.accounts.credit(recipient.id, value)
            if credited is None:
                await uow.rollback()
                return await self._rejected_credit(
                    uow, recipient.id, value, missing=ErrorKind.RECIPIENT_NOT_FOUND
                )
            sender, recipient = debited, credited

            debit = await uow.transactions.append(
                sender.id, value, f"{TRANSFER_OUT_PREFIX}{recipient.username}", now
            )
            credit = await uow.transactions.append(
                recipient.id, value, f"{TRANSFER_IN_PREFIX}{sender.username}", now
            )

        logger.info(
            "Transferred %s from account %d to account %d", value, sender.id, recipient.id
        )
        return Result.success(
            TransferReceipt(from_account=sender, to_account=recipient, debit=debit, credit=credit)
        )

    async def _rejected_debit(self, uow: UnitOfWork, account_id: int, value: Decimal) -> Result:
        """Report why debit() changed no row."""
        latest = await uow.accounts.get(account_id)
        if latest is None:
            return Result.failure(ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account_id} not found")
        logger.info(
            "Debit of %s from account %d rejected: balance %s", value, account_id, latest.balance
        )
        return insufficient_funds(value, latest.balance)

    async def _rejected_credit(
        self,
        uow: UnitOfWork,
        account_id: int,
        value: Decimal,
        missing: ErrorKind = ErrorKind.ACCOUNT_NOT_FOUND,
    ) -> Result:
        """Report why credit() changed no row."""
        if await uow.accounts.get(account_id) is None:
            return Result.failure(missing, f"Account {account_id} not found")
        logger.warning("Credit of %s to account %d would exceed %s", value, account_id, MAX_BALANCE)
        return Result.failure(
            ErrorKind.INVALID_AMOUNT,
            f"Balance of account {account_id} cannot exceed {MAX_BALANCE}",
            limit=MAX_BALANCE,
        )

    # ------------------------------------------------------------------
    # Ledger queries
    # ------------------------------------------------------------------

    async def get_transaction_history(
        self,
        account: AccountRecord,
        limit: int | None = None,
        offset: int = 0,
    ) -> Result[list[TransactionRecord]]:
        """All transactions owned by the account, oldest first."""
        async with self._uow_factory() as uow:
            transactions = await uow.transactions.list_for_account(account.id, limit, offset)
        return Result.success(transactions)

    async def verify_balance(self, account: AccountRecord) -> Result[BalanceCheck]:
        """
        Compare the stored balance with the signed sum of the ledger.

        A mismatch is logged as an error; it means a balance was changed
        outside the service.
        """
        async with self._uow_factory() as uow:
            current = await uow.accounts.get(account.id)
            if current is None:
                return Result.failure(
                    ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account.id} not found"
                )
            transactions = await uow.transactions.list_for_account(current.id)

        computed = sum((signed_amount(txn) for txn in transactions), Decimal("0.00"))
        check = BalanceCheck(
            account_id=current.id,
            balance=current.balance,
            computed_balance=computed,
            match=current.balance == computed,
        )
        if not check.match:
            logger.error(
                "Balance mismatch on account %d: stored %s, ledger %s",
                current.id, current.balance, computed,
            )
        return Result.success(check)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def delete_account(self, account: AccountRecord) -> Result[int]:
        """
        Delete an account and its whole ledger in one unit of work.

        Returns:
            The number of ledger rows removed with it.
        """
        async with self._uow_factory() as uow:
            current = await uow.accounts.lock(account.id)
            if current is None:
                return Result.failure(
                    ErrorKind.ACCOUNT_NOT_FOUND, f"Account {account.id} not found"
                )
            removed = await uow.transactions.delete_for_account(current.id)
            await uow.accounts.delete(current.id)

        logger.info("Deleted account %d and %d ledger rows", current.id, removed)
        return Result.success(removed)
