"""
Account store: reads and writes of the accounts table.

Every read returns an AccountRecord snapshot, never the ORM row, so nothing
outside the store relies on change tracking. Writes are explicit calls
(add, credit, debit, delete) that run immediately, leaving the commit or
rollback to the UnitOfWork that owns the session.

Balance changes:
  credit() and debit() are single conditional UPDATE statements computed in
  the database (balance = balance +/- amount), never a read followed by a
  write of an absolute value. Two concurrent operations on the same account
  therefore cannot overwrite each other, and debit() only matches the row
  while the balance still covers the amount. On SQLite the first UPDATE
  takes the database write lock, so the rest of the unit of work is
  serialized against other writers until it commits.

Row locking:
  lock() and lock_many() read with SELECT ... FOR UPDATE, which takes row
  locks on PostgreSQL and is ignored by SQLite. lock_many() always locks in
  ascending id order so two transfers between the same pair of accounts in
  opposite directions cannot deadlock.
"""

from decimal import Decimal

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import MAX_BALANCE
from bankapp.models.account import Account
from bankapp.schemas.account import AccountRecord


class AccountStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, username: str, password_hash: str) -> AccountRecord:
        """Insert a new account with a zero balance and return it with its id."""
        account = Account(
            username=username,
            password_hash=password_hash,
            balance=Decimal("0.00"),
        )
        self._session.add(account)
        # Flush to get the id assigned
        await self._session.flush()
        return AccountRecord.model_validate(account)

    async def get(self, account_id: int) -> AccountRecord | None:
        account = await self._session.get(Account, account_id, populate_existing=True)
        return AccountRecord.model_validate(account) if account else None

    async def find_by_username(self, username: str) -> AccountRecord | None:
        result = await self._session.execute(
            select(Account).where(Account.username == username)
        )
        account = result.scalar_one_or_none()
        return AccountRecord.model_validate(account) if account else None

    async def username_exists(self, username: str) -> bool:
        result = await self._session.execute(
            select(Account.id).where(Account.username == username)
        )
        return result.first() is not None

    async def lock(self, account_id: int) -> AccountRecord | None:
        """Read one account for update. None if it doesn't exist."""
        result = await self._session.execute(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one_or_none()
        return AccountRecord.model_validate(account) if account else None

    async def lock_many(self, *account_ids: int) -> dict[int, AccountRecord]:
        """
        Read several accounts for update, locking in ascending id order.

        Missing ids are simply absent from the returned mapping.
        """
        locked = {}
        for account_id in sorted(set(account_ids)):
            record = await self.lock(account_id)
            if record is not None:
                locked[account_id] = record
        return locked

    async def credit(self, account_id: int, amount: Decimal) -> AccountRecord | None:
        """
        Add amount to the stored balance.

        Returns the updated account, or None when no row changed: the
        account is gone or the new balance would exceed MAX_BALANCE.
        """
        return await self._apply(
            account_id,
            Account.balance + amount,
            Account.balance <= MAX_BALANCE - amount,
        )

    async def debit(self, account_id: int, amount: Decimal) -> AccountRecord | None:
        """
        Subtract amount from the stored balance if it covers the amount.

        Returns the updated account, or None when no row changed: the
        account is gone or its balance is below amount.
        """
        return await self._apply(
            account_id,
            Account.balance - amount,
            Account.balance >= amount,
        )

    async def _apply(self, account_id, new_balance, condition) -> AccountRecord | None:
        result = await self._session.execute(
            update(Account)
            .where(Account.id == account_id, condition)
            .values({Account.balance: new_balance})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self.get(account_id)

    async def delete(self, account_id: int) -> bool:
        """
        Delete the account row only. Its ledger rows must be removed first
        (TransactionStore.delete_for_account).
        """
        result = await self._session.execute(
            delete(Account).where(Account.id == account_id)
        )
        return result.rowcount > 0
