"""
Unit of work: one database transaction shared by both stores.

    async with UnitOfWork() as uow:
        account = await uow.accounts.lock(account_id)
        await uow.accounts.credit(account.id, amount)
        await uow.transactions.append(account.id, amount, "Deposit", now)

Leaving the block normally commits; leaving it with an exception rolls back
every statement issued inside it, then re-raises. This is what makes the
multi-row service operations all-or-nothing.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bankapp.database import AsyncSessionLocal
from bankapp.stores.account_store import AccountStore
from bankapp.stores.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class UnitOfWork:
    accounts: AccountStore
    transactions: TransactionStore

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self.accounts = AccountStore(self._session)
        self.transactions = TransactionStore(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self._session.commit()
            else:
                logger.warning("Rolling back unit of work after %s", exc_type.__name__)
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None

    async def rollback(self) -> None:
        """Discard everything issued so far; the block may keep going."""
        await self._session.rollback()
