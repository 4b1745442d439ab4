"""
Transaction store: the append-only ledger table.

The only non-trivial query is "all transactions for one account". It is
sorted explicitly by (created_at, id) so callers see a stable order on every
backend instead of whatever the engine happens to return.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import as_utc
from bankapp.models.transaction import Transaction
from bankapp.schemas.transaction import TransactionRecord


class TransactionStore:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(
        self,
        account_id: int,
        amount: Decimal,
        description: str,
        timestamp: datetime,
    ) -> TransactionRecord:
        """Insert one ledger row and return it with its id and a UTC timestamp."""
        txn = Transaction(
            account_id=account_id,
            amount=amount,
            description=description,
            created_at=as_utc(timestamp),
        )
        self._session.add(txn)
        await self._session.flush()
        return TransactionRecord.model_validate(txn)

    async def list_for_account(
        self,
        account_id: int,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TransactionRecord]:
        """
        List an account's transactions, oldest first.

        Args:
            account_id: The owning account.
            limit: Max number of results (None for all).
            offset: Number of results to skip (for pagination).
        """
        query = (
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.created_at.asc(), Transaction.id.asc())
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self._session.execute(query)
        return [TransactionRecord.model_validate(txn) for txn in result.scalars().all()]

    async def delete_for_account(self, account_id: int) -> int:
        """
        Delete every ledger row of an account. Only used as the explicit
        cascade step when the account itself is deleted.

        Returns:
            The number of rows removed.
        """
        result = await self._session.execute(
            delete(Transaction).where(Transaction.account_id == account_id)
        )
        return result.rowcount
