"""
Pydantic snapshots for ledger entries and the receipts returned by
balance-changing operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from bankapp.models.transaction import (
    DEPOSIT,
    TRANSFER_IN_PREFIX,
    TRANSFER_OUT_PREFIX,
    WITHDRAWAL,
)
from bankapp.schemas.account import AccountRecord


class TransactionRecord(BaseModel):
    """Owned copy of a transactions row. The amount is always positive."""
    id: int
    account_id: int
    amount: Decimal
    description: str
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


class BalanceChange(BaseModel):
    """Result of a deposit or withdrawal: the updated account and its new ledger row."""
    account: AccountRecord
    transaction: TransactionRecord

    model_config = {"frozen": True}


class TransferReceipt(BaseModel):
    """Result of a transfer: both updated accounts and both ledger rows."""
    from_account: AccountRecord
    to_account: AccountRecord
    debit: TransactionRecord
    credit: TransactionRecord

    model_config = {"frozen": True}

    @property
    def amount(self) -> Decimal:
        return self.debit.amount


def signed_amount(transaction: TransactionRecord) -> Decimal:
    """
    The amount with its direction applied: money in is positive, money out
    is negative.

    Raises:
        ValueError: If the description is not one the service writes.
    """
    description = transaction.description
    if description == DEPOSIT or description.startswith(TRANSFER_IN_PREFIX):
        return transaction.amount
    if description == WITHDRAWAL or description.startswith(TRANSFER_OUT_PREFIX):
        return -transaction.amount
    raise ValueError(f"Unknown transaction description: {description!r}")
