"""
Pydantic snapshots for accounts.

All amounts are two-place Decimals (e.g. Decimal("10.50")).
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class AccountRecord(BaseModel):
    """Owned copy of an accounts row."""
    id: int
    username: str
    password_hash: str = Field(repr=False)
    balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


class BalanceCheck(BaseModel):
    """
    Stored balance versus the balance recomputed from the ledger.

    A mismatch signals a data integrity problem.
    """
    account_id: int
    balance: Decimal
    computed_balance: Decimal
    match: bool

    model_config = {"frozen": True}
