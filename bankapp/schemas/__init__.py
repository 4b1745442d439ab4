"""
Pydantic snapshots handed out by the stores and services.

These are owned, frozen copies of persisted rows. Mutating one has no effect
on the database; every change goes through a service operation.
"""

from bankapp.schemas.account import AccountRecord, BalanceCheck  # noqa: F401
from bankapp.schemas.transaction import (  # noqa: F401
    BalanceChange,
    TransactionRecord,
    TransferReceipt,
    signed_amount,
)
from bankapp.schemas.principal import Principal  # noqa: F401
