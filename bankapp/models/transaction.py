"""
Transaction model: one immutable ledger entry per balance-affecting event.

  - A deposit creates one "Deposit" row
  - A withdrawal creates one "Withdrawal" row
  - A transfer creates TWO rows: "Transfer Out to <recipient>" on the sender
    and "Transfer In from <sender>" on the recipient, sharing one timestamp

The amount is always a positive magnitude; the direction is carried by the
description label (see bankapp.schemas.transaction.signed_amount).

Rows are append-only. The service never updates or deletes them, except as
the explicit cascade step when the owning account itself is deleted.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bankapp.database import Base, Money, UTCDateTime


DEPOSIT = "Deposit"
WITHDRAWAL = "Withdrawal"
TRANSFER_OUT_PREFIX = "Transfer Out to "
TRANSFER_IN_PREFIX = "Transfer In from "


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        # Amount must always be positive - direction is in the description
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
    )

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        "amount_cents",
        Money,
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Indexed so history queries can sort cheaply
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    # Owning account. Required and never reassigned. No ON DELETE action:
    # ledger rows are only removed by TransactionStore.delete_for_account.
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.id} {self.description!r} {self.amount}>"
