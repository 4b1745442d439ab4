"""
Account model: a user's login identity plus their current balance.

Each account has:
  - A unique username (the login identifier)
  - An opaque password hash (produced by bankapp.security)
  - A balance, exposed as a two-place Decimal and stored as integer cents

Balance management:
  The balance is updated in the same database transaction as the ledger row
  that explains it, so it always equals the signed sum of the account's
  transactions. AccountStore.debit only subtracts when the balance covers the
  amount, and a CHECK constraint keeps it from ever going negative as the
  final safety net.

Ledger ownership:
  Transactions reference their account through transactions.account_id.
  There is no ORM relationship or cascade here: deleting an account deletes
  its ledger rows as an explicit step (see TransactionStore.delete_for_account).
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bankapp.database import Base, Money, UTCDateTime


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_accounts_non_negative_balance",
        ),
    )

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
    )

    # Login identifier - unique and indexed for lookups at login and transfer time
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    balance: Mapped[Decimal] = mapped_column(
        "balance_cents",
        Money,
        nullable=False,
        default=Decimal("0.00"),
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.username!r} balance={self.balance}>"
