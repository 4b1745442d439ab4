"""
Database engine, session factory, base model class and custom column types.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - Money: Column type storing Decimal amounts as integer cents
  - UTCDateTime: Column type that always hands back timezone-aware UTC
  - create_tables() / dispose_engine(): bootstrap and shutdown helpers

Sessions are not handed out directly; the service layer opens one per
operation through bankapp.unit_of_work.UnitOfWork, which commits on success
and rolls back on any exception.

Why integer cents?
  Amounts enter and leave the system as two-place Decimals, but the column
  holds an integer number of cents. SQLite has no native decimal type, and
  integer arithmetic in the CHECK constraints is exact on every backend.
  The column is a signed 64-bit integer, so no amount or balance can exceed
  MAX_BALANCE.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from bankapp.config import settings

CENT = Decimal("0.01")

# Largest value a BigInteger cents column can hold
MAX_CENTS = 2**63 - 1
MAX_BALANCE = Decimal(MAX_CENTS).scaleb(-2)


# echo=True in debug mode logs all SQL statements.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False keeps attributes readable after commit; in async
# context a lazy refresh would otherwise fail.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


class Money(TypeDecorator):
    """
    A Decimal amount persisted as an integer number of cents.

    Values must already be quantized to two places and fit the column;
    anything else is a bug in the caller and raises instead of being
    silently rounded or overflowing in the driver.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        cents = Decimal(value) * 100
        if cents != cents.to_integral_value():
            raise ValueError(f"Amount {value} has more than two decimal places")
        if abs(cents) > MAX_CENTS:
            raise ValueError(f"Amount {value} exceeds the maximum of {MAX_BALANCE}")
        return int(cents)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(value) / 100).quantize(CENT)


def as_utc(value: datetime) -> datetime:
    """Normalize a timestamp to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    A timestamp stored in UTC and always read back timezone-aware.

    SQLite keeps no offset, so without this a row written with an aware
    datetime would come back naive.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """
    Create all tables that don't exist yet.

    A convenience for development and the demo; a deployed schema would be
    managed by migrations instead.
    """
    # Register every model on Base.metadata before create_all
    import bankapp.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(bind: AsyncEngine = engine) -> None:
    """Close all pooled connections."""
    await bind.dispose()
