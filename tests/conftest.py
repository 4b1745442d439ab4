"""
Test fixtures for the bankapp test suite.

  - db_engine / session_factory: Fresh in-memory SQLite database per test
  - uow_factory: Builds UnitOfWork instances bound to the test database
  - service / principal_service: The services wired to the test database
  - alice / bob: Pre-registered accounts with zero balance

In-memory SQLite lives on a single connection, so the engine uses a
StaticPool: every session (and every UnitOfWork) sees the same database,
and a rollback in one is visible to the next.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bankapp.database import Base, create_tables, dispose_engine
from bankapp.services.account_service import AccountService
from bankapp.services.auth_service import PrincipalService
from bankapp.unit_of_work import UnitOfWork


TEST_DATABASE_URL = "sqlite+aiosqlite://"

ALICE_PASSWORD = "AlicePass123!"
BOB_PASSWORD = "BobPass456!"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_tables(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await dispose_engine(engine)


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def uow_factory(session_factory):
    return lambda: UnitOfWork(session_factory)


@pytest.fixture
def service(uow_factory):
    return AccountService(uow_factory=uow_factory)


@pytest.fixture
def principal_service(uow_factory):
    return PrincipalService(uow_factory=uow_factory)


@pytest_asyncio.fixture
async def alice(service):
    result = await service.register_account("alice", ALICE_PASSWORD)
    assert result.ok, result.error
    return result.value


@pytest_asyncio.fixture
async def bob(service):
    result = await service.register_account("bob", BOB_PASSWORD)
    assert result.ok, result.error
    return result.value


@pytest_asyncio.fixture
async def funded_alice(service, alice):
    """alice with 100.00 deposited."""
    result = await service.deposit(alice, Decimal("100.00"))
    assert result.ok, result.error
    return result.value.account
