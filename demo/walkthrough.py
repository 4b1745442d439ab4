#!/usr/bin/env python3
"""
Demo walkthrough: runs the basic banking flow against a database.

!! NOT FOR PRODUCTION !!
Creates two users with known passwords. Intended only for local demos.

Usage:
    # Uses DATABASE_URL from the environment / .env (default: ./data/bank.db)
    python demo/walkthrough.py

    # Throwaway in-memory database:
    python demo/walkthrough.py --database-url "sqlite+aiosqlite://"

Flow:
    register alice and bob -> alice deposits 100.00 -> withdraws 30.00
    -> transfers 20.00 to bob -> print balances and histories
"""

import argparse
import asyncio
import logging
from decimal import Decimal
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from bankapp.config import settings
from bankapp.database import create_tables, dispose_engine
from bankapp.logging_config import setup_logging
from bankapp.services.account_service import AccountService
from bankapp.services.auth_service import PrincipalService
from bankapp.unit_of_work import UnitOfWork

logger = logging.getLogger("bankapp.demo")

USERS = {
    "alice": "AliceDemo123!",
    "bob": "BobDemo123!",
}


async def get_or_register(service: AccountService, username: str, password: str):
    found = await service.find_account_by_username(username)
    if found.ok:
        return found.value
    return (await service.register_account(username, password)).unwrap()


async def print_account(service: AccountService, account) -> None:
    account = (await service.get_account(account.id)).unwrap()
    print(f"\n{account.username}: balance {account.balance}")
    for txn in (await service.get_transaction_history(account)).unwrap():
        print(f"  {txn.created_at:%Y-%m-%d %H:%M:%S}  {txn.amount:>10}  {txn.description}")


async def main(database_url: str) -> None:
    if database_url.startswith("sqlite") and ":///" in database_url:
        Path(database_url.split(":///", 1)[1]).parent.mkdir(parents=True, exist_ok=True)

    logger.info("%s %s demo against %s", settings.APP_NAME, settings.APP_VERSION, database_url)
    engine = create_async_engine(database_url, echo=settings.DEBUG)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        await create_tables(engine)

        service = AccountService(uow_factory=lambda: UnitOfWork(session_factory))
        principals = PrincipalService(uow_factory=lambda: UnitOfWork(session_factory))

        alice = await get_or_register(service, "alice", USERS["alice"])
        bob = await get_or_register(service, "bob", USERS["bob"])

        (await service.deposit(alice, Decimal("100.00"))).unwrap()
        (await service.withdraw(alice, Decimal("30.00"))).unwrap()
        receipt = (await service.transfer_amount(alice, "bob", Decimal("20.00"))).unwrap()
        logger.info("Transfer done: alice %s, bob %s",
                    receipt.from_account.balance, receipt.to_account.balance)

        # A failing transfer, to show the error path
        failed = await service.transfer_amount(bob, "carol", Decimal("5.00"))
        print(f"Transfer to carol: {failed.error.kind.value} ({failed.error.detail})")

        await print_account(service, alice)
        await print_account(service, bob)

        principal = (await principals.authenticate("alice", USERS["alice"])).unwrap()
        print(f"\nLogged in as {principal.username} with authorities {list(principal.authorities)}")
    finally:
        await dispose_engine(engine)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=f"Run the {settings.APP_NAME} demo flow")
    parser.add_argument(
        "--version", action="version", version=f"{settings.APP_NAME} {settings.APP_VERSION}"
    )
    parser.add_argument(
        "--database-url",
        default=settings.DATABASE_URL,
        help=f"SQLAlchemy async URL (default: {settings.DATABASE_URL})",
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(main(args.database_url))
