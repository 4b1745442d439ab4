"""
Authentication adapter: turns a stored account into a principal.

An authentication framework only needs a way to look a user up by name and
get back something it can check a password against and read authorities
from. PrincipalService provides exactly that:

  - load_principal_by_username(): the lookup contract (no password check)
  - authenticate(): lookup + password verification, for login

Freshness:
  Principals are never cached. Every call re-reads the account and its
  ledger in one unit of work, so a principal reflects the persisted state at
  the time of the call. Callers that hold a principal across requests should
  load a new one per request instead of trusting the old balance.

Security notes:
  - authenticate() returns the same INVALID_CREDENTIALS error for an unknown
    username and a wrong password, to prevent user enumeration.
  - Neither the plaintext password nor the hash is ever logged.
"""

import logging
from collections.abc import Callable

from bankapp.config import settings
from bankapp.exceptions import ErrorKind
from bankapp.result import Result
from bankapp.schemas.principal import Principal
from bankapp.security import verify_password
from bankapp.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PrincipalService:
    """
    Args:
        uow_factory: Builds a fresh UnitOfWork per lookup.
        verify_password: Checks a plaintext password against a stored hash.
        authorities: Granted to every principal; defaults to DEFAULT_AUTHORITY.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        verify_password: Callable[[str, str], bool] = verify_password,
        authorities: tuple[str, ...] | None = None,
    ):
        self._uow_factory = uow_factory
        self._verify_password = verify_password
        self._authorities = authorities or (settings.DEFAULT_AUTHORITY,)

    async def load_principal_by_username(self, username: str) -> Result[Principal]:
        """
        Build a principal for a username.

        Fails with PRINCIPAL_NOT_FOUND when no account has that username.
        """
        async with self._uow_factory() as uow:
            account = await uow.accounts.find_by_username(username)
            if account is None:
                return Result.failure(
                    ErrorKind.PRINCIPAL_NOT_FOUND, "Username or Password not found"
                )
            transactions = await uow.transactions.list_for_account(account.id)

        return Result.success(
            Principal(
                username=account.username,
                password_hash=account.password_hash,
                balance=account.balance,
                transactions=tuple(transactions),
                authorities=self._authorities,
            )
        )

    async def authenticate(self, username: str, password: str) -> Result[Principal]:
        """
        Verify a username/password pair and return a fresh principal.

        Fails with INVALID_CREDENTIALS whether the username is unknown or the
        password is wrong.
        """
        result = await self.load_principal_by_username(username)
        if not result.ok or not self._verify_password(password, result.value.password_hash):
            logger.info("Failed login for %r", username)
            return Result.failure(ErrorKind.INVALID_CREDENTIALS, "Invalid username or password")

        logger.info("Successful login for %r", username)
        return result
