"""Service layer: account operations and the authentication adapter."""

from bankapp.services.account_service import AccountService  # noqa: F401
from bankapp.services.auth_service import PrincipalService  # noqa: F401
