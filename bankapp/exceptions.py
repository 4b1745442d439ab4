"""
Error kinds and the exception hierarchy for the banking core.

Expected business failures (a duplicate username, an overdraft, ...) are not
raised by the service layer. They come back inside a Result carrying one of
the ErrorKind values below, so callers have to look at them. Anything else
(a lost database connection, a constraint violated by a bug) still raises,
and the unit of work rolls back.

The exception classes exist for callers that would rather have an exception:
Result.unwrap() raises the class registered for the error's kind.

Exception hierarchy:
    BankError (base)
    ├── DuplicateUsernameError   : registering a username that is taken
    ├── InvalidUsernameError     : registering an empty username
    ├── AccountNotFoundError     : lookup of an unknown username or id
    ├── RecipientNotFoundError   : transfer to an unknown username
    ├── InvalidRecipientError    : transfer to oneself
    ├── InvalidAmountError       : non-positive or sub-cent amount
    ├── InsufficientFundsError   : withdrawal/transfer above the balance
    ├── PrincipalNotFoundError   : login lookup of an unknown username
    └── InvalidCredentialsError  : wrong username or password
"""

import enum
from decimal import Decimal


class ErrorKind(str, enum.Enum):
    """
    The enumerated business failures a service call can return.

    Inherits from str so the value logs and serializes as a plain string.
    """
    DUPLICATE_USERNAME = "duplicate_username"
    INVALID_USERNAME = "invalid_username"
    ACCOUNT_NOT_FOUND = "account_not_found"
    RECIPIENT_NOT_FOUND = "recipient_not_found"
    INVALID_RECIPIENT = "invalid_recipient"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PRINCIPAL_NOT_FOUND = "principal_not_found"
    INVALID_CREDENTIALS = "invalid_credentials"


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankError(Exception):
    """Base exception for all banking domain errors."""

    kind: ErrorKind

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class DuplicateUsernameError(BankError):
    kind = ErrorKind.DUPLICATE_USERNAME


class InvalidUsernameError(BankError):
    kind = ErrorKind.INVALID_USERNAME


class AccountNotFoundError(BankError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND


class RecipientNotFoundError(BankError):
    kind = ErrorKind.RECIPIENT_NOT_FOUND


class InvalidRecipientError(BankError):
    kind = ErrorKind.INVALID_RECIPIENT


class InvalidAmountError(BankError):
    kind = ErrorKind.INVALID_AMOUNT


class InsufficientFundsError(BankError):
    """
    Raised when a withdrawal or transfer exceeds the current balance.

    Attributes:
        requested: The amount the caller tried to move.
        available: The balance at the time of the check.
    """

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(
        self,
        detail: str = "Insufficient funds",
        requested: Decimal | None = None,
        available: Decimal | None = None,
    ):
        self.requested = requested
        self.available = available
        super().__init__(detail)


class PrincipalNotFoundError(BankError):
    kind = ErrorKind.PRINCIPAL_NOT_FOUND


class InvalidCredentialsError(BankError):
    kind = ErrorKind.INVALID_CREDENTIALS


EXCEPTIONS_BY_KIND: dict[ErrorKind, type[BankError]] = {
    cls.kind: cls
    for cls in (
        DuplicateUsernameError,
        InvalidUsernameError,
        AccountNotFoundError,
        RecipientNotFoundError,
        InvalidRecipientError,
        InvalidAmountError,
        InsufficientFundsError,
        PrincipalNotFoundError,
        InvalidCredentialsError,
    )
}
