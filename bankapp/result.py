"""
Result type returned by every service operation.

A Result holds either a value or a ServiceError, never both:

    result = await service.withdraw(account, Decimal("30.00"))
    if not result.ok:
        print(result.error.kind, result.error.detail)
    else:
        change = result.value

    change = result.unwrap()   # or raise the matching BankError
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, TypeVar

from bankapp.exceptions import EXCEPTIONS_BY_KIND, BankError, ErrorKind, InsufficientFundsError

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceError:
    """One expected business failure: its kind plus a human-readable detail."""

    kind: ErrorKind
    detail: str
    context: dict[str, Any] = field(default_factory=dict)

    def to_exception(self) -> BankError:
        exc_class = EXCEPTIONS_BY_KIND[self.kind]
        if exc_class is InsufficientFundsError:
            return InsufficientFundsError(
                self.detail,
                requested=self.context.get("requested"),
                available=self.context.get("available"),
            )
        return exc_class(self.detail)


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str, **context: Any) -> "Result[T]":
        return cls(error=ServiceError(kind=kind, detail=detail, context=context))

    def unwrap(self) -> T:
        """Return the value, or raise the BankError matching the failure."""
        if self.error is not None:
            raise self.error.to_exception()
        return self.value


def insufficient_funds(requested: Decimal, available: Decimal) -> Result[Any]:
    return Result.failure(
        ErrorKind.INSUFFICIENT_FUNDS,
        f"Insufficient funds: requested {requested}, available {available}",
        requested=requested,
        available=available,
    )
