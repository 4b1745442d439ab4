"""
The principal: what the authentication layer sees of a logged-in account.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from bankapp.schemas.transaction import TransactionRecord


class Principal(BaseModel):
    """
    Read-only projection of an account at the moment it was loaded.

    A principal is a snapshot; it is rebuilt on every lookup and never
    updated, so balance and transactions reflect load time only.
    """
    username: str
    password_hash: str = Field(repr=False)
    balance: Decimal
    transactions: tuple[TransactionRecord, ...] = ()
    authorities: tuple[str, ...] = ()

    model_config = {"frozen": True}

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities
