"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table
before create_all runs.
"""

from bankapp.models.account import Account  # noqa: F401
from bankapp.models.transaction import Transaction  # noqa: F401
