"""
bankapp: a minimal banking core.

User accounts with password-protected login, deposits, withdrawals,
transfers between accounts and transaction history, on top of async
SQLAlchemy.
"""

__version__ = "0.1.0"
