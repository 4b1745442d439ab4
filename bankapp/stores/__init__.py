"""
Persistence stores: explicit create/read/update/query access to the two
tables, always scoped to one AsyncSession owned by a UnitOfWork.
"""

from bankapp.stores.account_store import AccountStore  # noqa: F401
from bankapp.stores.transaction_store import TransactionStore  # noqa: F401
