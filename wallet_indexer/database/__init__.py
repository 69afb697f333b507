"""
Storage layer: watched addresses and indexed transactions.

SQLAlchemy (asyncio) over SQLite by default; PostgreSQL via DATABASE_URL.
All access goes through AddressRepository / TransactionRepository over one
shared Database handle.
"""

from wallet_indexer.database.connection import Database
from wallet_indexer.database.models import (
    SUPPORTED_CHAINS,
    Address,
    AddressSource,
    Chain,
    CollectSummary,
    IndexSummary,
    Network,
    Transaction,
    TransactionDirection,
    TransactionPage,
)
from wallet_indexer.database.repositories import (
    AddressRepository,
    TransactionRepository,
    parse_cursor,
)

__all__ = [
    "SUPPORTED_CHAINS",
    "Address",
    "AddressRepository",
    "AddressSource",
    "Chain",
    "CollectSummary",
    "Database",
    "IndexSummary",
    "Network",
    "Transaction",
    "TransactionDirection",
    "TransactionPage",
    "TransactionRepository",
    "parse_cursor",
]
