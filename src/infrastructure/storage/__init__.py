"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteBOMStore,
    SQLiteCatalogStore,
    SQLiteLedgerStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteCatalogStore",
    "SQLiteLedgerStore",
    "SQLiteBOMStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
