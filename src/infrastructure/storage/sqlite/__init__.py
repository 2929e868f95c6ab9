"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.bom_store import SQLiteBOMStore
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.ledger_store import (
    SQLiteLedgerSession,
    SQLiteLedgerStore,
)

# Type aliases for convenience
CatalogStore = SQLiteCatalogStore
LedgerStore = SQLiteLedgerStore
BOMStore = SQLiteBOMStore

# Singleton instances
_catalog_store: SQLiteCatalogStore | None = None
_ledger_store: SQLiteLedgerStore | None = None
_bom_store: SQLiteBOMStore | None = None


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_bom_store() -> SQLiteBOMStore:
    """Get singleton BOM store instance."""
    global _bom_store
    if _bom_store is None:
        _bom_store = SQLiteBOMStore()
    return _bom_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteCatalogStore",
    "SQLiteLedgerStore",
    "SQLiteLedgerSession",
    "SQLiteBOMStore",
    # Type aliases
    "CatalogStore",
    "LedgerStore",
    "BOMStore",
    # Factory functions
    "get_catalog_store",
    "get_ledger_store",
    "get_bom_store",
]
