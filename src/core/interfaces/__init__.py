"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.bom_store import IBOMStore
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.interfaces.ledger_store import ILedgerSession, ILedgerStore

__all__ = [
    "ICatalogStore",
    "IBOMStore",
    "ILedgerStore",
    "ILedgerSession",
]
