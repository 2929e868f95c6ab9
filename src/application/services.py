"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
from src.core.services import BOMRegistry, ProductionOrchestrator, StockLedger

if TYPE_CHECKING:
    from src.core.interfaces import IBOMStore, ICatalogStore, ILedgerStore


# Singleton service instances
_stock_ledger: StockLedger | None = None
_bom_registry: BOMRegistry | None = None
_production_orchestrator: ProductionOrchestrator | None = None


async def get_stock_ledger(
    ledger_store: "ILedgerStore | None" = None,
    catalog_store: "ICatalogStore | None" = None,
) -> StockLedger:
    """
    Get or create the StockLedger.

    Creates SQLite stores if not provided. Overrides bypass the singleton.
    """
    global _stock_ledger

    overridden = ledger_store is not None or catalog_store is not None
    if _stock_ledger is not None and not overridden:
        return _stock_ledger

    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.storage.sqlite import get_catalog_store, get_ledger_store

    service = StockLedger(
        ledger_store=ledger_store or await get_ledger_store(),
        catalog_store=catalog_store or await get_catalog_store(),
        settings=get_settings().ledger,
    )

    if not overridden:
        _stock_ledger = service

    return service


async def get_bom_registry(
    bom_store: "IBOMStore | None" = None,
    catalog_store: "ICatalogStore | None" = None,
    ledger_store: "ILedgerStore | None" = None,
) -> BOMRegistry:
    """Get or create the BOMRegistry."""
    global _bom_registry

    overridden = any(s is not None for s in (bom_store, catalog_store, ledger_store))
    if _bom_registry is not None and not overridden:
        return _bom_registry

    from src.infrastructure.storage.sqlite import (
        get_bom_store,
        get_catalog_store,
        get_ledger_store,
    )

    service = BOMRegistry(
        bom_store=bom_store or await get_bom_store(),
        catalog_store=catalog_store or await get_catalog_store(),
        ledger_store=ledger_store or await get_ledger_store(),
        settings=get_settings().ledger,
    )

    if not overridden:
        _bom_registry = service

    return service


async def get_production_orchestrator() -> ProductionOrchestrator:
    """Get or create the ProductionOrchestrator over the default stores."""
    global _production_orchestrator

    if _production_orchestrator is not None:
        return _production_orchestrator

    from src.infrastructure.storage.sqlite import get_catalog_store

    _production_orchestrator = ProductionOrchestrator(
        ledger=await get_stock_ledger(),
        bom_registry=await get_bom_registry(),
        catalog_store=await get_catalog_store(),
    )
    return _production_orchestrator


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _stock_ledger, _bom_registry, _production_orchestrator
    _stock_ledger = None
    _bom_registry = None
    _production_orchestrator = None
