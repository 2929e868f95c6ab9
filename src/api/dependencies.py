"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from src.application.services import (
    get_bom_registry,
    get_production_orchestrator,
    get_stock_ledger,
)
from src.application.use_cases import (
    CreateBOMUseCase,
    CreateItemUseCase,
    CreateWarehouseUseCase,
    DeleteItemUseCase,
    RebuildBalancesUseCase,
    RecordMovementUseCase,
    RecordProductionUseCase,
    TransferStockUseCase,
    UpdateBOMUseCase,
)
from src.config import Settings, get_settings
from src.core.services import BOMRegistry, ProductionOrchestrator, StockLedger
from src.infrastructure.storage.sqlite import SQLiteCatalogStore, get_catalog_store


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
async def get_ledger() -> StockLedger:
    """Get stock ledger service."""
    return await get_stock_ledger()


async def get_boms() -> BOMRegistry:
    """Get BOM registry service."""
    return await get_bom_registry()


async def get_orchestrator() -> ProductionOrchestrator:
    """Get production orchestrator."""
    return await get_production_orchestrator()


# Store dependencies
async def get_catalog() -> SQLiteCatalogStore:
    """Get item and warehouse catalog store."""
    return await get_catalog_store()


# Catalog use case dependencies
def get_create_item_use_case() -> CreateItemUseCase:
    """Get create item use case."""
    return CreateItemUseCase()


def get_delete_item_use_case() -> DeleteItemUseCase:
    """Get delete item use case."""
    return DeleteItemUseCase()


def get_create_warehouse_use_case() -> CreateWarehouseUseCase:
    """Get create warehouse use case."""
    return CreateWarehouseUseCase()


# Stock use case dependencies
def get_record_movement_use_case() -> RecordMovementUseCase:
    """Get record movement use case."""
    return RecordMovementUseCase()


def get_transfer_stock_use_case() -> TransferStockUseCase:
    """Get transfer stock use case."""
    return TransferStockUseCase()


def get_rebuild_balances_use_case() -> RebuildBalancesUseCase:
    """Get rebuild balances use case."""
    return RebuildBalancesUseCase()


# BOM use case dependencies
def get_create_bom_use_case() -> CreateBOMUseCase:
    """Get create BOM use case."""
    return CreateBOMUseCase()


def get_update_bom_use_case() -> UpdateBOMUseCase:
    """Get update BOM use case."""
    return UpdateBOMUseCase()


# Production use case dependency
def get_record_production_use_case() -> RecordProductionUseCase:
    """Get record production use case."""
    return RecordProductionUseCase()
