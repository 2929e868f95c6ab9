"""Core domain entities."""

from src.core.entities.bom import BOM, BOMLine, Requirement
from src.core.entities.catalog import Item, Warehouse
from src.core.entities.inventory import (
    BalanceMismatch,
    MovementFilters,
    MovementType,
    RebuildReport,
    StockBalance,
    StockMovement,
)
from src.core.entities.production import (
    ProductionInput,
    ProductionRun,
    ProductionStatus,
    ProductionSummary,
)

__all__ = [
    # Catalog
    "Item",
    "Warehouse",
    # Inventory
    "MovementType",
    "StockMovement",
    "StockBalance",
    "MovementFilters",
    "BalanceMismatch",
    "RebuildReport",
    # BOM
    "BOM",
    "BOMLine",
    "Requirement",
    # Production
    "ProductionStatus",
    "ProductionInput",
    "ProductionRun",
    "ProductionSummary",
]
