"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.bom_registry import BOMRegistry, scale_requirements
from src.core.services.costing import apply_movement, outward_unit_cost, replay
from src.core.services.production import ProductionOrchestrator
from src.core.services.quantities import format_document_no, quantize, to_decimal, within_range
from src.core.services.stock_ledger import (
    MovementLog,
    PostResult,
    StockLedger,
    TransferResult,
)

__all__ = [
    # Stock Ledger
    "StockLedger",
    "MovementLog",
    "PostResult",
    "TransferResult",
    # Costing
    "apply_movement",
    "outward_unit_cost",
    "replay",
    # BOM Registry
    "BOMRegistry",
    "scale_requirements",
    # Production
    "ProductionOrchestrator",
    # Quantities
    "to_decimal",
    "quantize",
    "within_range",
    "format_document_no",
]
