"""Application use cases."""

from src.application.use_cases.manage_bom import CreateBOMUseCase, UpdateBOMUseCase
from src.application.use_cases.manage_catalog import (
    CreateItemUseCase,
    CreateWarehouseUseCase,
    DeleteItemUseCase,
)
from src.application.use_cases.rebuild_balances import RebuildBalancesUseCase
from src.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
)
from src.application.use_cases.record_production import RecordProductionUseCase
from src.application.use_cases.transfer_stock import TransferStockUseCase

__all__ = [
    "CreateItemUseCase",
    "CreateWarehouseUseCase",
    "DeleteItemUseCase",
    "RecordMovementUseCase",
    "RecordMovementResult",
    "TransferStockUseCase",
    "RecordProductionUseCase",
    "CreateBOMUseCase",
    "UpdateBOMUseCase",
    "RebuildBalancesUseCase",
]
