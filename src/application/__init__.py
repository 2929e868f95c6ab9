"""
Application layer.

Use cases that coordinate the ledger services and the DTOs that form the
contract with the API layer.
"""

from src.application.dto import (
    BOMResponse,
    CreateBOMRequest,
    CreateItemRequest,
    CreateWarehouseRequest,
    ErrorResponse,
    ItemResponse,
    ProductionResponse,
    RebuildReportResponse,
    RecordMovementRequest,
    RecordMovementResponse,
    RecordProductionRequest,
    StockBalanceResponse,
    StockMovementResponse,
    TransferResponse,
    TransferStockRequest,
    UpdateBOMRequest,
    WarehouseResponse,
)
from src.application.services import (
    get_bom_registry,
    get_production_orchestrator,
    get_stock_ledger,
    reset_services,
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

__all__ = [
    # Requests
    "CreateItemRequest",
    "CreateWarehouseRequest",
    "RecordMovementRequest",
    "TransferStockRequest",
    "CreateBOMRequest",
    "UpdateBOMRequest",
    "RecordProductionRequest",
    # Responses
    "ErrorResponse",
    "ItemResponse",
    "WarehouseResponse",
    "StockMovementResponse",
    "RecordMovementResponse",
    "StockBalanceResponse",
    "TransferResponse",
    "RebuildReportResponse",
    "BOMResponse",
    "ProductionResponse",
    # Use Cases
    "CreateItemUseCase",
    "CreateWarehouseUseCase",
    "DeleteItemUseCase",
    "RecordMovementUseCase",
    "TransferStockUseCase",
    "RecordProductionUseCase",
    "CreateBOMUseCase",
    "UpdateBOMUseCase",
    "RebuildBalancesUseCase",
    # Service factories
    "get_stock_ledger",
    "get_bom_registry",
    "get_production_orchestrator",
    "reset_services",
]
