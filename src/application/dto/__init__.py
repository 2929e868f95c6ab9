"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    BOMLineRequest,
    CreateBOMRequest,
    CreateItemRequest,
    CreateWarehouseRequest,
    RecordMovementRequest,
    RecordProductionRequest,
    TransferStockRequest,
    UpdateBOMRequest,
)
from src.application.dto.responses import (
    BalanceMismatchResponse,
    BOMExpansionResponse,
    BOMLineResponse,
    BOMResponse,
    ErrorResponse,
    HealthResponse,
    ItemDetailResponse,
    ItemResponse,
    ProductionInputResponse,
    ProductionResponse,
    ProductionSummaryResponse,
    ProviderHealthResponse,
    RebuildReportResponse,
    RecordMovementResponse,
    RequirementResponse,
    StockBalanceResponse,
    StockMovementResponse,
    TransferResponse,
    WarehouseResponse,
    WarehouseStockResponse,
)

__all__ = [
    # Requests
    "CreateItemRequest",
    "CreateWarehouseRequest",
    "RecordMovementRequest",
    "TransferStockRequest",
    "BOMLineRequest",
    "CreateBOMRequest",
    "UpdateBOMRequest",
    "RecordProductionRequest",
    # Responses
    "ErrorResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ItemResponse",
    "ItemDetailResponse",
    "WarehouseResponse",
    "WarehouseStockResponse",
    "StockMovementResponse",
    "RecordMovementResponse",
    "StockBalanceResponse",
    "TransferResponse",
    "BalanceMismatchResponse",
    "RebuildReportResponse",
    "BOMLineResponse",
    "BOMResponse",
    "RequirementResponse",
    "BOMExpansionResponse",
    "ProductionInputResponse",
    "ProductionResponse",
    "ProductionSummaryResponse",
]
