"""
Response DTOs for API endpoints.

Decimal fields serialize as strings in JSON.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ProviderHealthResponse(BaseModel):
    """Health status of a backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | dict | list | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


# --- Catalog ---


class ItemResponse(BaseModel):
    """Catalog item response."""

    id: int
    item_code: str
    item_name: str
    description: str | None = None
    category: str | None = None
    unit_of_measure: str
    reorder_level: Decimal
    standard_cost: Decimal
    standard_selling_price: Decimal
    is_raw_material: bool
    is_finished_good: bool
    is_purchased: bool
    is_manufactured: bool
    current_stock: Decimal
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime


class WarehouseStockResponse(BaseModel):
    """An item's stock in one warehouse."""

    warehouse_id: int
    quantity: Decimal
    avg_cost: Decimal
    total_value: Decimal


class ItemDetailResponse(ItemResponse):
    """Catalog item with stock by warehouse."""

    stock_by_warehouse: list[WarehouseStockResponse] = Field(default_factory=list)


class WarehouseResponse(BaseModel):
    """Warehouse response."""

    id: int
    warehouse_code: str
    warehouse_name: str
    location: str | None = None
    created_at: datetime


# --- Stock ---


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    movement_no: str
    item_id: int
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None
    warehouse_id: int
    warehouse_code: str | None = None
    warehouse_name: str | None = None
    movement_type: str
    quantity: Decimal
    unit_cost: Decimal
    value: Decimal
    reference_doctype: str | None = None
    reference_docno: str | None = None
    remarks: str | None = None
    movement_date: date
    created_at: datetime


class RecordMovementResponse(StockMovementResponse):
    """Recorded movement with the resulting pair balance."""

    balance_after: Decimal
    avg_cost_after: Decimal


class StockBalanceResponse(BaseModel):
    """Balance for one (item, warehouse) pair."""

    item_id: int
    warehouse_id: int
    quantity: Decimal
    avg_cost: Decimal
    total_value: Decimal
    last_movement_date: date | None = None


class TransferResponse(BaseModel):
    """Both legs of a transfer."""

    reference: str
    outgoing: StockMovementResponse
    incoming: StockMovementResponse
    source_balance: Decimal
    destination_balance: Decimal


class BalanceMismatchResponse(BaseModel):
    """Cached balance that disagrees with the replayed log."""

    item_id: int
    warehouse_id: int
    cached_quantity: Decimal | None = None
    replayed_quantity: Decimal | None = None
    cached_avg_cost: Decimal | None = None
    replayed_avg_cost: Decimal | None = None


class RebuildReportResponse(BaseModel):
    """Result of a rebuild or reconcile run."""

    movements_replayed: int
    pairs: int
    consistent: bool
    applied: bool
    mismatches: list[BalanceMismatchResponse]


# --- BOM ---


class BOMLineResponse(BaseModel):
    """BOM input line."""

    id: int | None = None
    item_id: int
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None
    quantity: Decimal
    current_stock: Decimal | None = None


class BOMResponse(BaseModel):
    """Bill of Materials response."""

    id: int
    bom_no: str
    bom_name: str
    finished_item_id: int
    finished_item_code: str | None = None
    finished_item_name: str | None = None
    finished_uom: str | None = None
    quantity: Decimal
    description: str | None = None
    is_active: bool
    items: list[BOMLineResponse]
    created_at: datetime
    updated_at: datetime


class RequirementResponse(BaseModel):
    """Scaled input requirement."""

    item_id: int
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None
    required: Decimal


class BOMExpansionResponse(BaseModel):
    """BOM scaled to a desired output quantity."""

    bom_id: int
    bom_no: str
    finished_item_id: int
    desired_quantity: Decimal
    requirements: list[RequirementResponse]


# --- Production ---


class ProductionInputResponse(BaseModel):
    """Consumed input of a production run."""

    item_id: int
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None
    warehouse_id: int
    quantity: Decimal
    unit_cost: Decimal


class ProductionResponse(BaseModel):
    """Production run response."""

    id: int
    production_no: str
    status: str
    output_item_id: int
    output_item_code: str | None = None
    output_item_name: str | None = None
    output_uom: str | None = None
    output_quantity: Decimal
    output_unit_cost: Decimal
    output_balance: Decimal | None = None
    warehouse_id: int
    raw_materials_warehouse_id: int
    bom_id: int | None = None
    production_date: date
    remarks: str | None = None
    inputs: list[ProductionInputResponse]
    movements: list[StockMovementResponse] = Field(default_factory=list)
    created_at: datetime


class ProductionSummaryResponse(BaseModel):
    """Aggregate of production runs for one output item."""

    output_item_id: int
    production_count: int
    total_quantity: Decimal
    first_production_date: date | None = None
    last_production_date: date | None = None
