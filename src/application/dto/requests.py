"""
Request DTOs for API endpoints.

Quantities and costs are accepted as JSON numbers or decimal strings and
parsed into Decimal.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from src.core.entities.inventory import MovementType

# --- Catalog ---


class CreateItemRequest(BaseModel):
    """Request to create a catalog item."""

    item_code: str = Field(..., min_length=1, max_length=64, description="Unique item code")
    item_name: str = Field(..., min_length=1, description="Item name")
    description: str | None = Field(default=None, description="Free-text description")
    category: str | None = Field(default=None, description="Item category")
    unit_of_measure: str = Field(default="Nos", description="Unit of measure, e.g. Kg, Ltr")
    reorder_level: Decimal = Field(default=Decimal("0"), ge=0)
    standard_cost: Decimal = Field(default=Decimal("0"), ge=0)
    standard_selling_price: Decimal = Field(default=Decimal("0"), ge=0)
    is_raw_material: bool = False
    is_finished_good: bool = False
    is_purchased: bool = True
    is_manufactured: bool = False


class CreateWarehouseRequest(BaseModel):
    """Request to create a warehouse."""

    warehouse_code: str = Field(..., min_length=1, max_length=64)
    warehouse_name: str = Field(..., min_length=1)
    location: str | None = None


# --- Stock ---


class RecordMovementRequest(BaseModel):
    """Request to record a single stock movement."""

    item_id: int = Field(..., description="Item ID")
    warehouse_id: int = Field(..., description="Warehouse ID")
    quantity: Decimal = Field(
        ...,
        description="Signed quantity: positive is stock in, negative is stock out",
    )
    movement_type: MovementType = Field(
        ...,
        description="PURCHASE, SALE or ADJUSTMENT",
    )
    transaction_date: date | None = Field(
        default=None,
        description="Movement date (defaults to today)",
    )
    unit_cost: Decimal | None = Field(
        default=None,
        description="Cost per unit for inward movements (defaults to standard cost)",
    )
    reference_doctype: str | None = Field(default=None, description="Originating document type")
    reference_docno: str | None = Field(default=None, description="Originating document number")
    remarks: str | None = None
    allow_negative: bool = Field(
        default=False,
        description="Permit the balance to go below zero when the policy allows overrides",
    )


class TransferStockRequest(BaseModel):
    """Request to move stock between warehouses."""

    item_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: Decimal = Field(..., description="Quantity to move (positive)")
    transaction_date: date | None = None
    remarks: str | None = None
    allow_negative: bool = False


# --- BOM ---


class BOMLineRequest(BaseModel):
    """One input line of a BOM or a manual production."""

    item_id: int
    quantity: Decimal


class CreateBOMRequest(BaseModel):
    """Request to create a Bill of Materials."""

    bom_name: str = Field(..., min_length=1)
    finished_item_id: int
    quantity: Decimal = Field(default=Decimal("1"), description="Output quantity per batch")
    description: str | None = None
    items: list[BOMLineRequest] = Field(default_factory=list)


class UpdateBOMRequest(BaseModel):
    """Request to edit an unused Bill of Materials."""

    bom_name: str | None = None
    quantity: Decimal | None = None
    description: str | None = None
    is_active: bool | None = None
    items: list[BOMLineRequest] | None = None


# --- Production ---


class RecordProductionRequest(BaseModel):
    """Request to record a production run."""

    output_item_id: int
    output_quantity: Decimal
    warehouse_id: int = Field(..., description="Finished goods warehouse")
    production_date: date | None = None
    bom_id: int | None = Field(default=None, description="Recipe to expand")
    input_items: list[BOMLineRequest] | None = Field(
        default=None,
        description="Explicit inputs when no BOM is used",
    )
    raw_materials_warehouse_id: int | None = Field(
        default=None,
        description="Warehouse inputs are consumed from (defaults to warehouse_id)",
    )
    remarks: str | None = None
    allow_negative: bool = False
