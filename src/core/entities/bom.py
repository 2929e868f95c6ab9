"""Bill of Materials entities."""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class BOMLine(BaseModel):
    """One input of a recipe; quantity is per batch of the BOM's output quantity."""

    id: int | None = None
    item_id: int
    quantity: Decimal

    # Display-only, resolved on read
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None
    current_stock: Decimal | None = None


class BOM(BaseModel):
    """A recipe yielding `quantity` units of one finished item."""

    id: int | None = None
    bom_no: str | None = None
    bom_name: str
    finished_item_id: int
    quantity: Decimal = Decimal("1")
    description: str | None = None
    is_active: bool = True
    lines: list[BOMLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Display-only, resolved on read
    finished_item_code: str | None = None
    finished_item_name: str | None = None
    finished_uom: str | None = None


class Requirement(BaseModel):
    """A scaled input requirement produced by BOM expansion."""

    item_id: int
    quantity: Decimal
