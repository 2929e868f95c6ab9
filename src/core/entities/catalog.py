"""
Item catalog entities.

Items and warehouses are reference data: the ledger reads them and never
writes back, apart from the derived stock figures attached on read.
"""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class Item(BaseModel):
    """A stock-keeping item."""

    id: int | None = None
    item_code: str
    item_name: str
    description: str | None = None
    category: str | None = None
    unit_of_measure: str = "Nos"
    reorder_level: Decimal = Decimal("0")
    standard_cost: Decimal = Decimal("0")
    standard_selling_price: Decimal = Decimal("0")
    is_raw_material: bool = False
    is_finished_good: bool = False
    is_purchased: bool = True
    is_manufactured: bool = False
    is_active: bool = True
    current_stock: Decimal = Decimal("0")  # derived: sum over warehouses
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_low_stock(self) -> bool:
        return self.reorder_level > 0 and self.current_stock <= self.reorder_level


class Warehouse(BaseModel):
    """A physical stock location."""

    id: int | None = None
    warehouse_code: str
    warehouse_name: str
    location: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
