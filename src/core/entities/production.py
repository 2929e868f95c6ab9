"""Production run entities."""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from src.core.entities.inventory import StockMovement


class ProductionStatus(str, Enum):
    """Observable states of a production run."""

    PENDING = "pending"
    COMMITTED = "committed"


class ProductionInput(BaseModel):
    """An input consumed by a production run."""

    id: int | None = None
    item_id: int
    quantity: Decimal  # positive, consumed amount
    warehouse_id: int
    unit_cost: Decimal = Decimal("0")

    # Display-only, resolved on read
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None


class ProductionRun(BaseModel):
    """
    Transactional group of movements turning inputs into one output.

    Holds one positive PRODUCTION movement for the output and one negative
    PRODUCTION movement per input, all referencing production_no.
    """

    id: int | None = None
    production_no: str | None = None
    output_item_id: int
    output_quantity: Decimal
    warehouse_id: int
    raw_materials_warehouse_id: int
    production_date: date
    bom_id: int | None = None
    remarks: str | None = None
    output_unit_cost: Decimal = Decimal("0")
    status: ProductionStatus = ProductionStatus.PENDING
    inputs: list[ProductionInput] = Field(default_factory=list)
    movements: list[StockMovement] = Field(default_factory=list)
    output_balance: Decimal | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Display-only, resolved on read
    output_item_code: str | None = None
    output_item_name: str | None = None
    output_uom: str | None = None

    @property
    def total_input_cost(self) -> Decimal:
        return sum((i.quantity * i.unit_cost for i in self.inputs), Decimal("0"))


class ProductionSummary(BaseModel):
    """Aggregate of committed productions for one output item."""

    output_item_id: int
    production_count: int = 0
    total_quantity: Decimal = Decimal("0")
    first_production_date: date | None = None
    last_production_date: date | None = None
