"""Inventory ledger domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class MovementType(str, Enum):
    """Types of stock movements."""

    PURCHASE = "PURCHASE"
    SALE = "SALE"
    PRODUCTION = "PRODUCTION"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"


class StockMovement(BaseModel):
    """
    One immutable signed quantity change for an (item, warehouse) pair.

    Positive quantity is stock in, negative is stock out.
    """

    id: int | None = None
    movement_no: str | None = None  # assigned when recorded
    item_id: int
    warehouse_id: int
    movement_type: MovementType
    quantity: Decimal
    unit_cost: Decimal = Decimal("0")
    reference_doctype: str | None = None  # e.g. "Production", "Purchase"
    reference_docno: str | None = None  # e.g. "PROD-2026-0001"
    remarks: str | None = None
    movement_date: date = Field(default_factory=date.today)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Display-only, resolved on read
    item_code: str | None = None
    item_name: str | None = None
    unit_of_measure: str | None = None
    warehouse_code: str | None = None
    warehouse_name: str | None = None

    @property
    def is_inward(self) -> bool:
        return self.quantity > 0

    @property
    def value(self) -> Decimal:
        """Signed movement value = quantity * unit_cost."""
        return self.quantity * self.unit_cost


class StockBalance(BaseModel):
    """Cached running balance and weighted average cost for a pair."""

    item_id: int
    warehouse_id: int
    quantity: Decimal = Decimal("0")
    avg_cost: Decimal = Decimal("0")
    last_movement_date: date | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_value(self) -> Decimal:
        """Total stock value = quantity * avg_cost."""
        return self.quantity * self.avg_cost


class MovementFilters(BaseModel):
    """Filters for listing the movement log."""

    item_id: int | None = None
    warehouse_id: int | None = None
    movement_type: MovementType | None = None
    date_from: date | None = None
    date_to: date | None = None
    reference_docno: str | None = None
    limit: int | None = None


@dataclass
class BalanceMismatch:
    """Difference between the cached balance and the replayed log."""

    item_id: int
    warehouse_id: int
    cached_quantity: Decimal | None
    replayed_quantity: Decimal | None
    cached_avg_cost: Decimal | None = None
    replayed_avg_cost: Decimal | None = None


@dataclass
class RebuildReport:
    """Result of replaying the movement log into the balance projection."""

    movements_replayed: int = 0
    pairs: int = 0
    mismatches: list[BalanceMismatch] = field(default_factory=list)
    applied: bool = False

    @property
    def consistent(self) -> bool:
        return not self.mismatches
