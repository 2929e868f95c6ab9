"""
Weighted-average costing for the balance projection.

Live recording and log replay both go through apply_movement, so a rebuild
reproduces the cached quantity and average cost exactly.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal

from src.core.entities.catalog import Item
from src.core.entities.inventory import StockBalance, StockMovement
from src.core.services.quantities import ZERO, quantize


def apply_movement(
    balance: StockBalance,
    movement: StockMovement,
    cost_places: int = 4,
) -> StockBalance:
    """
    Return the balance after applying one movement.

    Inflows re-average the cost; outflows leave it unchanged. When the prior
    quantity is not positive the average resets to the inflow cost.
    """
    old_qty = balance.quantity
    new_qty = old_qty + movement.quantity
    avg_cost = balance.avg_cost

    if movement.quantity > 0:
        if old_qty <= 0:
            avg_cost = movement.unit_cost
        else:
            avg_cost = quantize(
                (old_qty * balance.avg_cost + movement.quantity * movement.unit_cost) / new_qty,
                cost_places,
            )

    last_date = balance.last_movement_date
    if last_date is None or movement.movement_date > last_date:
        last_date = movement.movement_date

    return StockBalance(
        item_id=balance.item_id,
        warehouse_id=balance.warehouse_id,
        quantity=new_qty,
        avg_cost=avg_cost,
        last_movement_date=last_date,
        updated_at=datetime.now(UTC),
    )


def outward_unit_cost(balance: StockBalance | None, item: Item) -> Decimal:
    """Cost carried by an outward movement: current average, else standard cost."""
    if balance is not None and balance.avg_cost > 0:
        return balance.avg_cost
    return item.standard_cost


def replay(
    movements: Iterable[StockMovement],
    cost_places: int = 4,
) -> dict[tuple[int, int], StockBalance]:
    """Rebuild balances from an empty state by applying movements in order."""
    balances: dict[tuple[int, int], StockBalance] = {}
    for movement in movements:
        key = (movement.item_id, movement.warehouse_id)
        current = balances.get(key) or StockBalance(
            item_id=movement.item_id,
            warehouse_id=movement.warehouse_id,
            quantity=ZERO,
            avg_cost=ZERO,
        )
        balances[key] = apply_movement(current, movement, cost_places)
    return balances
