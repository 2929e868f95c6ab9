"""
Stock ledger engine.

Owns the append-only movement log and the per-(item, warehouse) balance
projection. Every balance-affecting write goes through post(), which runs
inside a serialized write session so the sufficiency check and the writes
see the same balances.

Pure service -- no infrastructure imports. Stores are injected via
constructor.
"""

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from src.config import LedgerSettings, get_logger, get_settings
from src.core.entities.catalog import Item, Warehouse
from src.core.entities.inventory import (
    BalanceMismatch,
    MovementFilters,
    MovementType,
    RebuildReport,
    StockBalance,
    StockMovement,
)
from src.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    UnknownItemError,
    UnknownWarehouseError,
    ValidationError,
)
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.interfaces.ledger_store import ILedgerSession, ILedgerStore
from src.core.services.costing import apply_movement, outward_unit_cost, replay
from src.core.services.quantities import (
    ZERO,
    format_document_no,
    quantize,
    to_decimal,
    within_range,
)

logger = get_logger(__name__)

MOVEMENT_PREFIX = "STK"
TRANSFER_PREFIX = "TRF"

# Types that only the orchestrator and the transfer operation may create
_COMPOSITE_TYPES = {MovementType.PRODUCTION, MovementType.TRANSFER}

BalanceKey = tuple[int, int]


@dataclass
class PostResult:
    """Movements written by one post() call and the balances they left."""

    movements: list[StockMovement]
    balances: dict[BalanceKey, StockBalance]


@dataclass
class TransferResult:
    """Both legs of a warehouse transfer."""

    reference: str
    outgoing: StockMovement
    incoming: StockMovement
    source_balance: StockBalance
    destination_balance: StockBalance


class MovementLog:
    """
    Lazy, finite, restartable view over the movement log.

    Each `async for` starts a fresh keyset-paginated scan.
    """

    def __init__(self, store: ILedgerStore, filters: MovementFilters, page_size: int):
        self._store = store
        self._filters = filters
        self._page_size = page_size

    def __aiter__(self) -> AsyncIterator[StockMovement]:
        return self._store.iter_movements(self._filters, self._page_size)

    async def to_list(self) -> list[StockMovement]:
        return [movement async for movement in self]


def find_shortages(
    movements: list[StockMovement],
    balances: dict[BalanceKey, StockBalance],
) -> list[dict[str, Any]]:
    """Pairs whose balance would drop below zero after the batch."""
    net: dict[BalanceKey, Decimal] = {}
    outward: dict[BalanceKey, Decimal] = {}
    for m in movements:
        key = (m.item_id, m.warehouse_id)
        net[key] = net.get(key, ZERO) + m.quantity
        if m.quantity < 0:
            outward[key] = outward.get(key, ZERO) - m.quantity

    shortages = []
    for key, required in outward.items():
        available = balances[key].quantity
        if available + net[key] < 0:
            shortages.append(
                {
                    "item_id": key[0],
                    "warehouse_id": key[1],
                    "available": str(available),
                    "required": str(required),
                }
            )
    return shortages


async def rebuild_in_session(
    session: ILedgerSession,
    cost_places: int = 4,
    apply: bool = True,
) -> RebuildReport:
    """
    Replay the log inside an open session and diff it against the cache.

    Cached pairs with no movements are reported as orphans (replayed
    quantity None) and disappear when the replay is applied.
    """
    movements = await session.all_movements()
    replayed = replay(movements, cost_places)
    cached = {(b.item_id, b.warehouse_id): b for b in await session.all_balances()}

    mismatches = []
    for key in sorted(set(replayed) | set(cached)):
        new = replayed.get(key)
        old = cached.get(key)
        if old is not None and new is not None:
            if old.quantity == new.quantity and old.avg_cost == new.avg_cost:
                continue
        mismatches.append(
            BalanceMismatch(
                item_id=key[0],
                warehouse_id=key[1],
                cached_quantity=old.quantity if old else None,
                replayed_quantity=new.quantity if new else None,
                cached_avg_cost=old.avg_cost if old else None,
                replayed_avg_cost=new.avg_cost if new else None,
            )
        )

    if apply:
        await session.replace_balances(list(replayed.values()))

    return RebuildReport(
        movements_replayed=len(movements),
        pairs=len(replayed),
        mismatches=mismatches,
        applied=apply,
    )


class StockLedger:
    """Records movements and answers balance queries."""

    def __init__(
        self,
        ledger_store: ILedgerStore,
        catalog_store: ICatalogStore,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._ledger_store = ledger_store
        self._catalog_store = catalog_store
        self._settings = settings or get_settings().ledger

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    @property
    def ledger_store(self) -> ILedgerStore:
        return self._ledger_store

    # ------------------------------------------------------------------
    # Helpers shared with the production orchestrator
    # ------------------------------------------------------------------

    @staticmethod
    def parse_decimal(value: Any, field: str) -> Decimal:
        try:
            result = to_decimal(value)
        except ValueError as e:
            raise ValidationError(field=field, message="must be a finite number", value=value) from e
        if not within_range(result):
            raise ValidationError(field=field, message="is out of range", value=value)
        return result

    def quantize_quantity(self, value: Any) -> Decimal:
        """Quantize to quantity precision; raises InvalidQuantityError when out of range."""
        try:
            result = quantize(to_decimal(value), self._settings.quantity_places)
        except ValueError as e:
            raise InvalidQuantityError(value, "quantity is out of range") from e
        if not within_range(result):
            raise InvalidQuantityError(value, "quantity is out of range")
        return result

    def quantize_cost(self, value: Any) -> Decimal:
        try:
            result = quantize(to_decimal(value), self._settings.cost_places)
        except ValueError as e:
            raise ValidationError(field="unit_cost", message="is out of range", value=str(value)) from e
        if not within_range(result):
            raise ValidationError(field="unit_cost", message="is out of range", value=str(value))
        return result

    def negative_allowed(self, allow_negative: bool = False) -> bool:
        """Apply the configured negative-stock policy to a request flag."""
        policy = self._settings.negative_stock_policy
        if policy == "allow":
            return True
        if policy == "reject":
            return False
        return allow_negative

    def write_session(self) -> AbstractAsyncContextManager[ILedgerSession]:
        return self._ledger_store.write_session()

    async def next_document_no(self, session: ILedgerSession, prefix: str) -> str:
        year = datetime.now(UTC).year
        seq = await session.next_number(prefix, year)
        return format_document_no(prefix, year, seq, self._settings.number_width)

    async def resolve_item(self, item_id: int) -> Item:
        item = await self._catalog_store.get_item(item_id)
        if item is None:
            raise UnknownItemError(item_id)
        return item

    async def resolve_warehouse(self, warehouse_id: int) -> Warehouse:
        warehouse = await self._catalog_store.get_warehouse(warehouse_id)
        if warehouse is None:
            raise UnknownWarehouseError(warehouse_id)
        return warehouse

    async def post(
        self,
        session: ILedgerSession,
        movements: list[StockMovement],
        items: dict[int, Item],
        allow_negative: bool = False,
    ) -> PostResult:
        """
        Validate and write a batch of movements inside an open session.

        Outward movements carry the pair's current average cost. Raises
        InsufficientStockError before writing anything when the policy
        forbids negative balances, and UnknownItemError when an item was
        deactivated after the caller resolved it.
        """
        active = await session.active_item_ids(sorted({m.item_id for m in movements}))
        for m in movements:
            if m.item_id not in active:
                raise UnknownItemError(m.item_id)

        balances: dict[BalanceKey, StockBalance] = {}
        for m in movements:
            key = (m.item_id, m.warehouse_id)
            if key not in balances:
                balances[key] = await session.get_balance(*key) or StockBalance(
                    item_id=m.item_id, warehouse_id=m.warehouse_id
                )

        if not self.negative_allowed(allow_negative):
            shortages = find_shortages(movements, balances)
            if shortages:
                first = shortages[0]
                raise InsufficientStockError(
                    item_id=first["item_id"],
                    warehouse_id=first["warehouse_id"],
                    requested=Decimal(first["required"]),
                    available=Decimal(first["available"]),
                    shortages=shortages,
                )

        recorded = []
        for m in movements:
            key = (m.item_id, m.warehouse_id)
            if m.quantity < 0:
                m.unit_cost = outward_unit_cost(balances[key], items[m.item_id])
            m.movement_no = await self.next_document_no(session, MOVEMENT_PREFIX)
            saved = await session.insert_movement(m)
            balances[key] = apply_movement(balances[key], saved, self._settings.cost_places)
            await session.save_balance(balances[key])
            recorded.append(saved)

        return PostResult(movements=recorded, balances=balances)

    # ------------------------------------------------------------------
    # Recording operations
    # ------------------------------------------------------------------

    async def record_movement(
        self,
        item_id: int,
        warehouse_id: int,
        quantity: Any,
        movement_type: MovementType,
        movement_date: date | None = None,
        unit_cost: Any = None,
        reference_doctype: str | None = None,
        reference_docno: str | None = None,
        remarks: str | None = None,
        allow_negative: bool = False,
    ) -> tuple[StockMovement, StockBalance]:
        """Record a single PURCHASE, SALE or ADJUSTMENT movement."""
        raw_qty = self.parse_decimal(quantity, "quantity")
        qty = self.quantize_quantity(raw_qty)
        if raw_qty == 0 or qty == 0:
            raise InvalidQuantityError(quantity)
        if movement_type in _COMPOSITE_TYPES:
            raise ValidationError(
                field="movement_type",
                message=f"{movement_type.value} movements are recorded through their own operation",
                value=movement_type.value,
            )
        if movement_type == MovementType.PURCHASE and qty < 0:
            raise InvalidQuantityError(quantity, "purchases must be positive")
        if movement_type == MovementType.SALE and qty > 0:
            raise InvalidQuantityError(quantity, "sales must be negative")

        item = await self.resolve_item(item_id)
        await self.resolve_warehouse(warehouse_id)

        cost = (
            item.standard_cost
            if unit_cost is None
            else self.quantize_cost(self.parse_decimal(unit_cost, "unit_cost"))
        )
        if cost < 0:
            raise ValidationError(field="unit_cost", message="must not be negative", value=unit_cost)

        movement = StockMovement(
            item_id=item_id,
            warehouse_id=warehouse_id,
            movement_type=movement_type,
            quantity=qty,
            unit_cost=cost,
            reference_doctype=reference_doctype,
            reference_docno=reference_docno,
            remarks=remarks,
            movement_date=movement_date or date.today(),
        )

        async with self.write_session() as session:
            result = await self.post(session, [movement], {item.id: item}, allow_negative)

        saved = result.movements[0]
        balance = result.balances[(item_id, warehouse_id)]
        logger.info(
            "movement_recorded",
            movement_no=saved.movement_no,
            type=saved.movement_type.value,
            item_id=item_id,
            warehouse_id=warehouse_id,
            qty=str(saved.quantity),
            balance=str(balance.quantity),
        )
        return saved, balance

    async def record_transfer(
        self,
        item_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: Any,
        movement_date: date | None = None,
        remarks: str | None = None,
        allow_negative: bool = False,
    ) -> TransferResult:
        """Move stock between warehouses as two TRANSFER movements at source cost."""
        raw_qty = self.parse_decimal(quantity, "quantity")
        qty = self.quantize_quantity(raw_qty)
        if raw_qty <= 0 or qty <= 0:
            raise InvalidQuantityError(quantity, "transfer quantity must be positive")
        if from_warehouse_id == to_warehouse_id:
            raise ValidationError(
                field="to_warehouse_id",
                message="source and destination warehouses must differ",
                value=to_warehouse_id,
            )

        item = await self.resolve_item(item_id)
        await self.resolve_warehouse(from_warehouse_id)
        await self.resolve_warehouse(to_warehouse_id)
        when = movement_date or date.today()

        async with self.write_session() as session:
            reference = await self.next_document_no(session, TRANSFER_PREFIX)
            source = await session.get_balance(item_id, from_warehouse_id)
            cost = outward_unit_cost(source, item)
            legs = [
                StockMovement(
                    item_id=item_id,
                    warehouse_id=from_warehouse_id,
                    movement_type=MovementType.TRANSFER,
                    quantity=-qty,
                    unit_cost=cost,
                    reference_doctype="Transfer",
                    reference_docno=reference,
                    remarks=remarks or f"Transfer {reference} to warehouse {to_warehouse_id}",
                    movement_date=when,
                ),
                StockMovement(
                    item_id=item_id,
                    warehouse_id=to_warehouse_id,
                    movement_type=MovementType.TRANSFER,
                    quantity=qty,
                    unit_cost=cost,
                    reference_doctype="Transfer",
                    reference_docno=reference,
                    remarks=remarks or f"Transfer {reference} from warehouse {from_warehouse_id}",
                    movement_date=when,
                ),
            ]
            result = await self.post(session, legs, {item.id: item}, allow_negative)

        logger.info(
            "transfer_recorded",
            reference=reference,
            item_id=item_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            qty=str(qty),
        )
        return TransferResult(
            reference=reference,
            outgoing=result.movements[0],
            incoming=result.movements[1],
            source_balance=result.balances[(item_id, from_warehouse_id)],
            destination_balance=result.balances[(item_id, to_warehouse_id)],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_balance(self, item_id: int, warehouse_id: int) -> Decimal:
        """Signed sum of all movements for the pair."""
        balance = await self._ledger_store.get_balance(item_id, warehouse_id)
        return balance.quantity if balance else ZERO

    async def get_balance_snapshot(self, item_id: int, warehouse_id: int) -> StockBalance:
        balance = await self._ledger_store.get_balance(item_id, warehouse_id)
        return balance or StockBalance(item_id=item_id, warehouse_id=warehouse_id)

    async def list_balances(
        self, item_id: int | None = None, warehouse_id: int | None = None
    ) -> list[StockBalance]:
        return await self._ledger_store.list_balances(item_id=item_id, warehouse_id=warehouse_id)

    def list_movements(self, filters: MovementFilters | None = None) -> MovementLog:
        """Movements ordered by date DESC, then movement number DESC."""
        return MovementLog(
            self._ledger_store,
            filters or MovementFilters(),
            self._settings.page_size,
        )

    async def has_stock_history(self, item_id: int) -> bool:
        """True if the item has any movement or any non-zero balance."""
        if await self._ledger_store.count_movements(item_id) > 0:
            return True
        balances = await self._ledger_store.list_balances(item_id=item_id)
        return any(b.quantity != 0 for b in balances)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def rebuild_balances(self, apply: bool = True) -> RebuildReport:
        """
        Replay the full log from empty state and compare with the cache.

        With apply=True the projection is replaced by the replayed balances.
        """
        async with self.write_session() as session:
            report = await rebuild_in_session(session, self._settings.cost_places, apply)

        logger.info(
            "balances_rebuilt" if apply else "balances_verified",
            movements=report.movements_replayed,
            pairs=report.pairs,
            mismatches=len(report.mismatches),
        )
        return report

    async def verify_balances(self) -> RebuildReport:
        """Read-only reconciliation of the cache against the log."""
        return await self.rebuild_balances(apply=False)
