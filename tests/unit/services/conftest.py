"""In-memory ledger doubles for service unit tests."""

import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.config import LedgerSettings
from src.core.entities import (
    BOM,
    BOMLine,
    Item,
    MovementFilters,
    ProductionRun,
    ProductionSummary,
    StockBalance,
    StockMovement,
    Warehouse,
)
from src.core.interfaces import ILedgerSession, ILedgerStore
from src.core.services import BOMRegistry, ProductionOrchestrator, StockLedger


class MemorySession(ILedgerSession):
    """Session over a working copy of the store state."""

    def __init__(self, state: dict):
        self.state = state

    async def get_balance(self, item_id, warehouse_id):
        return self.state["balances"].get((item_id, warehouse_id))

    async def save_balance(self, balance):
        self.state["balances"][(balance.item_id, balance.warehouse_id)] = balance

    async def get_bom(self, bom_id):
        return self.state["boms"].get(bom_id)

    async def active_item_ids(self, item_ids):
        return {i for i in item_ids if i not in self.state["inactive_items"]}

    async def next_number(self, prefix, year):
        key = f"{prefix}-{year}"
        self.state["sequences"][key] = self.state["sequences"].get(key, 0) + 1
        return self.state["sequences"][key]

    async def insert_movement(self, movement):
        movement.id = len(self.state["movements"]) + 1
        self.state["movements"].append(movement)
        return movement

    async def insert_production(self, run):
        run.id = len(self.state["productions"]) + 1
        self.state["productions"].append(run)
        return run

    async def all_movements(self):
        return list(self.state["movements"])

    async def all_balances(self):
        return list(self.state["balances"].values())

    async def replace_balances(self, balances):
        self.state["balances"] = {(b.item_id, b.warehouse_id): b for b in balances}


class MemoryLedgerStore(ILedgerStore):
    """Ledger store whose write sessions commit by swapping in the working copy."""

    def __init__(self):
        self.state: dict = {
            "balances": {},
            "sequences": {},
            "movements": [],
            "productions": [],
            "boms": {},
            "inactive_items": set(),
        }
        self.fail_commit = False

    @asynccontextmanager
    async def write_session(self) -> AsyncIterator[ILedgerSession]:
        working = copy.deepcopy(self.state)
        yield MemorySession(working)
        if self.fail_commit:
            from src.core.exceptions import CommitFailedError

            raise CommitFailedError("ledger_write", "injected failure")
        self.state = working

    async def get_balance(self, item_id, warehouse_id):
        return self.state["balances"].get((item_id, warehouse_id))

    async def list_balances(self, item_id=None, warehouse_id=None):
        return [
            b
            for b in self.state["balances"].values()
            if (item_id is None or b.item_id == item_id)
            and (warehouse_id is None or b.warehouse_id == warehouse_id)
        ]

    async def iter_movements(self, filters: MovementFilters, page_size: int = 200):
        rows = sorted(
            (
                m
                for m in self.state["movements"]
                if filters.item_id is None or m.item_id == filters.item_id
            ),
            key=lambda m: (m.movement_date, m.id),
            reverse=True,
        )
        for m in rows[: filters.limit]:
            yield m

    async def count_movements(self, item_id):
        return sum(1 for m in self.state["movements"] if m.item_id == item_id)

    async def get_production(self, production_id):
        for run in self.state["productions"]:
            if run.id == production_id:
                return run
        return None

    async def list_productions(self, **kwargs):
        return list(self.state["productions"])

    async def is_bom_referenced(self, bom_id):
        return any(run.bom_id == bom_id for run in self.state["productions"])

    async def production_summary(self, output_item_id):
        runs = [r for r in self.state["productions"] if r.output_item_id == output_item_id]
        dates = sorted(r.production_date for r in runs)
        return ProductionSummary(
            output_item_id=output_item_id,
            production_count=len(runs),
            total_quantity=sum((r.output_quantity for r in runs), Decimal("0")),
            first_production_date=dates[0] if dates else None,
            last_production_date=dates[-1] if dates else None,
        )

    @property
    def movements(self) -> list[StockMovement]:
        return self.state["movements"]

    @property
    def productions(self) -> list[ProductionRun]:
        return self.state["productions"]

    def balance(self, item_id: int, warehouse_id: int) -> StockBalance | None:
        return self.state["balances"].get((item_id, warehouse_id))


ITEMS = {
    1: Item(id=1, item_code="RM-SESAME", item_name="Sesame Seeds", standard_cost=Decimal("2.5")),
    2: Item(id=2, item_code="PK-BOTTLE", item_name="Glass Bottle", standard_cost=Decimal("0.4")),
    3: Item(id=3, item_code="FG-OIL", item_name="Sesame Oil 1L"),
}
WAREHOUSES = {
    1: Warehouse(id=1, warehouse_code="WH-MAIN", warehouse_name="Main"),
    2: Warehouse(id=2, warehouse_code="WH-STORE", warehouse_name="Store"),
}


SESAME_OIL_BOM = BOM(
    id=1,
    bom_no="BOM-2026-0001",
    bom_name="Sesame Oil 1L",
    finished_item_id=3,
    quantity=Decimal("1"),
    lines=[
        BOMLine(id=1, item_id=1, quantity=Decimal("1"), item_code="RM-SESAME"),
        BOMLine(id=2, item_id=2, quantity=Decimal("1"), item_code="PK-BOTTLE"),
    ],
)


@pytest.fixture
def catalog_store() -> AsyncMock:
    store = AsyncMock()
    store.get_item.side_effect = lambda item_id: ITEMS.get(item_id)
    store.get_warehouse.side_effect = lambda wh_id: WAREHOUSES.get(wh_id)
    store.get_items.side_effect = lambda ids: {i: ITEMS[i] for i in ids if i in ITEMS}
    return store


@pytest.fixture
def ledger_store() -> MemoryLedgerStore:
    store = MemoryLedgerStore()
    store.state["boms"][1] = SESAME_OIL_BOM.model_copy(deep=True)
    return store


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings(negative_stock_policy="override")


@pytest.fixture
def ledger(ledger_store, catalog_store, ledger_settings) -> StockLedger:
    return StockLedger(ledger_store, catalog_store, ledger_settings)


@pytest.fixture
def bom_store() -> AsyncMock:
    store = AsyncMock()
    store.get_bom.return_value = SESAME_OIL_BOM.model_copy(deep=True)
    return store


@pytest.fixture
def bom_registry(bom_store, catalog_store, ledger_store, ledger_settings) -> BOMRegistry:
    return BOMRegistry(bom_store, catalog_store, ledger_store, ledger_settings)


@pytest.fixture
def orchestrator(ledger, bom_registry, catalog_store) -> ProductionOrchestrator:
    return ProductionOrchestrator(ledger, bom_registry, catalog_store)
