"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from src.application.services import reset_services
from src.config import LedgerSettings, reset_settings
from src.core.entities.catalog import Item, Warehouse
from src.core.services import BOMRegistry, ProductionOrchestrator, StockLedger
from src.infrastructure.storage.sqlite import (
    SQLiteBOMStore,
    SQLiteCatalogStore,
    SQLiteLedgerStore,
)
from src.infrastructure.storage.sqlite import connection as conn_module
from src.infrastructure.storage.sqlite.connection import ConnectionPool, close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a per-test data directory and clear singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("LEDGER_NEGATIVE_STOCK_POLICY", raising=False)
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "ledger.db"


@pytest.fixture
async def ledger_db(temp_db_path: Path) -> AsyncGenerator[Path, None]:
    """Migrated database with the global connection pool pointed at it."""
    await initialize_database(temp_db_path, create_backup_before=False)
    conn_module._pool = ConnectionPool(temp_db_path, pool_size=3)
    yield temp_db_path
    await close_pool()


@dataclass
class LedgerServices:
    """Services wired over the SQLite stores of one test database."""

    catalog: SQLiteCatalogStore
    ledger_store: SQLiteLedgerStore
    bom_store: SQLiteBOMStore
    ledger: StockLedger
    boms: BOMRegistry
    production: ProductionOrchestrator


def build_services(policy: str = "override") -> LedgerServices:
    settings = LedgerSettings(negative_stock_policy=policy)
    catalog = SQLiteCatalogStore()
    ledger_store = SQLiteLedgerStore()
    bom_store = SQLiteBOMStore()
    ledger = StockLedger(ledger_store, catalog, settings)
    boms = BOMRegistry(bom_store, catalog, ledger_store, settings)
    return LedgerServices(
        catalog=catalog,
        ledger_store=ledger_store,
        bom_store=bom_store,
        ledger=ledger,
        boms=boms,
        production=ProductionOrchestrator(ledger, boms, catalog),
    )


@pytest.fixture
async def services(ledger_db: Path) -> LedgerServices:
    return build_services()


@dataclass
class Seed:
    """Catalog rows shared by the ledger tests."""

    sesame: Item
    oil: Item
    bottle: Item
    main: Warehouse
    store: Warehouse


@pytest.fixture
async def seed(services: LedgerServices) -> Seed:
    """Two raw materials, one finished good and two warehouses."""
    catalog = services.catalog
    return Seed(
        sesame=await catalog.create_item(
            Item(
                item_code="RM-SESAME",
                item_name="Sesame Seeds",
                unit_of_measure="Kg",
                standard_cost=Decimal("2.5"),
                is_raw_material=True,
            )
        ),
        bottle=await catalog.create_item(
            Item(
                item_code="PK-BOTTLE",
                item_name="Glass Bottle 1L",
                standard_cost=Decimal("0.4"),
                is_raw_material=True,
            )
        ),
        oil=await catalog.create_item(
            Item(
                item_code="FG-OIL",
                item_name="Sesame Oil 1L",
                unit_of_measure="Ltr",
                is_finished_good=True,
                is_manufactured=True,
                is_purchased=False,
            )
        ),
        main=await catalog.create_warehouse(
            Warehouse(warehouse_code="WH-MAIN", warehouse_name="Main Warehouse")
        ),
        store=await catalog.create_warehouse(
            Warehouse(warehouse_code="WH-STORE", warehouse_name="Retail Store")
        ),
    )


@pytest.fixture
async def api_client(ledger_db: Path) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the real app and the test database."""
    from src.api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
