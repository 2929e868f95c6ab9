"""SQLite implementation of item and warehouse storage."""

from datetime import UTC, datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.catalog import Item, Warehouse
from src.core.exceptions import DuplicateCodeError, HasStockHistoryError
from src.core.interfaces.catalog_store import ICatalogStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """SQLite implementation of the item catalog and warehouse registry."""

    async def create_item(self, item: Item) -> Item:
        """Create a new item."""
        now = datetime.now(UTC)
        item.created_at = now
        item.updated_at = now
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO items (
                        item_code, item_name, description, category,
                        unit_of_measure, reorder_level, standard_cost,
                        standard_selling_price, is_raw_material, is_finished_good,
                        is_purchased, is_manufactured, is_active,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.item_code,
                        item.item_name,
                        item.description,
                        item.category,
                        item.unit_of_measure,
                        str(item.reorder_level),
                        str(item.standard_cost),
                        str(item.standard_selling_price),
                        int(item.is_raw_material),
                        int(item.is_finished_good),
                        int(item.is_purchased),
                        int(item.is_manufactured),
                        int(item.is_active),
                        item.created_at.isoformat(),
                        item.updated_at.isoformat(),
                    ),
                )
                item.id = cursor.lastrowid
        except aiosqlite.IntegrityError as e:
            raise DuplicateCodeError("Item", item.item_code) from e

        logger.info("item_created", item_id=item.id, item_code=item.item_code)
        return item

    async def get_item(self, item_id: int) -> Item | None:
        """Get active item by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM items WHERE id = ? AND is_active = 1", (item_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            stock = await self._stock_totals(conn, [item_id])
            return self._row_to_item(row, stock.get(item_id))

    async def get_item_by_code(self, item_code: str) -> Item | None:
        """Get active item by code."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM items WHERE item_code = ? AND is_active = 1",
                (item_code,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            stock = await self._stock_totals(conn, [row["id"]])
            return self._row_to_item(row, stock.get(row["id"]))

    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        """Batch lookup of active items."""
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM items WHERE id IN ({placeholders}) AND is_active = 1",
                ids,
            )
            rows = await cursor.fetchall()
            stock = await self._stock_totals(conn, ids)
            return {row["id"]: self._row_to_item(row, stock.get(row["id"])) for row in rows}

    async def list_items(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Item]:
        """List active items with optional filters."""
        conditions = ["is_active = 1"]
        params: list = []

        if category:
            conditions.append("category = ?")
            params.append(category)
        if search:
            conditions.append("(item_code LIKE ? OR item_name LIKE ?)")
            params.extend([f"%{search}%", f"%{search}%"])

        query = f"""
            SELECT * FROM items
            WHERE {" AND ".join(conditions)}
            ORDER BY item_name
            LIMIT ? OFFSET ?
        """
        params.extend([limit, offset])

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            stock = await self._stock_totals(conn, [row["id"] for row in rows])
            return [self._row_to_item(row, stock.get(row["id"])) for row in rows]

    async def list_low_stock(self) -> list[Item]:
        """Active items whose total stock is at or below their reorder level."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM items WHERE is_active = 1 ORDER BY item_name")
            rows = await cursor.fetchall()
            stock = await self._stock_totals(conn, [row["id"] for row in rows])
        items = [self._row_to_item(row, stock.get(row["id"])) for row in rows]
        return [item for item in items if item.is_low_stock]

    async def deactivate_item(self, item_id: int) -> None:
        """Soft-delete an item that has no stock history."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                SELECT EXISTS (SELECT 1 FROM stock_movements WHERE item_id = ?)
                    OR EXISTS (
                        SELECT 1 FROM stock_balances
                        WHERE item_id = ? AND CAST(quantity AS REAL) != 0
                    )
                """,
                (item_id, item_id),
            )
            if (await cursor.fetchone())[0]:
                raise HasStockHistoryError(item_id)
            await conn.execute(
                "UPDATE items SET is_active = 0, updated_at = ? WHERE id = ?",
                (datetime.now(UTC).isoformat(), item_id),
            )
        logger.info("item_deactivated", item_id=item_id)

    async def create_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Create a new warehouse."""
        warehouse.created_at = datetime.now(UTC)
        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO warehouses (
                        warehouse_code, warehouse_name, location, is_active, created_at
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        warehouse.warehouse_code,
                        warehouse.warehouse_name,
                        warehouse.location,
                        int(warehouse.is_active),
                        warehouse.created_at.isoformat(),
                    ),
                )
                warehouse.id = cursor.lastrowid
        except aiosqlite.IntegrityError as e:
            raise DuplicateCodeError("Warehouse", warehouse.warehouse_code) from e

        logger.info(
            "warehouse_created",
            warehouse_id=warehouse.id,
            warehouse_code=warehouse.warehouse_code,
        )
        return warehouse

    async def get_warehouse(self, warehouse_id: int) -> Warehouse | None:
        """Get active warehouse by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM warehouses WHERE id = ? AND is_active = 1",
                (warehouse_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_warehouse(row)

    async def list_warehouses(self) -> list[Warehouse]:
        """List active warehouses."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM warehouses WHERE is_active = 1 ORDER BY warehouse_name"
            )
            rows = await cursor.fetchall()
            return [self._row_to_warehouse(row) for row in rows]

    @staticmethod
    async def _stock_totals(
        conn: aiosqlite.Connection, item_ids: list[int]
    ) -> dict[int, Decimal]:
        """Sum cached balances per item in Python to keep decimal precision."""
        if not item_ids:
            return {}
        placeholders = ", ".join("?" for _ in item_ids)
        cursor = await conn.execute(
            f"SELECT item_id, quantity FROM stock_balances WHERE item_id IN ({placeholders})",
            list(item_ids),
        )
        totals: dict[int, Decimal] = {}
        for row in await cursor.fetchall():
            totals[row["item_id"]] = totals.get(row["item_id"], Decimal("0")) + Decimal(
                row["quantity"]
            )
        return totals

    def _row_to_item(self, row: aiosqlite.Row, current_stock: Decimal | None = None) -> Item:
        """Convert database row to Item."""
        return Item(
            id=row["id"],
            item_code=row["item_code"],
            item_name=row["item_name"],
            description=row["description"],
            category=row["category"],
            unit_of_measure=row["unit_of_measure"],
            reorder_level=Decimal(row["reorder_level"]),
            standard_cost=Decimal(row["standard_cost"]),
            standard_selling_price=Decimal(row["standard_selling_price"]),
            is_raw_material=bool(row["is_raw_material"]),
            is_finished_good=bool(row["is_finished_good"]),
            is_purchased=bool(row["is_purchased"]),
            is_manufactured=bool(row["is_manufactured"]),
            is_active=bool(row["is_active"]),
            current_stock=current_stock or Decimal("0"),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_warehouse(self, row: aiosqlite.Row) -> Warehouse:
        """Convert database row to Warehouse."""
        return Warehouse(
            id=row["id"],
            warehouse_code=row["warehouse_code"],
            warehouse_name=row["warehouse_name"],
            location=row["location"],
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
