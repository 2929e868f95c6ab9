"""SQLite implementation of the movement log and balance projection."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.bom import BOM
from src.core.entities.inventory import (
    MovementFilters,
    MovementType,
    StockBalance,
    StockMovement,
)
from src.core.entities.production import (
    ProductionInput,
    ProductionRun,
    ProductionStatus,
    ProductionSummary,
)
from src.core.exceptions import CommitFailedError
from src.core.interfaces.ledger_store import ILedgerSession, ILedgerStore
from src.infrastructure.storage.sqlite.bom_store import is_referenced, load_bom
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.sequences import next_sequence

logger = get_logger(__name__)

MOVEMENT_SELECT = """
    SELECT m.*, i.item_code, i.item_name, i.unit_of_measure,
           w.warehouse_code, w.warehouse_name
    FROM stock_movements m
    JOIN items i ON i.id = m.item_id
    JOIN warehouses w ON w.id = m.warehouse_id
"""

PRODUCTION_SELECT = """
    SELECT p.*, i.item_code AS output_item_code, i.item_name AS output_item_name,
           i.unit_of_measure AS output_uom
    FROM productions p
    JOIN items i ON i.id = p.output_item_id
"""


def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
    """Convert database row to StockMovement."""
    keys = row.keys()
    return StockMovement(
        id=row["id"],
        movement_no=row["movement_no"],
        item_id=row["item_id"],
        warehouse_id=row["warehouse_id"],
        movement_type=MovementType(row["movement_type"]),
        quantity=Decimal(row["quantity"]),
        unit_cost=Decimal(row["unit_cost"]),
        reference_doctype=row["reference_doctype"],
        reference_docno=row["reference_docno"],
        remarks=row["remarks"],
        movement_date=date.fromisoformat(row["movement_date"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        item_code=row["item_code"] if "item_code" in keys else None,
        item_name=row["item_name"] if "item_name" in keys else None,
        unit_of_measure=row["unit_of_measure"] if "unit_of_measure" in keys else None,
        warehouse_code=row["warehouse_code"] if "warehouse_code" in keys else None,
        warehouse_name=row["warehouse_name"] if "warehouse_name" in keys else None,
    )


def _row_to_balance(row: aiosqlite.Row) -> StockBalance:
    """Convert database row to StockBalance."""
    return StockBalance(
        item_id=row["item_id"],
        warehouse_id=row["warehouse_id"],
        quantity=Decimal(row["quantity"]),
        avg_cost=Decimal(row["avg_cost"]),
        last_movement_date=(
            date.fromisoformat(row["last_movement_date"]) if row["last_movement_date"] else None
        ),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _row_to_production(row: aiosqlite.Row) -> ProductionRun:
    """Convert database row to ProductionRun header."""
    return ProductionRun(
        id=row["id"],
        production_no=row["production_no"],
        output_item_id=row["output_item_id"],
        output_quantity=Decimal(row["output_quantity"]),
        output_unit_cost=Decimal(row["output_unit_cost"]),
        warehouse_id=row["warehouse_id"],
        raw_materials_warehouse_id=row["raw_materials_warehouse_id"],
        bom_id=row["bom_id"],
        production_date=date.fromisoformat(row["production_date"]),
        remarks=row["remarks"],
        status=ProductionStatus.COMMITTED,
        created_at=datetime.fromisoformat(row["created_at"]),
        output_item_code=row["output_item_code"],
        output_item_name=row["output_item_name"],
        output_uom=row["output_uom"],
    )


async def _upsert_balance(conn: aiosqlite.Connection, balance: StockBalance) -> None:
    await conn.execute(
        """
        INSERT INTO stock_balances (
            item_id, warehouse_id, quantity, avg_cost, last_movement_date, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT (item_id, warehouse_id) DO UPDATE SET
            quantity = excluded.quantity,
            avg_cost = excluded.avg_cost,
            last_movement_date = excluded.last_movement_date,
            updated_at = excluded.updated_at
        """,
        (
            balance.item_id,
            balance.warehouse_id,
            str(balance.quantity),
            str(balance.avg_cost),
            balance.last_movement_date.isoformat() if balance.last_movement_date else None,
            balance.updated_at.isoformat(),
        ),
    )


class SQLiteLedgerSession(ILedgerSession):
    """Ledger operations bound to one open BEGIN IMMEDIATE transaction."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def get_balance(self, item_id: int, warehouse_id: int) -> StockBalance | None:
        cursor = await self._conn.execute(
            "SELECT * FROM stock_balances WHERE item_id = ? AND warehouse_id = ?",
            (item_id, warehouse_id),
        )
        row = await cursor.fetchone()
        return _row_to_balance(row) if row else None

    async def save_balance(self, balance: StockBalance) -> None:
        await _upsert_balance(self._conn, balance)

    async def get_bom(self, bom_id: int) -> BOM | None:
        return await load_bom(self._conn, bom_id)

    async def active_item_ids(self, item_ids: list[int]) -> set[int]:
        if not item_ids:
            return set()
        placeholders = ", ".join("?" for _ in item_ids)
        cursor = await self._conn.execute(
            f"SELECT id FROM items WHERE is_active = 1 AND id IN ({placeholders})",
            list(item_ids),
        )
        return {row["id"] for row in await cursor.fetchall()}

    async def next_number(self, prefix: str, year: int) -> int:
        return await next_sequence(self._conn, prefix, year)

    async def insert_movement(self, movement: StockMovement) -> StockMovement:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_movements (
                movement_no, item_id, warehouse_id, movement_type, quantity,
                unit_cost, reference_doctype, reference_docno, remarks,
                movement_date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.movement_no,
                movement.item_id,
                movement.warehouse_id,
                movement.movement_type.value,
                str(movement.quantity),
                str(movement.unit_cost),
                movement.reference_doctype,
                movement.reference_docno,
                movement.remarks,
                movement.movement_date.isoformat(),
                movement.created_at.isoformat(),
            ),
        )
        movement.id = cursor.lastrowid
        return movement

    async def insert_production(self, run: ProductionRun) -> ProductionRun:
        cursor = await self._conn.execute(
            """
            INSERT INTO productions (
                production_no, output_item_id, output_quantity, output_unit_cost,
                warehouse_id, raw_materials_warehouse_id, bom_id,
                production_date, remarks, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                run.production_no,
                run.output_item_id,
                str(run.output_quantity),
                str(run.output_unit_cost),
                run.warehouse_id,
                run.raw_materials_warehouse_id,
                run.bom_id,
                run.production_date.isoformat(),
                run.remarks,
                run.created_at.isoformat(),
            ),
        )
        run.id = cursor.lastrowid

        for line in run.inputs:
            cursor = await self._conn.execute(
                """
                INSERT INTO production_inputs (
                    production_id, item_id, warehouse_id, quantity, unit_cost
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (run.id, line.item_id, line.warehouse_id, str(line.quantity), str(line.unit_cost)),
            )
            line.id = cursor.lastrowid
        return run

    async def all_movements(self) -> list[StockMovement]:
        cursor = await self._conn.execute("SELECT * FROM stock_movements ORDER BY id")
        return [_row_to_movement(row) for row in await cursor.fetchall()]

    async def all_balances(self) -> list[StockBalance]:
        cursor = await self._conn.execute(
            "SELECT * FROM stock_balances ORDER BY item_id, warehouse_id"
        )
        return [_row_to_balance(row) for row in await cursor.fetchall()]

    async def replace_balances(self, balances: list[StockBalance]) -> None:
        await self._conn.execute("DELETE FROM stock_balances")
        for balance in balances:
            await _upsert_balance(self._conn, balance)


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of the stock ledger."""

    @asynccontextmanager
    async def write_session(self) -> AsyncIterator[ILedgerSession]:
        """Serialized write transaction; storage failures become CommitFailedError."""
        try:
            async with get_transaction() as conn:
                yield SQLiteLedgerSession(conn)
        except aiosqlite.Error as e:
            logger.error("ledger_write_failed", error=str(e))
            raise CommitFailedError("ledger_write", str(e)) from e

    async def get_balance(self, item_id: int, warehouse_id: int) -> StockBalance | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_balances WHERE item_id = ? AND warehouse_id = ?",
                (item_id, warehouse_id),
            )
            row = await cursor.fetchone()
            return _row_to_balance(row) if row else None

    async def list_balances(
        self, item_id: int | None = None, warehouse_id: int | None = None
    ) -> list[StockBalance]:
        conditions = []
        params: list = []
        if item_id is not None:
            conditions.append("item_id = ?")
            params.append(item_id)
        if warehouse_id is not None:
            conditions.append("warehouse_id = ?")
            params.append(warehouse_id)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM stock_balances {where} ORDER BY item_id, warehouse_id",
                params,
            )
            return [_row_to_balance(row) for row in await cursor.fetchall()]

    async def iter_movements(
        self, filters: MovementFilters, page_size: int = 200
    ) -> AsyncIterator[StockMovement]:
        """
        Keyset-paginated scan, newest first.

        A connection is held only while a page is fetched.
        """
        conditions = []
        params: list = []
        if filters.item_id is not None:
            conditions.append("m.item_id = ?")
            params.append(filters.item_id)
        if filters.warehouse_id is not None:
            conditions.append("m.warehouse_id = ?")
            params.append(filters.warehouse_id)
        if filters.movement_type is not None:
            conditions.append("m.movement_type = ?")
            params.append(filters.movement_type.value)
        if filters.date_from is not None:
            conditions.append("m.movement_date >= ?")
            params.append(filters.date_from.isoformat())
        if filters.date_to is not None:
            conditions.append("m.movement_date <= ?")
            params.append(filters.date_to.isoformat())
        if filters.reference_docno:
            conditions.append("m.reference_docno = ?")
            params.append(filters.reference_docno)

        remaining = filters.limit
        last: tuple[str, int] | None = None

        while remaining is None or remaining > 0:
            page_conditions = list(conditions)
            page_params = list(params)
            if last is not None:
                page_conditions.append(
                    "(m.movement_date < ? OR (m.movement_date = ? AND m.id < ?))"
                )
                page_params.extend([last[0], last[0], last[1]])

            where = f"WHERE {' AND '.join(page_conditions)}" if page_conditions else ""
            size = page_size if remaining is None else min(page_size, remaining)
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"{MOVEMENT_SELECT} {where} "
                    "ORDER BY m.movement_date DESC, m.id DESC LIMIT ?",
                    [*page_params, size],
                )
                rows = await cursor.fetchall()

            for row in rows:
                yield _row_to_movement(row)

            if len(rows) < size:
                return
            last = (rows[-1]["movement_date"], rows[-1]["id"])
            if remaining is not None:
                remaining -= len(rows)

    async def count_movements(self, item_id: int) -> int:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM stock_movements WHERE item_id = ?", (item_id,)
            )
            row = await cursor.fetchone()
            return row[0]

    async def get_production(self, production_id: int) -> ProductionRun | None:
        async with get_connection() as conn:
            cursor = await conn.execute(f"{PRODUCTION_SELECT} WHERE p.id = ?", (production_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            run = _row_to_production(row)
            run.inputs = (await self._load_inputs(conn, [run.id])).get(run.id, [])

            cursor = await conn.execute(
                f"{MOVEMENT_SELECT} WHERE m.reference_docno = ? AND m.movement_type = ? "
                "ORDER BY m.id",
                (run.production_no, MovementType.PRODUCTION.value),
            )
            run.movements = [_row_to_movement(r) for r in await cursor.fetchall()]
            return run

    async def list_productions(
        self,
        output_item_id: int | None = None,
        warehouse_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 100,
    ) -> list[ProductionRun]:
        conditions = []
        params: list = []
        if output_item_id is not None:
            conditions.append("p.output_item_id = ?")
            params.append(output_item_id)
        if warehouse_id is not None:
            conditions.append("p.warehouse_id = ?")
            params.append(warehouse_id)
        if date_from is not None:
            conditions.append("p.production_date >= ?")
            params.append(date_from.isoformat())
        if date_to is not None:
            conditions.append("p.production_date <= ?")
            params.append(date_to.isoformat())

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"{PRODUCTION_SELECT} {where} ORDER BY p.production_date DESC, p.id DESC LIMIT ?",
                [*params, limit],
            )
            runs = [_row_to_production(row) for row in await cursor.fetchall()]
            inputs = await self._load_inputs(conn, [r.id for r in runs])
            for run in runs:
                run.inputs = inputs.get(run.id, [])
            return runs

    async def is_bom_referenced(self, bom_id: int) -> bool:
        async with get_connection() as conn:
            return await is_referenced(conn, bom_id)

    async def production_summary(self, output_item_id: int) -> ProductionSummary:
        """Quantities are stored as TEXT and summed here as Decimal."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT output_quantity, production_date FROM productions "
                "WHERE output_item_id = ? ORDER BY production_date, id",
                (output_item_id,),
            )
            rows = await cursor.fetchall()

        summary = ProductionSummary(output_item_id=output_item_id)
        if not rows:
            return summary
        summary.production_count = len(rows)
        summary.total_quantity = sum(
            (Decimal(row["output_quantity"]) for row in rows), Decimal("0")
        )
        summary.first_production_date = date.fromisoformat(rows[0]["production_date"])
        summary.last_production_date = date.fromisoformat(rows[-1]["production_date"])
        return summary

    @staticmethod
    async def _load_inputs(
        conn: aiosqlite.Connection, production_ids: list[int]
    ) -> dict[int, list[ProductionInput]]:
        if not production_ids:
            return {}
        placeholders = ", ".join("?" for _ in production_ids)
        cursor = await conn.execute(
            f"""
            SELECT pi.*, i.item_code, i.item_name, i.unit_of_measure
            FROM production_inputs pi
            JOIN items i ON i.id = pi.item_id
            WHERE pi.production_id IN ({placeholders})
            ORDER BY pi.id
            """,
            production_ids,
        )
        result: dict[int, list[ProductionInput]] = {}
        for row in await cursor.fetchall():
            result.setdefault(row["production_id"], []).append(
                ProductionInput(
                    id=row["id"],
                    item_id=row["item_id"],
                    warehouse_id=row["warehouse_id"],
                    quantity=Decimal(row["quantity"]),
                    unit_cost=Decimal(row["unit_cost"]),
                    item_code=row["item_code"],
                    item_name=row["item_name"],
                    unit_of_measure=row["unit_of_measure"],
                )
            )
        return result
