"""SQLite implementation of Bill of Materials storage."""

from datetime import UTC, datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.bom import BOM, BOMLine
from src.core.exceptions import BOMInUseError
from src.core.interfaces.bom_store import IBOMStore
from src.core.services.quantities import format_document_no
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.sequences import next_sequence

logger = get_logger(__name__)

BOM_PREFIX = "BOM"

_BOM_SELECT = """
    SELECT b.*, i.item_code AS finished_item_code,
           i.item_name AS finished_item_name,
           i.unit_of_measure AS finished_uom
    FROM boms b
    JOIN items i ON i.id = b.finished_item_id
"""


def row_to_bom(row: aiosqlite.Row) -> BOM:
    """Convert database row to BOM header."""
    return BOM(
        id=row["id"],
        bom_no=row["bom_no"],
        bom_name=row["bom_name"],
        finished_item_id=row["finished_item_id"],
        quantity=Decimal(row["quantity"]),
        description=row["description"],
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
        finished_item_code=row["finished_item_code"],
        finished_item_name=row["finished_item_name"],
        finished_uom=row["finished_uom"],
    )


async def load_lines(conn: aiosqlite.Connection, bom_id: int) -> list[BOMLine]:
    cursor = await conn.execute(
        """
        SELECT bi.*, i.item_code, i.item_name, i.unit_of_measure
        FROM bom_items bi
        JOIN items i ON i.id = bi.item_id
        WHERE bi.bom_id = ?
        ORDER BY bi.id
        """,
        (bom_id,),
    )
    return [
        BOMLine(
            id=row["id"],
            item_id=row["item_id"],
            quantity=Decimal(row["quantity"]),
            item_code=row["item_code"],
            item_name=row["item_name"],
            unit_of_measure=row["unit_of_measure"],
        )
        for row in await cursor.fetchall()
    ]


async def load_bom(conn: aiosqlite.Connection, bom_id: int) -> BOM | None:
    """Read a BOM with its lines on an already open connection."""
    cursor = await conn.execute(f"{_BOM_SELECT} WHERE b.id = ?", (bom_id,))
    row = await cursor.fetchone()
    if row is None:
        return None
    bom = row_to_bom(row)
    bom.lines = await load_lines(conn, bom_id)
    return bom


async def is_referenced(conn: aiosqlite.Connection, bom_id: int) -> bool:
    cursor = await conn.execute("SELECT 1 FROM productions WHERE bom_id = ? LIMIT 1", (bom_id,))
    return await cursor.fetchone() is not None


class SQLiteBOMStore(IBOMStore):
    """SQLite implementation of BOM headers and lines."""

    async def create_bom(self, bom: BOM, number_width: int = 4) -> BOM:
        """Create a BOM and its lines, numbering it inside the same transaction."""
        now = datetime.now(UTC)
        bom.created_at = now
        bom.updated_at = now
        async with get_transaction() as conn:
            seq = await next_sequence(conn, BOM_PREFIX, now.year)
            bom.bom_no = format_document_no(BOM_PREFIX, now.year, seq, number_width)
            cursor = await conn.execute(
                """
                INSERT INTO boms (
                    bom_no, bom_name, finished_item_id, quantity,
                    description, is_active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    bom.bom_no,
                    bom.bom_name,
                    bom.finished_item_id,
                    str(bom.quantity),
                    bom.description,
                    int(bom.is_active),
                    bom.created_at.isoformat(),
                    bom.updated_at.isoformat(),
                ),
            )
            bom.id = cursor.lastrowid
            await self._insert_lines(conn, bom)

        logger.info("bom_stored", bom_id=bom.id, bom_no=bom.bom_no)
        return bom

    async def get_bom(self, bom_id: int) -> BOM | None:
        """Get BOM by ID with lines."""
        async with get_connection() as conn:
            return await load_bom(conn, bom_id)

    async def list_boms(
        self, active_only: bool = False, finished_item_id: int | None = None
    ) -> list[BOM]:
        """List BOMs newest first, with lines."""
        conditions = []
        params: list[int] = []
        if active_only:
            conditions.append("b.is_active = 1")
        if finished_item_id is not None:
            conditions.append("b.finished_item_id = ?")
            params.append(finished_item_id)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"{_BOM_SELECT} {where} ORDER BY b.created_at DESC, b.id DESC", params
            )
            boms = [row_to_bom(row) for row in await cursor.fetchall()]
            for bom in boms:
                bom.lines = await load_lines(conn, bom.id)
            return boms

    async def update_bom(self, bom: BOM) -> BOM:
        """Replace header fields and lines of a BOM no production references."""
        bom.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            if await is_referenced(conn, bom.id):
                raise BOMInUseError(bom.id)
            await conn.execute(
                """
                UPDATE boms SET
                    bom_name = ?, quantity = ?, description = ?,
                    is_active = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    bom.bom_name,
                    str(bom.quantity),
                    bom.description,
                    int(bom.is_active),
                    bom.updated_at.isoformat(),
                    bom.id,
                ),
            )
            await conn.execute("DELETE FROM bom_items WHERE bom_id = ?", (bom.id,))
            await self._insert_lines(conn, bom)

        logger.info("bom_stored", bom_id=bom.id, bom_no=bom.bom_no)
        return bom

    async def set_bom_active(self, bom_id: int, is_active: bool) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "UPDATE boms SET is_active = ?, updated_at = ? WHERE id = ?",
                (int(is_active), datetime.now(UTC).isoformat(), bom_id),
            )
            return cursor.rowcount > 0

    async def delete_bom(self, bom_id: int) -> bool:
        """Delete a BOM and its lines unless a production references it."""
        async with get_transaction() as conn:
            if await is_referenced(conn, bom_id):
                raise BOMInUseError(bom_id)
            cursor = await conn.execute("DELETE FROM boms WHERE id = ?", (bom_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("bom_deleted", bom_id=bom_id)
        return deleted

    async def _insert_lines(self, conn: aiosqlite.Connection, bom: BOM) -> None:
        for line in bom.lines:
            cursor = await conn.execute(
                "INSERT INTO bom_items (bom_id, item_id, quantity) VALUES (?, ?, ?)",
                (bom.id, line.item_id, str(line.quantity)),
            )
            line.id = cursor.lastrowid
