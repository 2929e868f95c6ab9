"""Document number counters kept in the sequences table."""

import aiosqlite


def sequence_key(prefix: str, year: int) -> str:
    return f"{prefix}-{year}"


async def next_sequence(conn: aiosqlite.Connection, prefix: str, year: int) -> int:
    """
    Advance and return the counter for (prefix, year).

    Must run inside the caller's write transaction so the number is only
    consumed if the transaction commits.
    """
    key = sequence_key(prefix, year)
    await conn.execute("INSERT OR IGNORE INTO sequences (key, value) VALUES (?, 0)", (key,))
    await conn.execute("UPDATE sequences SET value = value + 1 WHERE key = ?", (key,))
    cursor = await conn.execute("SELECT value FROM sequences WHERE key = ?", (key,))
    row = await cursor.fetchone()
    return row[0]
