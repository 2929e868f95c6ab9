"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path

import aiosqlite
import pytest

from src.infrastructure.storage.sqlite import connection as conn_module
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)


async def _make_table(pool: ConnectionPool) -> None:
    async with pool.acquire() as conn:
        await conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)")


class TestConnectionPoolInit:
    """Tests for ConnectionPool initialization."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool._initialized is False

    async def test_initialize_creates_directory(self, tmp_path: Path):
        """Initialize creates database directory if not exists."""
        db_path = tmp_path / "subdir" / "nested" / "ledger.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_idempotent(self, temp_db_path: Path):
        """Multiple initialize calls are safe."""
        pool = ConnectionPool(temp_db_path, pool_size=2)

        await pool.initialize()
        await pool.initialize()

        assert len(pool._connections) == 2
        assert pool._pool.qsize() == 2
        await pool.close()
        assert pool._initialized is False


class TestCreateConnection:
    """Tests for ConnectionPool._create_connection()."""

    async def test_pragmas(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, busy_timeout=1234)
        conn = await pool._create_connection()
        try:
            cursor = await conn.execute("PRAGMA journal_mode")
            assert (await cursor.fetchone())[0].lower() == "wal"
            cursor = await conn.execute("PRAGMA foreign_keys")
            assert (await cursor.fetchone())[0] == 1
            cursor = await conn.execute("PRAGMA busy_timeout")
            assert (await cursor.fetchone())[0] == 1234
        finally:
            await conn.close()

    async def test_autocommit_with_row_factory(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        conn = await pool._create_connection()
        try:
            assert conn.isolation_level is None
            assert conn.row_factory is aiosqlite.Row
        finally:
            await conn.close()


class TestAcquire:
    async def test_connection_returned_to_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.acquire():
            assert pool._pool.qsize() == 0
        assert pool._pool.qsize() == 1
        await pool.close()

    async def test_waits_for_free_connection(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        order: list[str] = []

        async def hold():
            async with pool.acquire():
                order.append("first")
                await asyncio.sleep(0.05)
                order.append("first_done")

        async def wait():
            await asyncio.sleep(0.01)
            async with pool.acquire():
                order.append("second")

        await asyncio.gather(hold(), wait())
        assert order == ["first", "first_done", "second"]
        await pool.close()


class TestTransaction:
    async def test_commit(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await _make_table(pool)

        async with pool.transaction() as conn:
            await conn.execute("INSERT INTO t (v) VALUES ('kept')")

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT v FROM t")
            assert [row["v"] for row in await cursor.fetchall()] == ["kept"]
        await pool.close()

    async def test_rollback_on_error(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await _make_table(pool)

        with pytest.raises(RuntimeError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO t (v) VALUES ('lost')")
                raise RuntimeError("boom")

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 0
            assert conn.in_transaction is False
        await pool.close()


class TestGlobalPool:
    async def test_get_pool_uses_settings(self):
        pool = await get_pool()
        try:
            assert pool.db_path.name == "ledger.db"
            assert await get_pool() is pool
        finally:
            await close_pool()
        assert conn_module._pool is None

    async def test_module_helpers(self):
        try:
            async with get_transaction() as conn:
                await conn.execute("CREATE TABLE t (v TEXT)")
                await conn.execute("INSERT INTO t VALUES ('x')")
            async with get_connection() as conn:
                cursor = await conn.execute("SELECT v FROM t")
                assert (await cursor.fetchone())["v"] == "x"
        finally:
            await close_pool()
