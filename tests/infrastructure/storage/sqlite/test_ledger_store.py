"""Tests for SQLiteLedgerStore against a migrated database."""

from datetime import date, timedelta
from decimal import Decimal

import aiosqlite
import pytest

from src.core.entities import MovementFilters, MovementType, StockBalance, StockMovement
from src.core.exceptions import CommitFailedError
from src.infrastructure.storage.sqlite.connection import get_connection


def _movement(seed, no: str, qty: str, day: date, **kwargs) -> StockMovement:
    return StockMovement(
        movement_no=no,
        item_id=kwargs.pop("item_id", seed.sesame.id),
        warehouse_id=kwargs.pop("warehouse_id", seed.main.id),
        movement_type=kwargs.pop("movement_type", MovementType.ADJUSTMENT),
        quantity=Decimal(qty),
        unit_cost=Decimal("1.5000"),
        movement_date=day,
        **kwargs,
    )


class TestSequences:
    async def test_numbers_per_prefix_and_year(self, services):
        store = services.ledger_store
        async with store.write_session() as session:
            first = await session.next_number("STK", 2026)
            second = await session.next_number("STK", 2026)
            other_prefix = await session.next_number("PROD", 2026)
            other_year = await session.next_number("STK", 2027)

        assert (first, second, other_prefix, other_year) == (1, 2, 1, 1)

    async def test_rolled_back_numbers_are_reused(self, services):
        store = services.ledger_store
        with pytest.raises(RuntimeError):
            async with store.write_session() as session:
                await session.next_number("STK", 2026)
                raise RuntimeError("abort")

        async with store.write_session() as session:
            assert await session.next_number("STK", 2026) == 1


class TestMovements:
    async def test_insert_and_read_back(self, services, seed):
        store = services.ledger_store
        async with store.write_session() as session:
            saved = await session.insert_movement(
                _movement(seed, "STK-2026-0001", "12.5000", date(2026, 2, 1), remarks="count")
            )

        assert saved.id is not None
        [row] = await services.ledger.list_movements().to_list()
        assert row.quantity == Decimal("12.5000")
        assert str(row.quantity) == "12.5000"
        assert row.item_code == "RM-SESAME"
        assert row.warehouse_code == "WH-MAIN"
        assert row.remarks == "count"
        assert await store.count_movements(seed.sesame.id) == 1

    async def test_log_is_immutable(self, services, seed):
        async with services.ledger_store.write_session() as session:
            await session.insert_movement(_movement(seed, "STK-2026-0001", "1", date(2026, 1, 1)))

        async with get_connection() as conn:
            with pytest.raises(aiosqlite.Error, match="immutable"):
                await conn.execute("UPDATE stock_movements SET quantity = '9'")
            with pytest.raises(aiosqlite.Error, match="immutable"):
                await conn.execute("DELETE FROM stock_movements")

    async def test_storage_error_becomes_commit_failed(self, services, seed):
        with pytest.raises(CommitFailedError) as exc_info:
            async with services.ledger_store.write_session() as session:
                await session.insert_movement(
                    _movement(seed, "STK-2026-0001", "1", date(2026, 1, 1), item_id=999)
                )

        assert "nothing was applied" in exc_info.value.message
        assert await services.ledger_store.count_movements(999) == 0


class TestIterMovements:
    @pytest.fixture
    async def thirty_days(self, services, seed):
        start = date(2026, 1, 1)
        async with services.ledger_store.write_session() as session:
            for i in range(30):
                await session.insert_movement(
                    _movement(seed, f"STK-2026-{i + 1:04d}", str(i + 1), start + timedelta(days=i % 10))
                )
        return services.ledger_store

    async def test_keyset_pages_cover_everything_once(self, thirty_days):
        rows = [m async for m in thirty_days.iter_movements(MovementFilters(), page_size=7)]

        assert len(rows) == 30
        assert len({m.id for m in rows}) == 30
        keys = [(m.movement_date, m.id) for m in rows]
        assert keys == sorted(keys, reverse=True)

    async def test_limit_spans_pages(self, thirty_days):
        rows = [m async for m in thirty_days.iter_movements(MovementFilters(limit=11), page_size=4)]
        assert len(rows) == 11

    async def test_date_and_reference_filters(self, thirty_days, services, seed):
        day = date(2026, 1, 3)
        rows = [
            m
            async for m in thirty_days.iter_movements(
                MovementFilters(date_from=day, date_to=day), page_size=2
            )
        ]
        assert {m.movement_date for m in rows} == {day}
        assert len(rows) == 3

        async with services.ledger_store.write_session() as session:
            await session.insert_movement(
                _movement(
                    seed, "STK-2026-0099", "1", day,
                    reference_docno="SO-1", warehouse_id=seed.store.id,
                )
            )
        by_ref = [
            m async for m in thirty_days.iter_movements(MovementFilters(reference_docno="SO-1"))
        ]
        assert [m.movement_no for m in by_ref] == ["STK-2026-0099"]
        by_wh = [
            m async for m in thirty_days.iter_movements(MovementFilters(warehouse_id=seed.store.id))
        ]
        assert len(by_wh) == 1


class TestBalances:
    async def test_upsert_and_replace(self, services, seed):
        store = services.ledger_store
        balance = StockBalance(
            item_id=seed.sesame.id,
            warehouse_id=seed.main.id,
            quantity=Decimal("450.0000"),
            avg_cost=Decimal("2.0000"),
            last_movement_date=date(2026, 1, 5),
        )
        async with store.write_session() as session:
            await session.save_balance(balance)
            await session.save_balance(balance.model_copy(update={"quantity": Decimal("400.0000")}))

        stored = await store.get_balance(seed.sesame.id, seed.main.id)
        assert str(stored.quantity) == "400.0000"
        assert stored.last_movement_date == date(2026, 1, 5)
        assert await store.get_balance(seed.sesame.id, seed.store.id) is None

        async with store.write_session() as session:
            await session.replace_balances([])
        assert await store.list_balances() == []


class TestProductions:
    async def test_get_production_loads_inputs_and_movements(self, services, seed):
        ledger = services.ledger
        await ledger.record_movement(
            item_id=seed.sesame.id, warehouse_id=seed.main.id, quantity="10",
            movement_type=MovementType.PURCHASE, unit_cost="2",
        )
        run = await services.production.record_production(
            output_item_id=seed.oil.id,
            output_quantity="2",
            warehouse_id=seed.main.id,
            input_items=[{"item_id": seed.sesame.id, "quantity": "4"}],
        )

        loaded = await services.ledger_store.get_production(run.id)

        assert loaded.production_no == run.production_no
        assert loaded.output_item_code == "FG-OIL"
        assert [(i.item_code, i.quantity) for i in loaded.inputs] == [
            ("RM-SESAME", Decimal("4"))
        ]
        assert [m.quantity for m in loaded.movements] == [Decimal("-4"), Decimal("2")]
        assert await services.ledger_store.get_production(run.id + 1) is None

        listed = await services.ledger_store.list_productions(output_item_id=seed.oil.id)
        assert [r.id for r in listed] == [run.id]
        assert listed[0].inputs[0].item_id == seed.sesame.id
        assert await services.ledger_store.list_productions(warehouse_id=seed.store.id) == []

    async def test_is_bom_referenced(self, services, seed):
        bom = await services.boms.create_bom(
            "Oil", seed.oil.id, "1", [{"item_id": seed.sesame.id, "quantity": "2"}]
        )
        assert await services.ledger_store.is_bom_referenced(bom.id) is False

        await services.production.record_production(
            output_item_id=seed.oil.id, output_quantity="1", warehouse_id=seed.main.id,
            bom_id=bom.id, allow_negative=True,
        )
        assert await services.ledger_store.is_bom_referenced(bom.id) is True

    async def test_production_summary(self, services, seed):
        for qty, day in (("1.5", 3), ("2.25", 1)):
            await services.production.record_production(
                output_item_id=seed.oil.id,
                output_quantity=qty,
                warehouse_id=seed.main.id,
                production_date=date(2026, 2, day),
                input_items=[{"item_id": seed.sesame.id, "quantity": "1"}],
                allow_negative=True,
            )

        summary = await services.ledger_store.production_summary(seed.oil.id)

        assert summary.production_count == 2
        assert summary.total_quantity == Decimal("3.75")
        assert summary.first_production_date == date(2026, 2, 1)
        assert summary.last_production_date == date(2026, 2, 3)

        empty = await services.ledger_store.production_summary(seed.sesame.id)
        assert (empty.production_count, empty.total_quantity) == (0, Decimal("0"))
        assert empty.first_production_date is None


class TestSessionReads:
    async def test_get_bom_inside_session(self, services, seed):
        bom = await services.boms.create_bom(
            "Oil", seed.oil.id, "2", [{"item_id": seed.sesame.id, "quantity": "3"}]
        )
        async with services.ledger_store.write_session() as session:
            loaded = await session.get_bom(bom.id)
            missing = await session.get_bom(bom.id + 1)

        assert loaded.finished_item_code == "FG-OIL"
        assert [(line.item_code, line.quantity) for line in loaded.lines] == [
            ("RM-SESAME", Decimal("3"))
        ]
        assert missing is None

    async def test_active_item_ids(self, services, seed):
        await services.catalog.deactivate_item(seed.bottle.id)
        async with services.ledger_store.write_session() as session:
            active = await session.active_item_ids([seed.sesame.id, seed.bottle.id, 999])
            none = await session.active_item_ids([])

        assert active == {seed.sesame.id}
        assert none == set()
