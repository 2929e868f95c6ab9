"""Unit tests for the StockLedger service."""

from datetime import date
from decimal import Decimal

import pytest

from src.config import LedgerSettings
from src.core.entities import MovementFilters, MovementType, StockBalance
from src.core.exceptions import (
    CommitFailedError,
    InsufficientStockError,
    InvalidQuantityError,
    UnknownItemError,
    UnknownWarehouseError,
    ValidationError,
)
from src.core.services import StockLedger


async def _purchase(ledger: StockLedger, qty="100", cost="2", item_id=1, wh=1, day=None):
    return await ledger.record_movement(
        item_id=item_id,
        warehouse_id=wh,
        quantity=qty,
        movement_type=MovementType.PURCHASE,
        unit_cost=cost,
        movement_date=day,
    )


class TestRecordMovement:
    async def test_purchase_then_sale(self, ledger, ledger_store):
        await _purchase(ledger, "500")
        movement, balance = await ledger.record_movement(
            item_id=1, warehouse_id=1, quantity="-50", movement_type=MovementType.SALE
        )

        assert balance.quantity == Decimal("450")
        assert str(balance.quantity) == "450.0000"
        assert movement.quantity == Decimal("-50")
        assert movement.unit_cost == Decimal("2")
        assert await ledger.get_balance(1, 1) == Decimal("450")

    async def test_assigns_sequential_numbers(self, ledger):
        first, _ = await _purchase(ledger)
        second, _ = await _purchase(ledger)
        year = date.today().year
        assert first.movement_no == f"STK-{year}-0001"
        assert second.movement_no == f"STK-{year}-0002"

    async def test_quantity_rounded_half_up(self, ledger):
        movement, _ = await _purchase(ledger, "1.00005")
        assert movement.quantity == Decimal("1.0001")

    @pytest.mark.parametrize("qty", ["0", 0, "0.00001"])
    async def test_zero_quantity_rejected(self, ledger, ledger_store, qty):
        with pytest.raises(InvalidQuantityError):
            await ledger.record_movement(
                item_id=1, warehouse_id=1, quantity=qty, movement_type=MovementType.ADJUSTMENT
            )
        assert ledger_store.movements == []

    async def test_non_numeric_quantity_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.record_movement(
                item_id=1, warehouse_id=1, quantity="NaN", movement_type=MovementType.ADJUSTMENT
            )

    @pytest.mark.parametrize("qty", ["1e25", "-1e25", "1e15"])
    async def test_out_of_range_quantity_rejected(self, ledger, ledger_store, qty):
        with pytest.raises(ValidationError) as exc_info:
            await ledger.record_movement(
                item_id=1, warehouse_id=1, quantity=qty, movement_type=MovementType.ADJUSTMENT
            )
        assert exc_info.value.code == "VALIDATION_ERROR"
        assert ledger_store.movements == []

    async def test_out_of_range_cost_rejected(self, ledger, ledger_store):
        with pytest.raises(ValidationError) as exc_info:
            await _purchase(ledger, "1", cost="1e25")
        assert exc_info.value.details["field"] == "unit_cost"
        assert ledger_store.movements == []


    async def test_purchase_must_be_positive(self, ledger):
        with pytest.raises(InvalidQuantityError):
            await _purchase(ledger, "-5")

    async def test_sale_must_be_negative(self, ledger):
        with pytest.raises(InvalidQuantityError):
            await ledger.record_movement(
                item_id=1, warehouse_id=1, quantity="5", movement_type=MovementType.SALE
            )

    @pytest.mark.parametrize("movement_type", [MovementType.PRODUCTION, MovementType.TRANSFER])
    async def test_composite_types_rejected(self, ledger, movement_type):
        with pytest.raises(ValidationError) as exc_info:
            await ledger.record_movement(
                item_id=1, warehouse_id=1, quantity="5", movement_type=movement_type
            )
        assert exc_info.value.details["field"] == "movement_type"

    async def test_unknown_item(self, ledger, ledger_store):
        with pytest.raises(UnknownItemError):
            await _purchase(ledger, item_id=99)
        assert ledger_store.movements == []

    async def test_unknown_warehouse(self, ledger):
        with pytest.raises(UnknownWarehouseError):
            await _purchase(ledger, wh=99)

    async def test_item_deactivated_before_commit(self, ledger, ledger_store):
        ledger_store.state["inactive_items"].add(1)
        with pytest.raises(UnknownItemError):
            await _purchase(ledger, "10")
        assert ledger_store.movements == []
        assert ledger_store.balance(1, 1) is None


    async def test_cost_defaults_to_standard_cost(self, ledger):
        movement, balance = await _purchase(ledger, "10", cost=None)
        assert movement.unit_cost == Decimal("2.5")
        assert balance.avg_cost == Decimal("2.5")

    async def test_negative_cost_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await _purchase(ledger, "10", cost="-1")

    async def test_outward_movement_carries_average_cost(self, ledger):
        await _purchase(ledger, "10", "2")
        await _purchase(ledger, "10", "4")
        movement, balance = await ledger.record_movement(
            item_id=1, warehouse_id=1, quantity="-5", movement_type=MovementType.SALE,
            unit_cost="99",
        )
        assert movement.unit_cost == Decimal("3.0000")
        assert balance.avg_cost == Decimal("3.0000")


class TestNegativeStockPolicy:
    async def test_insufficient_stock_rejected_and_nothing_written(self, ledger, ledger_store):
        await _purchase(ledger, "10")

        with pytest.raises(InsufficientStockError) as exc_info:
            await ledger.record_movement(
                item_id=1, warehouse_id=1, quantity="-11", movement_type=MovementType.SALE
            )

        assert exc_info.value.details["available"] == "10.0000"
        assert exc_info.value.details["requested"] == "11.0000"
        assert len(ledger_store.movements) == 1
        assert ledger_store.balance(1, 1).quantity == Decimal("10")

    async def test_override_flag_allows_negative(self, ledger):
        _, balance = await ledger.record_movement(
            item_id=1,
            warehouse_id=1,
            quantity="-3",
            movement_type=MovementType.ADJUSTMENT,
            allow_negative=True,
        )
        assert balance.quantity == Decimal("-3")

    async def test_reject_policy_ignores_flag(self, ledger_store, catalog_store):
        ledger = StockLedger(
            ledger_store, catalog_store, LedgerSettings(negative_stock_policy="reject")
        )
        with pytest.raises(InsufficientStockError):
            await ledger.record_movement(
                item_id=1,
                warehouse_id=1,
                quantity="-3",
                movement_type=MovementType.ADJUSTMENT,
                allow_negative=True,
            )

    async def test_allow_policy_needs_no_flag(self, ledger_store, catalog_store):
        ledger = StockLedger(
            ledger_store, catalog_store, LedgerSettings(negative_stock_policy="allow")
        )
        _, balance = await ledger.record_movement(
            item_id=1, warehouse_id=1, quantity="-3", movement_type=MovementType.ADJUSTMENT
        )
        assert balance.quantity == Decimal("-3")


class TestCommitFailure:
    async def test_failed_commit_leaves_state_untouched(self, ledger, ledger_store):
        await _purchase(ledger, "10")
        ledger_store.fail_commit = True

        with pytest.raises(CommitFailedError):
            await _purchase(ledger, "5")

        assert len(ledger_store.movements) == 1
        assert ledger_store.balance(1, 1).quantity == Decimal("10")


class TestTransfer:
    async def test_moves_stock_at_source_cost(self, ledger, ledger_store):
        await _purchase(ledger, "20", "3")

        result = await ledger.record_transfer(
            item_id=1, from_warehouse_id=1, to_warehouse_id=2, quantity="8"
        )

        assert result.reference.startswith("TRF-")
        assert result.outgoing.quantity == Decimal("-8")
        assert result.incoming.quantity == Decimal("8")
        assert result.outgoing.unit_cost == result.incoming.unit_cost == Decimal("3")
        assert result.outgoing.reference_docno == result.reference
        assert result.source_balance.quantity == Decimal("12")
        assert result.destination_balance.quantity == Decimal("8")
        assert result.destination_balance.avg_cost == Decimal("3")
        assert {m.movement_type for m in ledger_store.movements[1:]} == {MovementType.TRANSFER}

    async def test_same_warehouse_rejected(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.record_transfer(
                item_id=1, from_warehouse_id=1, to_warehouse_id=1, quantity="1"
            )

    async def test_non_positive_quantity_rejected(self, ledger):
        with pytest.raises(InvalidQuantityError):
            await ledger.record_transfer(
                item_id=1, from_warehouse_id=1, to_warehouse_id=2, quantity="-1"
            )

    async def test_insufficient_source_writes_neither_leg(self, ledger, ledger_store):
        await _purchase(ledger, "2")
        with pytest.raises(InsufficientStockError):
            await ledger.record_transfer(
                item_id=1, from_warehouse_id=1, to_warehouse_id=2, quantity="5"
            )
        assert len(ledger_store.movements) == 1
        assert ledger_store.balance(1, 2) is None


class TestQueries:
    async def test_balance_of_unmoved_pair_is_zero(self, ledger):
        assert await ledger.get_balance(1, 2) == Decimal("0")
        snapshot = await ledger.get_balance_snapshot(1, 2)
        assert snapshot.quantity == Decimal("0")

    async def test_list_movements_newest_first(self, ledger):
        await _purchase(ledger, "1", day=date(2026, 1, 1))
        await _purchase(ledger, "2", day=date(2026, 1, 3))
        await _purchase(ledger, "3", day=date(2026, 1, 2))

        log = ledger.list_movements(MovementFilters(item_id=1))
        quantities = [m.quantity for m in await log.to_list()]
        assert quantities == [Decimal("2"), Decimal("3"), Decimal("1")]

        # restartable
        again = [m.quantity async for m in log]
        assert again == quantities

    async def test_has_stock_history(self, ledger):
        assert await ledger.has_stock_history(1) is False
        await _purchase(ledger, "1")
        assert await ledger.has_stock_history(1) is True


class TestRebuild:
    async def test_consistent_cache(self, ledger):
        await _purchase(ledger, "10", "2")
        await _purchase(ledger, "10", "4")
        report = await ledger.verify_balances()
        assert report.consistent
        assert report.movements_replayed == 2
        assert report.applied is False

    async def test_rebuild_repairs_drift_and_orphans(self, ledger, ledger_store):
        await _purchase(ledger, "10", "2")
        ledger_store.state["balances"][(1, 1)] = StockBalance(
            item_id=1, warehouse_id=1, quantity=Decimal("999"), avg_cost=Decimal("2")
        )
        ledger_store.state["balances"][(2, 2)] = StockBalance(
            item_id=2, warehouse_id=2, quantity=Decimal("5")
        )

        report = await ledger.rebuild_balances()

        assert report.applied is True
        assert {(m.item_id, m.warehouse_id) for m in report.mismatches} == {(1, 1), (2, 2)}
        orphan = next(m for m in report.mismatches if m.item_id == 2)
        assert orphan.replayed_quantity is None
        assert ledger_store.balance(1, 1).quantity == Decimal("10")
        assert ledger_store.balance(2, 2) is None

        second = await ledger.rebuild_balances()
        assert second.consistent
