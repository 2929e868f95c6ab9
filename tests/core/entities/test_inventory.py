"""Tests for ledger domain entities."""

from datetime import date
from decimal import Decimal

from src.core.entities import (
    BalanceMismatch,
    Item,
    MovementType,
    ProductionInput,
    ProductionRun,
    ProductionStatus,
    RebuildReport,
    StockBalance,
    StockMovement,
)


class TestStockMovement:
    def test_value_is_signed(self):
        m = StockMovement(
            item_id=1,
            warehouse_id=1,
            movement_type=MovementType.SALE,
            quantity=Decimal("-3"),
            unit_cost=Decimal("2.5"),
        )
        assert m.value == Decimal("-7.5")
        assert m.is_inward is False

    def test_defaults(self):
        m = StockMovement(
            item_id=1,
            warehouse_id=1,
            movement_type=MovementType.PURCHASE,
            quantity=Decimal("1"),
        )
        assert m.movement_no is None
        assert m.unit_cost == Decimal("0")
        assert m.movement_date == date.today()

    def test_movement_type_values(self):
        assert {t.value for t in MovementType} == {
            "PURCHASE",
            "SALE",
            "PRODUCTION",
            "TRANSFER",
            "ADJUSTMENT",
        }


class TestStockBalance:
    def test_total_value(self):
        b = StockBalance(
            item_id=1, warehouse_id=1, quantity=Decimal("4"), avg_cost=Decimal("2.25")
        )
        assert b.total_value == Decimal("9.00")

    def test_defaults_to_zero(self):
        b = StockBalance(item_id=1, warehouse_id=1)
        assert b.quantity == 0
        assert b.last_movement_date is None


class TestItem:
    def test_low_stock_requires_reorder_level(self):
        assert Item(item_code="A", item_name="A").is_low_stock is False

    def test_low_stock_below_reorder_level(self):
        item = Item(
            item_code="A",
            item_name="A",
            reorder_level=Decimal("10"),
            current_stock=Decimal("9.5"),
        )
        assert item.is_low_stock is True

    def test_low_stock_at_reorder_level(self):
        item = Item(
            item_code="A",
            item_name="A",
            reorder_level=Decimal("10"),
            current_stock=Decimal("10"),
        )
        assert item.is_low_stock is True

    def test_above_reorder_level_is_not_low(self):
        item = Item(
            item_code="A",
            item_name="A",
            reorder_level=Decimal("10"),
            current_stock=Decimal("10.0001"),
        )
        assert item.is_low_stock is False


class TestRebuildReport:
    def test_consistent_without_mismatches(self):
        assert RebuildReport(movements_replayed=3, pairs=1).consistent is True

    def test_inconsistent_with_mismatch(self):
        report = RebuildReport(
            mismatches=[BalanceMismatch(1, 1, Decimal("5"), Decimal("4"))]
        )
        assert report.consistent is False


class TestProductionRun:
    def test_defaults_pending(self):
        run = ProductionRun(
            output_item_id=3,
            output_quantity=Decimal("5"),
            warehouse_id=1,
            raw_materials_warehouse_id=1,
            production_date=date(2026, 3, 1),
        )
        assert run.status == ProductionStatus.PENDING
        assert run.inputs == []

    def test_total_input_cost(self):
        run = ProductionRun(
            output_item_id=3,
            output_quantity=Decimal("5"),
            warehouse_id=1,
            raw_materials_warehouse_id=1,
            production_date=date(2026, 3, 1),
            inputs=[
                ProductionInput(
                    item_id=1, quantity=Decimal("5"), warehouse_id=1, unit_cost=Decimal("2")
                ),
                ProductionInput(
                    item_id=2, quantity=Decimal("5"), warehouse_id=1, unit_cost=Decimal("0.4")
                ),
            ],
        )
        assert run.total_input_cost == Decimal("12.0")
