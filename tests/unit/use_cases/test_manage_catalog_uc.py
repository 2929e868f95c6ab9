"""Tests for catalog use cases."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import CreateItemRequest, CreateWarehouseRequest
from src.application.use_cases.manage_catalog import (
    CreateItemUseCase,
    CreateWarehouseUseCase,
    DeleteItemUseCase,
)
from src.core.entities import Item, Warehouse
from src.core.exceptions import DuplicateCodeError, HasStockHistoryError, UnknownItemError


@pytest.fixture
def mock_catalog_store():
    store = AsyncMock()
    store.get_item.return_value = Item(id=1, item_code="RM-SESAME", item_name="Sesame Seeds")
    return store


@pytest.fixture
def mock_ledger():
    ledger = AsyncMock()
    ledger.has_stock_history.return_value = False
    return ledger


class TestCreateItemUseCase:
    async def test_builds_item_from_request(self, mock_catalog_store):
        mock_catalog_store.create_item.side_effect = lambda item: item.model_copy(update={"id": 7})
        use_case = CreateItemUseCase(catalog_store=mock_catalog_store)

        item = await use_case.execute(
            CreateItemRequest(
                item_code="RM-SESAME", item_name="Sesame Seeds", unit_of_measure="Kg",
                standard_cost="2.5", is_raw_material=True,
            )
        )

        assert item.id == 7
        assert item.standard_cost == Decimal("2.5")
        assert item.is_raw_material is True

    async def test_duplicate_code_propagates(self, mock_catalog_store):
        mock_catalog_store.create_item.side_effect = DuplicateCodeError("Item", "RM-SESAME")
        with pytest.raises(DuplicateCodeError):
            await CreateItemUseCase(catalog_store=mock_catalog_store).execute(
                CreateItemRequest(item_code="RM-SESAME", item_name="Sesame Seeds")
            )


class TestCreateWarehouseUseCase:
    async def test_creates(self, mock_catalog_store):
        mock_catalog_store.create_warehouse.side_effect = lambda wh: wh.model_copy(
            update={"id": 2}
        )
        warehouse = await CreateWarehouseUseCase(catalog_store=mock_catalog_store).execute(
            CreateWarehouseRequest(warehouse_code="WH-STORE", warehouse_name="Store")
        )
        assert isinstance(warehouse, Warehouse)
        assert warehouse.id == 2


class TestDeleteItemUseCase:
    async def test_deactivates_unused_item(self, mock_catalog_store, mock_ledger):
        use_case = DeleteItemUseCase(catalog_store=mock_catalog_store, ledger=mock_ledger)
        await use_case.execute(1)
        mock_catalog_store.deactivate_item.assert_awaited_once_with(1)

    async def test_refuses_item_with_history(self, mock_catalog_store, mock_ledger):
        mock_ledger.has_stock_history.return_value = True
        use_case = DeleteItemUseCase(catalog_store=mock_catalog_store, ledger=mock_ledger)

        with pytest.raises(HasStockHistoryError):
            await use_case.execute(1)
        mock_catalog_store.deactivate_item.assert_not_called()

    async def test_unknown_item(self, mock_catalog_store, mock_ledger):
        mock_catalog_store.get_item.return_value = None
        use_case = DeleteItemUseCase(catalog_store=mock_catalog_store, ledger=mock_ledger)

        with pytest.raises(UnknownItemError):
            await use_case.execute(99)
        mock_ledger.has_stock_history.assert_not_called()

    async def test_history_recorded_after_check_still_refused(
        self, mock_catalog_store, mock_ledger
    ):
        mock_catalog_store.deactivate_item.side_effect = HasStockHistoryError(1)
        use_case = DeleteItemUseCase(catalog_store=mock_catalog_store, ledger=mock_ledger)

        with pytest.raises(HasStockHistoryError):
            await use_case.execute(1)
