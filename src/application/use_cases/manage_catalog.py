"""Item and warehouse catalog use cases."""

from src.application.dto.requests import CreateItemRequest, CreateWarehouseRequest
from src.config import get_logger
from src.core.entities.catalog import Item, Warehouse
from src.core.exceptions import HasStockHistoryError, UnknownItemError
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.services.stock_ledger import StockLedger

logger = get_logger(__name__)


class _CatalogUseCase:
    def __init__(self, catalog_store: ICatalogStore | None = None):
        self._catalog_store = catalog_store

    async def _get_catalog_store(self) -> ICatalogStore:
        if self._catalog_store is None:
            from src.infrastructure.storage.sqlite import get_catalog_store

            self._catalog_store = await get_catalog_store()
        return self._catalog_store


class CreateItemUseCase(_CatalogUseCase):
    """Register a stock-keeping item."""

    async def execute(self, request: CreateItemRequest) -> Item:
        store = await self._get_catalog_store()
        item = Item(**request.model_dump())
        return await store.create_item(item)


class CreateWarehouseUseCase(_CatalogUseCase):
    """Register a warehouse."""

    async def execute(self, request: CreateWarehouseRequest) -> Warehouse:
        store = await self._get_catalog_store()
        return await store.create_warehouse(Warehouse(**request.model_dump()))


class DeleteItemUseCase(_CatalogUseCase):
    """Soft-delete an item that has never moved."""

    def __init__(
        self,
        catalog_store: ICatalogStore | None = None,
        ledger: StockLedger | None = None,
    ):
        super().__init__(catalog_store)
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from src.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def execute(self, item_id: int) -> None:
        store = await self._get_catalog_store()
        if await store.get_item(item_id) is None:
            raise UnknownItemError(item_id)

        ledger = await self._get_ledger()
        if await ledger.has_stock_history(item_id):
            logger.warning("item_delete_refused", item_id=item_id)
            raise HasStockHistoryError(item_id)

        await store.deactivate_item(item_id)
