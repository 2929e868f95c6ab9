"""Abstract interface for item and warehouse reference data."""

from abc import ABC, abstractmethod

from src.core.entities.catalog import Item, Warehouse


class ICatalogStore(ABC):
    """Interface for item catalog and warehouse persistence."""

    @abstractmethod
    async def create_item(self, item: Item) -> Item:
        """Create a new item. Raises DuplicateCodeError on a taken code."""
        pass

    @abstractmethod
    async def get_item(self, item_id: int) -> Item | None:
        """Get an active item by ID."""
        pass

    @abstractmethod
    async def get_item_by_code(self, item_code: str) -> Item | None:
        """Get an active item by code."""
        pass

    @abstractmethod
    async def get_items(self, item_ids: list[int]) -> dict[int, Item]:
        """Batch lookup of active items keyed by ID; missing IDs are absent."""
        pass

    @abstractmethod
    async def list_items(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Item]:
        """List active items ordered by name."""
        pass

    @abstractmethod
    async def list_low_stock(self) -> list[Item]:
        """Active items at or below a positive reorder level, ordered by name."""
        pass

    @abstractmethod
    async def deactivate_item(self, item_id: int) -> None:
        """
        Soft-delete an item.

        Raises HasStockHistoryError when a movement for the item exists at
        the time of the write.
        """
        pass

    @abstractmethod
    async def create_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Create a new warehouse. Raises DuplicateCodeError on a taken code."""
        pass

    @abstractmethod
    async def get_warehouse(self, warehouse_id: int) -> Warehouse | None:
        """Get an active warehouse by ID."""
        pass

    @abstractmethod
    async def list_warehouses(self) -> list[Warehouse]:
        """List active warehouses ordered by name."""
        pass
