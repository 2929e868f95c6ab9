"""Abstract interface for the stock movement log and balance projection."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from datetime import date

from src.core.entities.bom import BOM
from src.core.entities.inventory import MovementFilters, StockBalance, StockMovement
from src.core.entities.production import ProductionRun, ProductionSummary


class ILedgerSession(ABC):
    """
    Operations available inside one serialized write transaction.

    Everything done through a session commits together or not at all.
    """

    @abstractmethod
    async def get_balance(self, item_id: int, warehouse_id: int) -> StockBalance | None:
        """Read the cached balance for a pair."""
        pass

    @abstractmethod
    async def save_balance(self, balance: StockBalance) -> None:
        """Insert or update the cached balance for a pair."""
        pass

    @abstractmethod
    async def get_bom(self, bom_id: int) -> BOM | None:
        """Read a BOM with its lines as of this transaction."""
        pass

    @abstractmethod
    async def active_item_ids(self, item_ids: list[int]) -> set[int]:
        """Subset of item_ids that are still active."""
        pass

    @abstractmethod
    async def next_number(self, prefix: str, year: int) -> int:
        """Advance and return the counter for (prefix, year)."""
        pass

    @abstractmethod
    async def insert_movement(self, movement: StockMovement) -> StockMovement:
        """Append a movement row."""
        pass

    @abstractmethod
    async def insert_production(self, run: ProductionRun) -> ProductionRun:
        """Persist a production header and its inputs."""
        pass

    @abstractmethod
    async def all_movements(self) -> list[StockMovement]:
        """Full movement log in insertion order."""
        pass

    @abstractmethod
    async def all_balances(self) -> list[StockBalance]:
        """Every cached balance row."""
        pass

    @abstractmethod
    async def replace_balances(self, balances: list[StockBalance]) -> None:
        """Replace the whole balance projection."""
        pass


class ILedgerStore(ABC):
    """Interface for ledger persistence."""

    @abstractmethod
    def write_session(self) -> AbstractAsyncContextManager[ILedgerSession]:
        """
        Open a serialized write transaction.

        Storage failures roll back and raise CommitFailedError.
        """
        pass

    @abstractmethod
    async def get_balance(self, item_id: int, warehouse_id: int) -> StockBalance | None:
        """Read the cached balance for a pair."""
        pass

    @abstractmethod
    async def list_balances(
        self, item_id: int | None = None, warehouse_id: int | None = None
    ) -> list[StockBalance]:
        """List cached balances, optionally filtered."""
        pass

    @abstractmethod
    def iter_movements(
        self, filters: MovementFilters, page_size: int = 200
    ) -> AsyncIterator[StockMovement]:
        """Stream movements newest first (date DESC, number DESC)."""
        pass

    @abstractmethod
    async def count_movements(self, item_id: int) -> int:
        """Count recorded movements for an item across warehouses."""
        pass

    @abstractmethod
    async def get_production(self, production_id: int) -> ProductionRun | None:
        """Get a committed production with inputs and movements."""
        pass

    @abstractmethod
    async def list_productions(
        self,
        output_item_id: int | None = None,
        warehouse_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 100,
    ) -> list[ProductionRun]:
        """List committed productions newest first."""
        pass

    @abstractmethod
    async def is_bom_referenced(self, bom_id: int) -> bool:
        """Whether any recorded production used this BOM."""
        pass

    @abstractmethod
    async def production_summary(self, output_item_id: int) -> ProductionSummary:
        """Count, total output and date range of productions for an item."""
        pass
