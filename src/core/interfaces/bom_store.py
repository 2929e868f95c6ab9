"""Abstract interface for BOM storage."""

from abc import ABC, abstractmethod

from src.core.entities.bom import BOM


class IBOMStore(ABC):
    """Interface for Bill of Materials persistence."""

    @abstractmethod
    async def create_bom(self, bom: BOM, number_width: int = 4) -> BOM:
        """Create a BOM and its lines, assigning bom_no."""
        pass

    @abstractmethod
    async def get_bom(self, bom_id: int) -> BOM | None:
        """Get a BOM with resolved lines."""
        pass

    @abstractmethod
    async def list_boms(
        self, active_only: bool = False, finished_item_id: int | None = None
    ) -> list[BOM]:
        """List BOMs newest first, optionally for one finished item."""
        pass

    @abstractmethod
    async def update_bom(self, bom: BOM) -> BOM:
        """
        Replace a BOM's header fields and lines.

        Raises BOMInUseError when a production references the BOM at the
        time of the write.
        """
        pass

    @abstractmethod
    async def set_bom_active(self, bom_id: int, is_active: bool) -> bool:
        """Toggle the active flag. Returns False if the BOM does not exist."""
        pass

    @abstractmethod
    async def delete_bom(self, bom_id: int) -> bool:
        """
        Delete an unreferenced BOM with its lines.

        Raises BOMInUseError when a production references it. Returns False
        if the BOM does not exist.
        """
        pass
