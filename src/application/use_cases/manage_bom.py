"""Create and update Bill of Materials use cases."""

from src.application.dto.mappers import bom_to_response
from src.application.dto.requests import CreateBOMRequest, UpdateBOMRequest
from src.application.dto.responses import BOMResponse
from src.core.entities.bom import BOM
from src.core.services.bom_registry import BOMRegistry


class _BOMUseCase:
    def __init__(self, registry: BOMRegistry | None = None):
        self._registry = registry

    async def _get_registry(self) -> BOMRegistry:
        if self._registry is None:
            from src.application.services import get_bom_registry

            self._registry = await get_bom_registry()
        return self._registry

    def to_response(self, bom: BOM) -> BOMResponse:
        return bom_to_response(bom)


class CreateBOMUseCase(_BOMUseCase):
    """Validate and store a new recipe."""

    async def execute(self, request: CreateBOMRequest) -> BOM:
        registry = await self._get_registry()
        return await registry.create_bom(
            bom_name=request.bom_name,
            finished_item_id=request.finished_item_id,
            quantity=request.quantity,
            lines=[{"item_id": line.item_id, "quantity": line.quantity} for line in request.items],
            description=request.description,
        )


class UpdateBOMUseCase(_BOMUseCase):
    """Edit a recipe no production has used yet."""

    async def execute(self, bom_id: int, request: UpdateBOMRequest) -> BOM:
        registry = await self._get_registry()
        lines = (
            [{"item_id": line.item_id, "quantity": line.quantity} for line in request.items]
            if request.items is not None
            else None
        )
        return await registry.update_bom(
            bom_id,
            bom_name=request.bom_name,
            quantity=request.quantity,
            lines=lines,
            description=request.description,
            is_active=request.is_active,
        )
