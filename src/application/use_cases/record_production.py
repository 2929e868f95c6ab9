"""Record Production Use Case: consume inputs and add the output atomically."""

from src.application.dto.mappers import production_to_response
from src.application.dto.requests import RecordProductionRequest
from src.application.dto.responses import ProductionResponse
from src.config import get_logger
from src.core.entities.production import ProductionRun
from src.core.services.production import ProductionOrchestrator

logger = get_logger(__name__)


class RecordProductionUseCase:
    """Record a production run from a BOM or an explicit input list."""

    def __init__(self, orchestrator: ProductionOrchestrator | None = None):
        self._orchestrator = orchestrator

    async def _get_orchestrator(self) -> ProductionOrchestrator:
        if self._orchestrator is None:
            from src.application.services import get_production_orchestrator

            self._orchestrator = await get_production_orchestrator()
        return self._orchestrator

    async def execute(self, request: RecordProductionRequest) -> ProductionRun:
        """Execute record production use case."""
        logger.info(
            "record_production_started",
            output_item_id=request.output_item_id,
            output_quantity=str(request.output_quantity),
            bom_id=request.bom_id,
        )

        orchestrator = await self._get_orchestrator()
        input_items = (
            [{"item_id": line.item_id, "quantity": line.quantity} for line in request.input_items]
            if request.input_items
            else None
        )
        return await orchestrator.record_production(
            output_item_id=request.output_item_id,
            output_quantity=request.output_quantity,
            warehouse_id=request.warehouse_id,
            production_date=request.production_date,
            bom_id=request.bom_id,
            input_items=input_items,
            raw_materials_warehouse_id=request.raw_materials_warehouse_id,
            remarks=request.remarks,
            allow_negative=request.allow_negative,
        )

    def to_response(self, run: ProductionRun) -> ProductionResponse:
        """Convert result to API response."""
        return production_to_response(run)
