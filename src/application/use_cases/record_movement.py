"""Record Movement Use Case: one PURCHASE, SALE or ADJUSTMENT row."""

from dataclasses import dataclass

from src.application.dto.mappers import movement_to_response
from src.application.dto.requests import RecordMovementRequest
from src.application.dto.responses import RecordMovementResponse
from src.config import get_logger
from src.core.entities.inventory import StockBalance, StockMovement
from src.core.services.stock_ledger import StockLedger

logger = get_logger(__name__)


@dataclass
class RecordMovementResult:
    """Result of recording a movement."""

    movement: StockMovement
    balance: StockBalance


class RecordMovementUseCase:
    """Append a movement to the ledger and update the pair balance."""

    def __init__(self, ledger: StockLedger | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from src.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def execute(self, request: RecordMovementRequest) -> RecordMovementResult:
        """Execute record movement use case."""
        logger.info(
            "record_movement_started",
            item_id=request.item_id,
            warehouse_id=request.warehouse_id,
            type=request.movement_type.value,
            quantity=str(request.quantity),
        )

        ledger = await self._get_ledger()
        movement, balance = await ledger.record_movement(
            item_id=request.item_id,
            warehouse_id=request.warehouse_id,
            quantity=request.quantity,
            movement_type=request.movement_type,
            movement_date=request.transaction_date,
            unit_cost=request.unit_cost,
            reference_doctype=request.reference_doctype,
            reference_docno=request.reference_docno,
            remarks=request.remarks,
            allow_negative=request.allow_negative,
        )
        return RecordMovementResult(movement=movement, balance=balance)

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        """Convert result to API response."""
        base = movement_to_response(result.movement)
        return RecordMovementResponse(
            **base.model_dump(),
            balance_after=result.balance.quantity,
            avg_cost_after=result.balance.avg_cost,
        )
