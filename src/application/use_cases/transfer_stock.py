"""Transfer Stock Use Case: move stock between warehouses at source cost."""

from src.application.dto.mappers import movement_to_response
from src.application.dto.requests import TransferStockRequest
from src.application.dto.responses import TransferResponse
from src.config import get_logger
from src.core.services.stock_ledger import StockLedger, TransferResult

logger = get_logger(__name__)


class TransferStockUseCase:
    """Record both legs of a warehouse transfer atomically."""

    def __init__(self, ledger: StockLedger | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from src.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def execute(self, request: TransferStockRequest) -> TransferResult:
        ledger = await self._get_ledger()
        return await ledger.record_transfer(
            item_id=request.item_id,
            from_warehouse_id=request.from_warehouse_id,
            to_warehouse_id=request.to_warehouse_id,
            quantity=request.quantity,
            movement_date=request.transaction_date,
            remarks=request.remarks,
            allow_negative=request.allow_negative,
        )

    def to_response(self, result: TransferResult) -> TransferResponse:
        return TransferResponse(
            reference=result.reference,
            outgoing=movement_to_response(result.outgoing),
            incoming=movement_to_response(result.incoming),
            source_balance=result.source_balance.quantity,
            destination_balance=result.destination_balance.quantity,
        )
