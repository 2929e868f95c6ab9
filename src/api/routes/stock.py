"""Stock ledger endpoints: movements, transfers, balances and reconciliation."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_ledger,
    get_rebuild_balances_use_case,
    get_record_movement_use_case,
    get_transfer_stock_use_case,
)
from src.application.dto.mappers import balance_to_response, movement_to_response
from src.application.dto.requests import RecordMovementRequest, TransferStockRequest
from src.application.dto.responses import (
    ErrorResponse,
    RebuildReportResponse,
    RecordMovementResponse,
    StockBalanceResponse,
    StockMovementResponse,
    TransferResponse,
)
from src.application.use_cases import (
    RebuildBalancesUseCase,
    RecordMovementUseCase,
    TransferStockUseCase,
)
from src.core.entities.inventory import MovementFilters, MovementType
from src.core.services import StockLedger

router = APIRouter(prefix="/api/stock", tags=["stock"])

_WRITE_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "/movements",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_WRITE_ERRORS,
)
async def record_movement(
    request: RecordMovementRequest,
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """Record a purchase, sale or adjustment."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/movements", response_model=list[StockMovementResponse])
async def list_movements(
    item_id: int | None = None,
    warehouse_id: int | None = None,
    movement_type: MovementType | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    reference_docno: str | None = None,
    limit: int = Query(default=100, ge=1, le=10000),
    ledger: StockLedger = Depends(get_ledger),
) -> list[StockMovementResponse]:
    """List movements newest first."""
    filters = MovementFilters(
        item_id=item_id,
        warehouse_id=warehouse_id,
        movement_type=movement_type,
        date_from=date_from,
        date_to=date_to,
        reference_docno=reference_docno,
        limit=limit,
    )
    return [movement_to_response(m) async for m in ledger.list_movements(filters)]


@router.post(
    "/transfers",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_WRITE_ERRORS,
)
async def transfer_stock(
    request: TransferStockRequest,
    use_case: TransferStockUseCase = Depends(get_transfer_stock_use_case),
) -> TransferResponse:
    """Move stock between warehouses."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/balances", response_model=list[StockBalanceResponse])
async def list_balances(
    item_id: int | None = None,
    warehouse_id: int | None = None,
    ledger: StockLedger = Depends(get_ledger),
) -> list[StockBalanceResponse]:
    """List cached balances."""
    balances = await ledger.list_balances(item_id=item_id, warehouse_id=warehouse_id)
    return [balance_to_response(b) for b in balances]


@router.get("/balance", response_model=StockBalanceResponse)
async def get_balance(
    item_id: int,
    warehouse_id: int,
    ledger: StockLedger = Depends(get_ledger),
) -> StockBalanceResponse:
    """Balance for one pair; zero when the pair has never moved."""
    return balance_to_response(await ledger.get_balance_snapshot(item_id, warehouse_id))


@router.post(
    "/rebuild",
    response_model=RebuildReportResponse,
    responses={503: {"model": ErrorResponse}},
)
async def rebuild_balances(
    use_case: RebuildBalancesUseCase = Depends(get_rebuild_balances_use_case),
) -> RebuildReportResponse:
    """Recompute cached balances from the movement log."""
    return use_case.to_response(await use_case.execute(apply=True))


@router.get("/reconcile", response_model=RebuildReportResponse)
async def reconcile_balances(
    use_case: RebuildBalancesUseCase = Depends(get_rebuild_balances_use_case),
) -> RebuildReportResponse:
    """Report cached balances that disagree with the movement log."""
    return use_case.to_response(await use_case.execute(apply=False))
