"""Item catalog endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    get_catalog,
    get_create_item_use_case,
    get_delete_item_use_case,
    get_ledger,
)
from src.application.dto.mappers import item_to_response
from src.application.dto.requests import CreateItemRequest
from src.application.dto.responses import (
    ErrorResponse,
    ItemDetailResponse,
    ItemResponse,
    WarehouseStockResponse,
)
from src.application.use_cases import CreateItemUseCase, DeleteItemUseCase
from src.core.exceptions import UnknownItemError
from src.core.services import StockLedger
from src.infrastructure.storage.sqlite import SQLiteCatalogStore

router = APIRouter(prefix="/api/items", tags=["items"])


@router.post(
    "",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_item(
    request: CreateItemRequest,
    use_case: CreateItemUseCase = Depends(get_create_item_use_case),
) -> ItemResponse:
    """Register a stock-keeping item."""
    item = await use_case.execute(request)
    return item_to_response(item)


@router.get("", response_model=list[ItemResponse])
async def list_items(
    category: str | None = None,
    search: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteCatalogStore = Depends(get_catalog),
) -> list[ItemResponse]:
    """List active items with current stock."""
    items = await store.list_items(category=category, search=search, limit=limit, offset=offset)
    return [item_to_response(item) for item in items]


@router.get("/low-stock", response_model=list[ItemResponse])
async def list_low_stock(
    store: SQLiteCatalogStore = Depends(get_catalog),
) -> list[ItemResponse]:
    """Items at or below their reorder level."""
    return [item_to_response(item) for item in await store.list_low_stock()]


@router.get(
    "/{item_id}",
    response_model=ItemDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: int,
    store: SQLiteCatalogStore = Depends(get_catalog),
    ledger: StockLedger = Depends(get_ledger),
) -> ItemDetailResponse:
    """Get an item with its stock in each warehouse."""
    item = await store.get_item(item_id)
    if item is None:
        raise UnknownItemError(item_id)

    balances = await ledger.list_balances(item_id=item_id)
    return ItemDetailResponse(
        **item_to_response(item).model_dump(),
        stock_by_warehouse=[
            WarehouseStockResponse(
                warehouse_id=b.warehouse_id,
                quantity=b.quantity,
                avg_cost=b.avg_cost,
                total_value=b.total_value,
            )
            for b in balances
        ],
    )


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_item(
    item_id: int,
    use_case: DeleteItemUseCase = Depends(get_delete_item_use_case),
) -> Response:
    """Delete an item that has no stock history."""
    await use_case.execute(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
