"""Warehouse endpoints."""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_catalog, get_create_warehouse_use_case
from src.application.dto.mappers import warehouse_to_response
from src.application.dto.requests import CreateWarehouseRequest
from src.application.dto.responses import ErrorResponse, WarehouseResponse
from src.application.use_cases import CreateWarehouseUseCase
from src.core.exceptions import UnknownWarehouseError
from src.infrastructure.storage.sqlite import SQLiteCatalogStore

router = APIRouter(prefix="/api/warehouses", tags=["warehouses"])


@router.post(
    "",
    response_model=WarehouseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_warehouse(
    request: CreateWarehouseRequest,
    use_case: CreateWarehouseUseCase = Depends(get_create_warehouse_use_case),
) -> WarehouseResponse:
    """Register a warehouse."""
    warehouse = await use_case.execute(request)
    return warehouse_to_response(warehouse)


@router.get("", response_model=list[WarehouseResponse])
async def list_warehouses(
    store: SQLiteCatalogStore = Depends(get_catalog),
) -> list[WarehouseResponse]:
    """List active warehouses."""
    return [warehouse_to_response(w) for w in await store.list_warehouses()]


@router.get(
    "/{warehouse_id}",
    response_model=WarehouseResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_warehouse(
    warehouse_id: int,
    store: SQLiteCatalogStore = Depends(get_catalog),
) -> WarehouseResponse:
    """Get a warehouse by ID."""
    warehouse = await store.get_warehouse(warehouse_id)
    if warehouse is None:
        raise UnknownWarehouseError(warehouse_id)
    return warehouse_to_response(warehouse)
