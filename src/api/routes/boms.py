"""Bill of Materials endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import get_boms, get_create_bom_use_case, get_update_bom_use_case
from src.application.dto.mappers import bom_to_response
from src.application.dto.requests import CreateBOMRequest, UpdateBOMRequest
from src.application.dto.responses import (
    BOMExpansionResponse,
    BOMResponse,
    ErrorResponse,
    RequirementResponse,
)
from src.application.use_cases import CreateBOMUseCase, UpdateBOMUseCase
from src.core.services import BOMRegistry

router = APIRouter(prefix="/api/boms", tags=["boms"])


@router.post(
    "",
    response_model=BOMResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_bom(
    request: CreateBOMRequest,
    use_case: CreateBOMUseCase = Depends(get_create_bom_use_case),
) -> BOMResponse:
    """Create a recipe."""
    bom = await use_case.execute(request)
    return use_case.to_response(bom)


@router.get("", response_model=list[BOMResponse])
async def list_boms(
    active_only: bool = False,
    finished_item_id: int | None = None,
    registry: BOMRegistry = Depends(get_boms),
) -> list[BOMResponse]:
    """List BOMs newest first, optionally for one finished item."""
    boms = await registry.list_boms(active_only=active_only, finished_item_id=finished_item_id)
    return [bom_to_response(b) for b in boms]


@router.get(
    "/{bom_id}",
    response_model=BOMResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_bom(
    bom_id: int,
    registry: BOMRegistry = Depends(get_boms),
) -> BOMResponse:
    """Get a BOM with each input's current stock."""
    return bom_to_response(await registry.get_bom(bom_id))


@router.put(
    "/{bom_id}",
    response_model=BOMResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_bom(
    bom_id: int,
    request: UpdateBOMRequest,
    use_case: UpdateBOMUseCase = Depends(get_update_bom_use_case),
) -> BOMResponse:
    """Edit a BOM that no production has used, or toggle its active flag."""
    bom = await use_case.execute(bom_id, request)
    return use_case.to_response(bom)


@router.delete(
    "/{bom_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_bom(
    bom_id: int,
    registry: BOMRegistry = Depends(get_boms),
) -> Response:
    """Delete a BOM that no production has used."""
    await registry.delete_bom(bom_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{bom_id}/expand",
    response_model=BOMExpansionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def expand_bom(
    bom_id: int,
    quantity: Decimal = Query(..., description="Desired output quantity"),
    registry: BOMRegistry = Depends(get_boms),
) -> BOMExpansionResponse:
    """Scale the recipe to a desired output quantity."""
    bom, requirements = await registry.expand(bom_id, quantity)
    lines = {line.item_id: line for line in bom.lines}
    return BOMExpansionResponse(
        bom_id=bom.id,  # type: ignore[arg-type]
        bom_no=bom.bom_no,  # type: ignore[arg-type]
        finished_item_id=bom.finished_item_id,
        desired_quantity=quantity,
        requirements=[
            RequirementResponse(
                item_id=r.item_id,
                item_code=lines[r.item_id].item_code,
                item_name=lines[r.item_id].item_name,
                unit_of_measure=lines[r.item_id].unit_of_measure,
                required=r.quantity,
            )
            for r in requirements
        ],
    )
