"""Production run endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_orchestrator, get_record_production_use_case
from src.application.dto.mappers import production_to_response
from src.application.dto.requests import RecordProductionRequest
from src.application.dto.responses import (
    ErrorResponse,
    ProductionResponse,
    ProductionSummaryResponse,
)
from src.application.use_cases import RecordProductionUseCase
from src.core.services import ProductionOrchestrator

router = APIRouter(prefix="/api/productions", tags=["productions"])


@router.post(
    "",
    response_model=ProductionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def record_production(
    request: RecordProductionRequest,
    use_case: RecordProductionUseCase = Depends(get_record_production_use_case),
) -> ProductionResponse:
    """Record a production run atomically."""
    run = await use_case.execute(request)
    return use_case.to_response(run)


@router.get("", response_model=list[ProductionResponse])
async def list_productions(
    output_item_id: int | None = None,
    warehouse_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    orchestrator: ProductionOrchestrator = Depends(get_orchestrator),
) -> list[ProductionResponse]:
    """List production runs newest first."""
    runs = await orchestrator.list_productions(
        output_item_id=output_item_id,
        warehouse_id=warehouse_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
    )
    return [production_to_response(r) for r in runs]


@router.get(
    "/summary",
    response_model=ProductionSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def production_summary(
    output_item_id: int = Query(..., description="Finished item to summarize"),
    orchestrator: ProductionOrchestrator = Depends(get_orchestrator),
) -> ProductionSummaryResponse:
    """Count, total output and date range of production runs for an item."""
    summary = await orchestrator.production_summary(output_item_id)
    return ProductionSummaryResponse(**summary.model_dump())


@router.get(
    "/{production_id}",
    response_model=ProductionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_production(
    production_id: int,
    orchestrator: ProductionOrchestrator = Depends(get_orchestrator),
) -> ProductionResponse:
    """Get a production run with its inputs and movements."""
    return production_to_response(await orchestrator.get_production(production_id))
