"""Entity to response DTO conversion shared by use cases and routes."""

from src.application.dto.responses import (
    BalanceMismatchResponse,
    BOMLineResponse,
    BOMResponse,
    ItemResponse,
    ProductionInputResponse,
    ProductionResponse,
    RebuildReportResponse,
    StockBalanceResponse,
    StockMovementResponse,
    WarehouseResponse,
)
from src.core.entities import (
    BOM,
    Item,
    ProductionRun,
    RebuildReport,
    StockBalance,
    StockMovement,
    Warehouse,
)


def item_to_response(item: Item) -> ItemResponse:
    return ItemResponse(
        id=item.id,  # type: ignore[arg-type]
        item_code=item.item_code,
        item_name=item.item_name,
        description=item.description,
        category=item.category,
        unit_of_measure=item.unit_of_measure,
        reorder_level=item.reorder_level,
        standard_cost=item.standard_cost,
        standard_selling_price=item.standard_selling_price,
        is_raw_material=item.is_raw_material,
        is_finished_good=item.is_finished_good,
        is_purchased=item.is_purchased,
        is_manufactured=item.is_manufactured,
        current_stock=item.current_stock,
        is_low_stock=item.is_low_stock,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def warehouse_to_response(warehouse: Warehouse) -> WarehouseResponse:
    return WarehouseResponse(
        id=warehouse.id,  # type: ignore[arg-type]
        warehouse_code=warehouse.warehouse_code,
        warehouse_name=warehouse.warehouse_name,
        location=warehouse.location,
        created_at=warehouse.created_at,
    )


def movement_to_response(m: StockMovement) -> StockMovementResponse:
    return StockMovementResponse(
        id=m.id,  # type: ignore[arg-type]
        movement_no=m.movement_no,  # type: ignore[arg-type]
        item_id=m.item_id,
        item_code=m.item_code,
        item_name=m.item_name,
        unit_of_measure=m.unit_of_measure,
        warehouse_id=m.warehouse_id,
        warehouse_code=m.warehouse_code,
        warehouse_name=m.warehouse_name,
        movement_type=m.movement_type.value,
        quantity=m.quantity,
        unit_cost=m.unit_cost,
        value=m.value,
        reference_doctype=m.reference_doctype,
        reference_docno=m.reference_docno,
        remarks=m.remarks,
        movement_date=m.movement_date,
        created_at=m.created_at,
    )


def balance_to_response(b: StockBalance) -> StockBalanceResponse:
    return StockBalanceResponse(
        item_id=b.item_id,
        warehouse_id=b.warehouse_id,
        quantity=b.quantity,
        avg_cost=b.avg_cost,
        total_value=b.total_value,
        last_movement_date=b.last_movement_date,
    )


def report_to_response(report: RebuildReport) -> RebuildReportResponse:
    return RebuildReportResponse(
        movements_replayed=report.movements_replayed,
        pairs=report.pairs,
        consistent=report.consistent,
        applied=report.applied,
        mismatches=[
            BalanceMismatchResponse(
                item_id=m.item_id,
                warehouse_id=m.warehouse_id,
                cached_quantity=m.cached_quantity,
                replayed_quantity=m.replayed_quantity,
                cached_avg_cost=m.cached_avg_cost,
                replayed_avg_cost=m.replayed_avg_cost,
            )
            for m in report.mismatches
        ],
    )


def bom_to_response(bom: BOM) -> BOMResponse:
    return BOMResponse(
        id=bom.id,  # type: ignore[arg-type]
        bom_no=bom.bom_no,  # type: ignore[arg-type]
        bom_name=bom.bom_name,
        finished_item_id=bom.finished_item_id,
        finished_item_code=bom.finished_item_code,
        finished_item_name=bom.finished_item_name,
        finished_uom=bom.finished_uom,
        quantity=bom.quantity,
        description=bom.description,
        is_active=bom.is_active,
        items=[
            BOMLineResponse(
                id=line.id,
                item_id=line.item_id,
                item_code=line.item_code,
                item_name=line.item_name,
                unit_of_measure=line.unit_of_measure,
                quantity=line.quantity,
                current_stock=line.current_stock,
            )
            for line in bom.lines
        ],
        created_at=bom.created_at,
        updated_at=bom.updated_at,
    )


def production_to_response(run: ProductionRun) -> ProductionResponse:
    return ProductionResponse(
        id=run.id,  # type: ignore[arg-type]
        production_no=run.production_no,  # type: ignore[arg-type]
        status=run.status.value,
        output_item_id=run.output_item_id,
        output_item_code=run.output_item_code,
        output_item_name=run.output_item_name,
        output_uom=run.output_uom,
        output_quantity=run.output_quantity,
        output_unit_cost=run.output_unit_cost,
        output_balance=run.output_balance,
        warehouse_id=run.warehouse_id,
        raw_materials_warehouse_id=run.raw_materials_warehouse_id,
        bom_id=run.bom_id,
        production_date=run.production_date,
        remarks=run.remarks,
        inputs=[
            ProductionInputResponse(
                item_id=i.item_id,
                item_code=i.item_code,
                item_name=i.item_name,
                unit_of_measure=i.unit_of_measure,
                warehouse_id=i.warehouse_id,
                quantity=i.quantity,
                unit_cost=i.unit_cost,
            )
            for i in run.inputs
        ],
        movements=[movement_to_response(m) for m in run.movements],
        created_at=run.created_at,
    )
