"""
Production orchestrator.

Turns a BOM or an explicit input list into one atomic group of PRODUCTION
movements: a negative movement per input and a single positive movement
for the output, all referencing the same production number.
"""

from datetime import date
from typing import Any

from src.config import get_logger
from src.core.entities.bom import Requirement
from src.core.entities.catalog import Item
from src.core.entities.inventory import MovementType, StockMovement
from src.core.entities.production import (
    ProductionInput,
    ProductionRun,
    ProductionStatus,
    ProductionSummary,
)
from src.core.exceptions import (
    AmbiguousProductionInputError,
    BOMNotFoundError,
    BOMOutputMismatchError,
    DuplicateInputLineError,
    InvalidQuantityError,
    ProductionNotFoundError,
    UnknownItemError,
)
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.services.bom_registry import BOMRegistry, scale_requirements
from src.core.services.quantities import ZERO
from src.core.services.stock_ledger import StockLedger

logger = get_logger(__name__)

PRODUCTION_PREFIX = "PROD"
PRODUCTION_DOCTYPE = "Production"


class ProductionOrchestrator:
    """Records production runs through the stock ledger."""

    def __init__(
        self,
        ledger: StockLedger,
        bom_registry: BOMRegistry,
        catalog_store: ICatalogStore,
    ):
        self._ledger = ledger
        self._bom_registry = bom_registry
        self._catalog_store = catalog_store

    def _manual_requirements(self, input_items: list[dict[str, Any]]) -> list[Requirement]:
        requirements = []
        seen: set[int] = set()
        for line in input_items:
            item_id = line["item_id"]
            if item_id in seen:
                raise DuplicateInputLineError(item_id)
            seen.add(item_id)
            qty = self._ledger.parse_decimal(line["quantity"], "quantity")
            if qty <= 0:
                raise InvalidQuantityError(line["quantity"], "input quantity must be greater than zero")
            requirements.append(Requirement(item_id=item_id, quantity=qty))
        return requirements

    def _consumed(self, requirements: list[Requirement]) -> list[Requirement]:
        consumed = []
        for req in requirements:
            qty = self._ledger.quantize_quantity(req.quantity)
            if qty <= 0:
                raise InvalidQuantityError(
                    req.quantity, f"requirement for item {req.item_id} rounds to zero"
                )
            consumed.append(Requirement(item_id=req.item_id, quantity=qty))
        return consumed

    async def _add_items(self, items: dict[int, Item], requirements: list[Requirement]) -> None:
        missing = [r.item_id for r in requirements if r.item_id not in items]
        if missing:
            items.update(await self._catalog_store.get_items(missing))
        for req in requirements:
            if req.item_id not in items:
                raise UnknownItemError(req.item_id)

    async def record_production(
        self,
        output_item_id: int,
        output_quantity: Any,
        warehouse_id: int,
        production_date: date | None = None,
        bom_id: int | None = None,
        input_items: list[dict[str, Any]] | None = None,
        raw_materials_warehouse_id: int | None = None,
        remarks: str | None = None,
        allow_negative: bool = False,
    ) -> ProductionRun:
        """
        Record a production run atomically.

        Either bom_id or input_items must be given. Every input is checked
        against its balance before anything is written; the whole run
        commits or nothing does.
        """
        if bom_id is not None and input_items:
            raise AmbiguousProductionInputError(both=True)
        if bom_id is None and not input_items:
            raise AmbiguousProductionInputError(both=False)

        raw_output = self._ledger.parse_decimal(output_quantity, "output_quantity")
        output_qty = self._ledger.quantize_quantity(raw_output)
        if raw_output <= 0 or output_qty <= 0:
            raise InvalidQuantityError(output_quantity, "output quantity must be greater than zero")

        if bom_id is not None:
            bom, requirements = await self._bom_registry.expand(bom_id, output_qty)
            if bom.finished_item_id != output_item_id:
                raise BOMOutputMismatchError(bom_id, bom.finished_item_id, output_item_id)
        else:
            requirements = self._manual_requirements(input_items or [])

        consumed = self._consumed(requirements)

        items = await self._catalog_store.get_items(
            [output_item_id, *(r.item_id for r in consumed)]
        )
        if output_item_id not in items:
            raise UnknownItemError(output_item_id)
        await self._add_items(items, consumed)

        rm_warehouse_id = raw_materials_warehouse_id or warehouse_id
        await self._ledger.resolve_warehouse(warehouse_id)
        if rm_warehouse_id != warehouse_id:
            await self._ledger.resolve_warehouse(rm_warehouse_id)

        run = ProductionRun(
            output_item_id=output_item_id,
            output_quantity=output_qty,
            warehouse_id=warehouse_id,
            raw_materials_warehouse_id=rm_warehouse_id,
            production_date=production_date or date.today(),
            bom_id=bom_id,
            remarks=remarks,
        )

        async with self._ledger.write_session() as session:
            if bom_id is not None:
                # Consume the recipe as stored at commit time
                bom = await session.get_bom(bom_id)
                if bom is None:
                    raise BOMNotFoundError(bom_id)
                if bom.finished_item_id != output_item_id:
                    raise BOMOutputMismatchError(bom_id, bom.finished_item_id, output_item_id)
                consumed = self._consumed(scale_requirements(bom, output_qty))
                await self._add_items(items, consumed)

            run.production_no = await self._ledger.next_document_no(session, PRODUCTION_PREFIX)

            input_movements = [
                StockMovement(
                    item_id=req.item_id,
                    warehouse_id=rm_warehouse_id,
                    movement_type=MovementType.PRODUCTION,
                    quantity=-req.quantity,
                    reference_doctype=PRODUCTION_DOCTYPE,
                    reference_docno=run.production_no,
                    remarks=f"Consumed for production: {run.production_no}",
                    movement_date=run.production_date,
                )
                for req in consumed
            ]
            consumed_result = await self._ledger.post(
                session, input_movements, items, allow_negative
            )

            total_cost = sum(
                (-m.quantity * m.unit_cost for m in consumed_result.movements), ZERO
            )
            run.output_unit_cost = self._ledger.quantize_cost(total_cost / output_qty)

            output_movement = StockMovement(
                item_id=output_item_id,
                warehouse_id=warehouse_id,
                movement_type=MovementType.PRODUCTION,
                quantity=output_qty,
                unit_cost=run.output_unit_cost,
                reference_doctype=PRODUCTION_DOCTYPE,
                reference_docno=run.production_no,
                remarks=remarks or f"Output of production: {run.production_no}",
                movement_date=run.production_date,
            )
            output_result = await self._ledger.post(session, [output_movement], items)

            run.inputs = [
                ProductionInput(
                    item_id=m.item_id,
                    quantity=-m.quantity,
                    warehouse_id=m.warehouse_id,
                    unit_cost=m.unit_cost,
                    item_code=items[m.item_id].item_code,
                    item_name=items[m.item_id].item_name,
                    unit_of_measure=items[m.item_id].unit_of_measure,
                )
                for m in consumed_result.movements
            ]
            run.movements = [*consumed_result.movements, *output_result.movements]
            run.output_balance = output_result.balances[(output_item_id, warehouse_id)].quantity
            run = await session.insert_production(run)

        run.status = ProductionStatus.COMMITTED
        output_item = items[output_item_id]
        run.output_item_code = output_item.item_code
        run.output_item_name = output_item.item_name
        run.output_uom = output_item.unit_of_measure

        logger.info(
            "production_committed",
            production_no=run.production_no,
            output_item_id=output_item_id,
            output_qty=str(output_qty),
            inputs=len(run.inputs),
            output_unit_cost=str(run.output_unit_cost),
        )
        return run

    async def get_production(self, production_id: int) -> ProductionRun:
        run = await self._ledger.ledger_store.get_production(production_id)
        if run is None:
            raise ProductionNotFoundError(production_id)
        return run

    async def list_productions(
        self,
        output_item_id: int | None = None,
        warehouse_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 100,
    ) -> list[ProductionRun]:
        return await self._ledger.ledger_store.list_productions(
            output_item_id=output_item_id,
            warehouse_id=warehouse_id,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
        )

    async def production_summary(self, output_item_id: int) -> ProductionSummary:
        """Totals of committed runs for one output item."""
        await self._ledger.resolve_item(output_item_id)
        return await self._ledger.ledger_store.production_summary(output_item_id)
