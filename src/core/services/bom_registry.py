"""
BOM registry service.

Validates recipes, scales them to a desired output quantity, and guards
BOMs that recorded productions already reference.
"""

from decimal import Decimal
from typing import Any

from src.config import LedgerSettings, get_logger, get_settings
from src.core.entities.bom import BOM, BOMLine, Requirement
from src.core.exceptions import (
    BOMInUseError,
    BOMNotFoundError,
    DuplicateInputLineError,
    EmptyRecipeError,
    InvalidQuantityError,
    UnknownItemError,
    ValidationError,
    ZeroOutputQuantityError,
)
from src.core.interfaces.bom_store import IBOMStore
from src.core.interfaces.catalog_store import ICatalogStore
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.services.quantities import ZERO, to_decimal, within_range

logger = get_logger(__name__)


def scale_requirements(bom: BOM, desired_quantity: Decimal) -> list[Requirement]:
    """
    Scale every BOM line to the desired output quantity.

    required = line.quantity * desired / bom.quantity, multiplied first and
    left unrounded; the ledger rounds when it stores the movement.
    """
    return [
        Requirement(item_id=line.item_id, quantity=line.quantity * desired_quantity / bom.quantity)
        for line in bom.lines
    ]


def _decimal(value: Any, field: str) -> Decimal:
    try:
        result = to_decimal(value)
    except ValueError as e:
        raise ValidationError(field=field, message="must be a finite number", value=value) from e
    if not within_range(result):
        raise ValidationError(field=field, message="is out of range", value=value)
    return result


class BOMRegistry:
    """Creates, reads and expands Bills of Materials."""

    def __init__(
        self,
        bom_store: IBOMStore,
        catalog_store: ICatalogStore,
        ledger_store: ILedgerStore,
        settings: LedgerSettings | None = None,
    ):
        self._bom_store = bom_store
        self._catalog_store = catalog_store
        self._ledger_store = ledger_store
        self._settings = settings or get_settings().ledger

    async def _validate(
        self,
        finished_item_id: int,
        quantity: Any,
        lines: list[dict[str, Any]] | list[BOMLine],
    ) -> tuple[Decimal, list[BOMLine]]:
        output_qty = _decimal(quantity, "quantity")
        if output_qty <= 0:
            raise ZeroOutputQuantityError(quantity)
        if not lines:
            raise EmptyRecipeError()

        parsed: list[BOMLine] = []
        seen: set[int] = set()
        for raw in lines:
            item_id = raw.item_id if isinstance(raw, BOMLine) else raw["item_id"]
            line_qty = _decimal(
                raw.quantity if isinstance(raw, BOMLine) else raw["quantity"], "quantity"
            )
            if item_id in seen:
                raise DuplicateInputLineError(item_id)
            seen.add(item_id)
            if line_qty <= 0:
                raise InvalidQuantityError(line_qty, "line quantity must be greater than zero")
            parsed.append(BOMLine(item_id=item_id, quantity=line_qty))

        items = await self._catalog_store.get_items([finished_item_id, *seen])
        if finished_item_id not in items:
            raise UnknownItemError(finished_item_id)
        for line in parsed:
            if line.item_id not in items:
                raise UnknownItemError(line.item_id)

        return output_qty, parsed

    async def create_bom(
        self,
        bom_name: str,
        finished_item_id: int,
        quantity: Any,
        lines: list[dict[str, Any]] | list[BOMLine],
        description: str | None = None,
    ) -> BOM:
        """Validate and store a new recipe, assigning its BOM number."""
        output_qty, parsed = await self._validate(finished_item_id, quantity, lines)
        bom = BOM(
            bom_name=bom_name,
            finished_item_id=finished_item_id,
            quantity=output_qty,
            description=description,
            lines=parsed,
        )
        created = await self._bom_store.create_bom(bom, number_width=self._settings.number_width)
        logger.info(
            "bom_created",
            bom_id=created.id,
            bom_no=created.bom_no,
            finished_item_id=finished_item_id,
            lines=len(parsed),
        )
        return await self.get_bom(created.id)

    async def get_bom(self, bom_id: int) -> BOM:
        """Get a BOM with each input's current stock across warehouses."""
        bom = await self._bom_store.get_bom(bom_id)
        if bom is None:
            raise BOMNotFoundError(bom_id)
        for line in bom.lines:
            balances = await self._ledger_store.list_balances(item_id=line.item_id)
            line.current_stock = sum((b.quantity for b in balances), ZERO)
        return bom

    async def list_boms(
        self, active_only: bool = False, finished_item_id: int | None = None
    ) -> list[BOM]:
        return await self._bom_store.list_boms(
            active_only=active_only, finished_item_id=finished_item_id
        )

    async def update_bom(
        self,
        bom_id: int,
        bom_name: str | None = None,
        quantity: Any = None,
        lines: list[dict[str, Any]] | list[BOMLine] | None = None,
        description: str | None = None,
        is_active: bool | None = None,
    ) -> BOM:
        """
        Edit a BOM that no production has used yet.

        Toggling is_active alone is allowed on a BOM that productions
        reference; any other change raises BOMInUseError.
        """
        existing = await self._bom_store.get_bom(bom_id)
        if existing is None:
            raise BOMNotFoundError(bom_id)

        if is_active is not None and all(
            v is None for v in (bom_name, quantity, lines, description)
        ):
            if not await self._bom_store.set_bom_active(bom_id, is_active):
                raise BOMNotFoundError(bom_id)
            logger.info("bom_active_set", bom_id=bom_id, is_active=is_active)
            return await self.get_bom(bom_id)

        if await self._ledger_store.is_bom_referenced(bom_id):
            raise BOMInUseError(bom_id)

        output_qty, parsed = await self._validate(
            existing.finished_item_id,
            existing.quantity if quantity is None else quantity,
            existing.lines if lines is None else lines,
        )
        updated = existing.model_copy(
            update={
                "bom_name": bom_name or existing.bom_name,
                "quantity": output_qty,
                "lines": parsed,
                "description": description if description is not None else existing.description,
                "is_active": existing.is_active if is_active is None else is_active,
            }
        )
        await self._bom_store.update_bom(updated)
        logger.info("bom_updated", bom_id=bom_id, lines=len(parsed))
        return await self.get_bom(bom_id)

    async def delete_bom(self, bom_id: int) -> None:
        """Delete a BOM no production references."""
        if await self._ledger_store.is_bom_referenced(bom_id):
            raise BOMInUseError(bom_id)
        if not await self._bom_store.delete_bom(bom_id):
            raise BOMNotFoundError(bom_id)
        logger.info("bom_removed", bom_id=bom_id)

    async def expand(self, bom_id: int, desired_quantity: Any) -> tuple[BOM, list[Requirement]]:
        """Scaled input requirements for producing desired_quantity."""
        desired = _decimal(desired_quantity, "quantity")
        if desired <= 0:
            raise InvalidQuantityError(desired_quantity, "output quantity must be greater than zero")
        bom = await self._bom_store.get_bom(bom_id)
        if bom is None:
            raise BOMNotFoundError(bom_id)
        return bom, scale_requirements(bom, desired)
