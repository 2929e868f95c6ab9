"""
Domain exceptions for the stock ledger.

Every rejected operation surfaces one of these; the API layer maps them to
HTTP responses.
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidQuantityError(ValidationError):
    """Quantity is zero or has the wrong sign for the operation."""

    def __init__(self, quantity: Any, reason: str = "quantity must be non-zero"):
        super().__init__(field="quantity", message=reason, value=quantity)
        self.code = "INVALID_QUANTITY"


class DuplicateInputLineError(ValidationError):
    """The same input item appears more than once."""

    def __init__(self, item_id: int):
        super().__init__(
            field="items",
            message=f"item {item_id} appears more than once",
            value=item_id,
        )
        self.code = "DUPLICATE_INPUT_LINE"
        self.details["item_id"] = item_id


class ZeroOutputQuantityError(ValidationError):
    """BOM output quantity is zero or negative."""

    def __init__(self, quantity: Any):
        super().__init__(
            field="quantity",
            message="output quantity must be greater than zero",
            value=quantity,
        )
        self.code = "ZERO_OUTPUT_QUANTITY"


class EmptyRecipeError(ValidationError):
    """BOM has no input lines."""

    def __init__(self) -> None:
        super().__init__(field="items", message="a BOM needs at least one input line")
        self.code = "EMPTY_RECIPE"


class BOMOutputMismatchError(ValidationError):
    """BOM produces a different item than the one requested."""

    def __init__(self, bom_id: int, bom_item_id: int, output_item_id: int):
        super().__init__(
            field="bom_id",
            message=(
                f"BOM {bom_id} produces item {bom_item_id}, "
                f"not item {output_item_id}"
            ),
            value=bom_id,
        )
        self.code = "BOM_OUTPUT_MISMATCH"
        self.details.update(
            {
                "bom_id": bom_id,
                "bom_item_id": bom_item_id,
                "output_item_id": output_item_id,
            }
        )


class AmbiguousProductionInputError(ValidationError):
    """Both or neither of bom_id and input_items were supplied."""

    def __init__(self, both: bool):
        reason = (
            "supply either bom_id or input_items, not both"
            if both
            else "supply bom_id or input_items"
        )
        super().__init__(field="bom_id", message=reason)
        self.code = "AMBIGUOUS_PRODUCTION_INPUT"


# Lookup Exceptions
class NotFoundError(LedgerError):
    """Base exception for unresolved references."""

    pass


class UnknownItemError(NotFoundError):
    """Item does not exist or is inactive."""

    def __init__(self, item_id: int | str):
        super().__init__(
            f"Unknown item: {item_id}",
            code="UNKNOWN_ITEM",
            details={"item_id": item_id},
        )


class UnknownWarehouseError(NotFoundError):
    """Warehouse does not exist or is inactive."""

    def __init__(self, warehouse_id: int | str):
        super().__init__(
            f"Unknown warehouse: {warehouse_id}",
            code="UNKNOWN_WAREHOUSE",
            details={"warehouse_id": warehouse_id},
        )


class BOMNotFoundError(NotFoundError):
    """BOM not found."""

    def __init__(self, bom_id: int):
        super().__init__(
            f"BOM not found: {bom_id}",
            code="BOM_NOT_FOUND",
            details={"bom_id": bom_id},
        )


class ProductionNotFoundError(NotFoundError):
    """Production run not found."""

    def __init__(self, production_id: int):
        super().__init__(
            f"Production not found: {production_id}",
            code="PRODUCTION_NOT_FOUND",
            details={"production_id": production_id},
        )


# Conflict Exceptions
class ConflictError(LedgerError):
    """Operation conflicts with the current ledger state."""

    pass


class InsufficientStockError(ConflictError):
    """An outward movement would drive a balance below zero."""

    def __init__(
        self,
        item_id: int,
        warehouse_id: int,
        requested: Decimal,
        available: Decimal,
        shortages: list[dict[str, Any]] | None = None,
    ):
        super().__init__(
            f"Insufficient stock for item {item_id} in warehouse {warehouse_id}. "
            f"Available: {available}, Required: {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "warehouse_id": warehouse_id,
                "requested": str(requested),
                "available": str(available),
                "shortages": shortages or [],
            },
        )


class HasStockHistoryError(ConflictError):
    """Item has recorded movements or a non-zero balance."""

    def __init__(self, item_id: int):
        super().__init__(
            f"Item {item_id} has stock history and cannot be deleted",
            code="HAS_STOCK_HISTORY",
            details={"item_id": item_id},
        )


class BOMInUseError(ConflictError):
    """BOM is referenced by a recorded production."""

    def __init__(self, bom_id: int):
        super().__init__(
            f"BOM {bom_id} is referenced by recorded productions; create a new BOM instead",
            code="BOM_IN_USE",
            details={"bom_id": bom_id},
        )


class DuplicateCodeError(ConflictError):
    """Item or warehouse code already exists."""

    def __init__(self, entity: str, code: str):
        super().__init__(
            f"{entity} code already exists: {code}",
            code="DUPLICATE_CODE",
            details={"entity": entity, "code": code},
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class CommitFailedError(StorageError):
    """Write transaction failed and was rolled back; safe to retry."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Commit failed during {operation}; nothing was applied: {error}",
            code="COMMIT_FAILED",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
