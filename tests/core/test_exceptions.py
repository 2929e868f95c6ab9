"""Unit tests for domain exceptions."""

from decimal import Decimal

import pytest

from src.core.exceptions import (
    AmbiguousProductionInputError,
    BOMInUseError,
    BOMNotFoundError,
    BOMOutputMismatchError,
    CommitFailedError,
    ConflictError,
    DatabaseError,
    DuplicateCodeError,
    DuplicateInputLineError,
    EmptyRecipeError,
    HasStockHistoryError,
    InsufficientStockError,
    InvalidQuantityError,
    LedgerError,
    NotFoundError,
    ProductionNotFoundError,
    StorageError,
    UnknownItemError,
    UnknownWarehouseError,
    ValidationError,
    ZeroOutputQuantityError,
)


class TestLedgerError:
    """Tests for base LedgerError exception."""

    def test_basic_initialization(self):
        error = LedgerError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "LedgerError"
        assert error.details == {}

    def test_with_custom_code(self):
        error = LedgerError("Error message", code="CUSTOM_ERROR")
        assert error.code == "CUSTOM_ERROR"

    def test_to_dict(self):
        error = LedgerError("Test error", code="TEST_CODE", details={"extra": "info"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"extra": "info"},
        }


class TestValidationErrors:
    def test_validation_error_details(self):
        error = ValidationError("quantity", "must be a finite number", value="abc")
        assert error.code == "VALIDATION_ERROR"
        assert error.details == {
            "field": "quantity",
            "message": "must be a finite number",
            "value": "abc",
        }

    def test_validation_error_truncates_long_values(self):
        error = ValidationError("remarks", "too long", value="x" * 500)
        assert len(error.details["value"]) == 100

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (InvalidQuantityError(0), "INVALID_QUANTITY"),
            (DuplicateInputLineError(3), "DUPLICATE_INPUT_LINE"),
            (ZeroOutputQuantityError(0), "ZERO_OUTPUT_QUANTITY"),
            (EmptyRecipeError(), "EMPTY_RECIPE"),
            (BOMOutputMismatchError(1, 2, 3), "BOM_OUTPUT_MISMATCH"),
            (AmbiguousProductionInputError(both=True), "AMBIGUOUS_PRODUCTION_INPUT"),
        ],
    )
    def test_codes_and_hierarchy(self, error: ValidationError, code: str):
        assert error.code == code
        assert isinstance(error, ValidationError)
        assert isinstance(error, LedgerError)

    def test_duplicate_input_line_names_item(self):
        assert DuplicateInputLineError(7).details["item_id"] == 7

    def test_ambiguous_input_messages(self):
        assert "not both" in AmbiguousProductionInputError(both=True).message
        assert "not both" not in AmbiguousProductionInputError(both=False).message

    def test_bom_output_mismatch_details(self):
        error = BOMOutputMismatchError(bom_id=1, bom_item_id=2, output_item_id=3)
        assert error.details["bom_item_id"] == 2
        assert error.details["output_item_id"] == 3


class TestNotFoundErrors:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (UnknownItemError(1), "UNKNOWN_ITEM"),
            (UnknownWarehouseError(1), "UNKNOWN_WAREHOUSE"),
            (BOMNotFoundError(1), "BOM_NOT_FOUND"),
            (ProductionNotFoundError(1), "PRODUCTION_NOT_FOUND"),
        ],
    )
    def test_codes(self, error: NotFoundError, code: str):
        assert error.code == code
        assert isinstance(error, NotFoundError)


class TestConflictErrors:
    def test_insufficient_stock_details(self):
        error = InsufficientStockError(
            item_id=1,
            warehouse_id=2,
            requested=Decimal("10"),
            available=Decimal("4"),
        )
        assert isinstance(error, ConflictError)
        assert error.code == "INSUFFICIENT_STOCK"
        assert error.details["available"] == "4"
        assert error.details["requested"] == "10"
        assert error.details["shortages"] == []

    def test_insufficient_stock_lists_every_shortage(self):
        shortages = [
            {"item_id": 1, "warehouse_id": 1, "available": "0", "required": "5"},
            {"item_id": 2, "warehouse_id": 1, "available": "1", "required": "5"},
        ]
        error = InsufficientStockError(1, 1, Decimal("5"), Decimal("0"), shortages)
        assert error.details["shortages"] == shortages

    def test_has_stock_history(self):
        error = HasStockHistoryError(5)
        assert error.code == "HAS_STOCK_HISTORY"
        assert isinstance(error, ConflictError)

    def test_bom_in_use(self):
        assert BOMInUseError(2).code == "BOM_IN_USE"

    def test_duplicate_code(self):
        error = DuplicateCodeError("Item", "RM-001")
        assert error.details == {"entity": "Item", "code": "RM-001"}


class TestStorageErrors:
    def test_commit_failed_is_storage_error(self):
        error = CommitFailedError("ledger_write", "disk I/O error")
        assert isinstance(error, StorageError)
        assert error.code == "COMMIT_FAILED"
        assert "nothing was applied" in error.message

    def test_database_error(self):
        error = DatabaseError("insert", "locked")
        assert error.details["operation"] == "insert"
