"""Decimal helpers shared by the ledger services."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Largest magnitude accepted for quantities and costs; the default decimal
# context cannot quantize values much beyond this to four places.
MAX_MAGNITUDE = Decimal("1e15")


def to_decimal(value: Any) -> Decimal:
    """Convert a number or numeric string to Decimal without float artefacts."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a decimal value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a decimal value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite decimal value: {value!r}")
    return result


def within_range(value: Decimal) -> bool:
    return abs(value) < MAX_MAGNITUDE


def quantize(value: Decimal, places: int) -> Decimal:
    """Round half-up to a fixed number of decimal places.

    Raises ValueError when the value is too large to be represented at
    that precision.
    """
    try:
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Value out of range: {value}") from e


def format_document_no(prefix: str, year: int, seq: int, width: int = 4) -> str:
    """Format a document number such as STK-2026-0001."""
    return f"{prefix}-{year}-{seq:0{width}d}"
