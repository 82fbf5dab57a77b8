from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError

# Maximum price: 9,999,999,999.99 fits Numeric(12, 2)
MAX_PRICE = Decimal("9999999999.99")

# Integer column range (32-bit signed, the narrowest of the supported engines)
MAX_INT = 2_147_483_647

CATEGORY_NAME_MIN = 2
CATEGORY_NAME_MAX = 50


def require_fields(payload: dict | None, *fields: str) -> dict:
    """
    Ensure a JSON body is an object carrying every named field.

    Empty strings count as missing.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    missing = [
        f for f in fields
        if payload.get(f) is None or (isinstance(payload.get(f), str) and not payload[f].strip())
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", details={"missing": missing})
    return payload


def parse_int(value: Any, field: str, *, minimum: int | None = None, maximum: int | None = MAX_INT) -> int:
    """
    Strict integer coercion: rejects floats, bools, decimals and scientific notation.

    Values outside the Integer column range are rejected before they reach the driver.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    if maximum is not None and result > maximum:
        raise ValidationError(f"{field} must be <= {maximum}")
    return result


def parse_price(value: Any, field: str = "price") -> Decimal:
    """
    Money input -> Decimal with two places.

    Accepts ints, numeric strings and floats (floats go through str() so 9.99
    stays 9.99). Negative, non-finite, over-precise or oversized values are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    if amount > MAX_PRICE:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE}")
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError(f"{field} cannot have more than two decimal places")

    return amount.quantize(Decimal("0.01"))


def clean_name(
    value: Any,
    field: str = "name",
    *,
    min_length: int = 1,
    max_length: int = 255,
) -> str:
    """Trim a display name and enforce its length bounds."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")

    name = value.strip()
    if len(name) < min_length or len(name) > max_length:
        if min_length <= 1:
            raise ValidationError(f"{field} is required and must be at most {max_length} characters")
        raise ValidationError(f"{field} must be between {min_length} and {max_length} characters")
    return name


def clean_category_name(value: Any) -> str:
    return clean_name(value, "name", min_length=CATEGORY_NAME_MIN, max_length=CATEGORY_NAME_MAX)
