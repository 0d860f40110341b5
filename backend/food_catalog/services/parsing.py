"""
Food Catalog Backend: Input Parsing
====================================

What:  Converters from raw client values (form strings, or native values)
       to the typed values stored on a Food record.
Who:   FoodService (create/update) and FoodQueries (list filter).

Every parser either returns a value or raises ValidationError/ParseError,
except optional_text, which maps blank input to None.
None of them apply defaults; defaults for absent fields are the caller's
decision.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from food_catalog.exceptions import ParseError, ValidationError

_CENTS = Decimal("0.01")

# NUMERIC(10, 2) upper bound
MAX_PRICE = Decimal("99999999.99")

_TRUE_STRINGS = {"true"}
_FALSE_STRINGS = {"false"}


def require_text(value: Any, field: str) -> str:
    """Return the stripped string, or raise when it is missing or blank."""
    if value is None:
        raise ValidationError(message=f"'{field}' is required", field=field)
    text = str(value).strip()
    if not text:
        raise ValidationError(message=f"'{field}' must not be empty", field=field)
    return text


def parse_price(value: Any) -> Decimal:
    """
    Parse a price into a non-negative Decimal rounded to cents.

    Accepts Decimal, int, float and numeric strings ("9.99", " 12.5 ").
    Booleans are rejected even though Python treats them as ints.

    Raises:
        ParseError: not a finite number
        ValidationError: negative, or larger than the column allows
    """
    if value is None or isinstance(value, bool):
        raise ParseError(field="price", value=value, expected="a number")

    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ParseError(field="price", value=value, expected="a number")

    if not amount.is_finite():
        raise ParseError(field="price", value=value, expected="a finite number")
    if amount < 0:
        raise ValidationError(
            message="'price' must not be negative",
            field="price",
            context={"value": str(value)},
        )

    # Bound before quantizing: quantize() itself fails on huge exponents
    if amount > MAX_PRICE or amount.quantize(_CENTS, rounding=ROUND_HALF_UP) > MAX_PRICE:
        raise ValidationError(
            message=f"'price' must not exceed {MAX_PRICE}",
            field="price",
            context={"value": str(value)},
        )
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def parse_available(value: Any) -> bool:
    """
    Strict boolean parse for the `available` field.

    True/False pass through; the strings "true"/"false" are accepted in any
    case. Everything else, including None, is a ParseError.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ParseError(field="available", value=value, expected="true or false")


def coerce_available_filter(value: Optional[str]) -> Optional[bool]:
    """
    Lenient coercion for the `available` query parameter.

    Absent → None (no constraint); "true" in any case → True; any other
    supplied value → False.
    """
    if value is None:
        return None
    return value.strip().lower() == "true"


def optional_text(value: Any) -> Optional[str]:
    """Return the text as given, or None when it is missing or blank."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None
