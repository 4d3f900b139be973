"""
Validation utilities for money amounts
"""
import re
from decimal import Decimal, InvalidOperation

from finledger.domain.errors import InvalidAmount, ValidationError

_CENT = Decimal("0.01")


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount typed by a user: comma -> dot, surrounding spaces removed

    Example:
        >>> normalize_decimal_input(" 100,50 ")
        "100.50"
    """
    return value.strip().replace(",", ".")


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Check that a string is a decimal amount with at most max_decimal_places

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("100.505")
        (False, "At most 2 decimal places allowed")
    """
    normalized = normalize_decimal_input(value)

    try:
        Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Invalid amount"

    pattern = rf"^-?\d+(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"At most {max_decimal_places} decimal places allowed"

    return True, None


def validate_and_normalize_amount(value: str, max_decimal_places: int = 2) -> str:
    """
    Validate and normalize an amount string

    Raises:
        ValidationError: if the value is not a valid amount
    """
    is_valid, error = validate_decimal_amount(value, max_decimal_places)
    if not is_valid:
        raise ValidationError(error)

    return normalize_decimal_input(value)


def to_decimal(value, field: str = "amount") -> Decimal:
    """Coerce int / str / Decimal to Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(normalize_decimal_input(str(value)))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field}: invalid decimal value {value!r}")
    if not result.is_finite():
        raise ValidationError(f"{field}: must be a finite number")
    return result


def to_money(value, field: str = "amount") -> Decimal:
    """
    Coerce to a Decimal with exactly two decimal places (the Numeric(20,2) columns)

    Raises:
        InvalidAmount: value has a non-zero fraction below one cent
    """
    result = to_decimal(value, field)
    try:
        cents = result.quantize(_CENT)
    except InvalidOperation:
        raise ValidationError(f"{field}: amount out of range {result}")
    if cents != result:
        raise InvalidAmount(f"{field}: at most 2 decimal places allowed, got {result}")
    return cents


def require_positive(value, field: str = "amount") -> Decimal:
    """Return value as a cent-exact Decimal, raising InvalidAmount unless it is > 0."""
    amount = to_money(value, field)
    if amount <= 0:
        raise InvalidAmount(f"{field} must be greater than zero, got {amount}")
    return amount
