"""Two-place decimal helpers for monetary values"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from finledger.domain.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def money(value: Any) -> Decimal:
    """Quantize any numeric value to two places (ROUND_HALF_UP); None becomes 0.00"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        # str() keeps floats like 0.1 from dragging binary noise into the Decimal
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def positive_amount(value: Any, field: str = "amount") -> Decimal:
    """Parse a strictly positive amount or raise ValidationError"""
    try:
        amount = money(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(f"{field} must be a decimal number", field=field) from e
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    if value is None or amount <= ZERO:
        raise ValidationError(f"{field} must be greater than zero", field=field)
    return amount


def non_negative_amount(value: Any, field: str) -> Decimal:
    """Parse an amount that may be zero"""
    try:
        amount = money(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(f"{field} must be a decimal number", field=field) from e
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    if amount < ZERO:
        raise ValidationError(f"{field} must not be negative", field=field)
    return amount
