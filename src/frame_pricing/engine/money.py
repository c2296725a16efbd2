"""
Decimal helpers shared by every pricer.

All money is Decimal, quantized to cents with ROUND_HALF_UP where it is produced.
"""
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional, Type

from .errors import PricingError, InvalidDimension

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

PRICING_PRECISION = 28
_CONTEXT = Context(prec=PRICING_PRECISION, rounding=ROUND_HALF_UP)


def pricing_context():
    """
    Fixed decimal context for all pricing arithmetic.

    Results never depend on the caller's thread-local context.
    """
    return localcontext(_CONTEXT)


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a user-supplied number to Decimal via its string form.

    Returns None when the value is not numeric (None, bool, garbage strings).
    NaN and infinities are returned as-is so callers can reject them by name.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def money(value: Decimal) -> Decimal:
    """Quantize to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP, context=_CONTEXT)


def format_money(value: Decimal) -> str:
    """Two fraction digits, e.g. '132.00'."""
    return f"{money(value):.2f}"


def require_positive(
    value: Any,
    field: str,
    error: Type[PricingError] = InvalidDimension,
    maximum: Optional[Decimal] = None
) -> Decimal:
    """Finite, > 0 and at most `maximum` (when given), else raise `error`."""
    number = to_decimal(value)
    if number is None or not number.is_finite() or number <= 0:
        raise error(f"{field} must be a positive finite number", field=field, value=value)
    _check_maximum(number, field, error, maximum, value)
    return number


def require_non_negative(
    value: Any,
    field: str,
    error: Type[PricingError] = InvalidDimension,
    maximum: Optional[Decimal] = None
) -> Decimal:
    """Finite, >= 0 and at most `maximum` (when given), else raise `error`."""
    number = to_decimal(value)
    if number is None or not number.is_finite() or number < 0:
        raise error(f"{field} must be a non-negative finite number", field=field, value=value)
    _check_maximum(number, field, error, maximum, value)
    return number


def _check_maximum(number: Decimal, field: str, error: Type[PricingError], maximum: Optional[Decimal], value: Any):
    if maximum is not None and number > maximum:
        raise error(f"{field} must be at most {maximum}", field=field, value=value)
