"""Decimal money helpers shared by the splitter and the ledger."""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidInputError

DEFAULT_EPSILON = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """
    Convert an int, str, float or Decimal amount to Decimal.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Raises:
        InvalidInputError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise InvalidInputError(f"Not a monetary amount: {value!r}") from e

    if not result.is_finite():
        raise InvalidInputError(f"Not a monetary amount: {value!r}")
    return result


def quantum(places: int) -> Decimal:
    """Smallest currency unit for the given number of decimal places."""
    return Decimal(1).scaleb(-places)


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round an amount for display using ROUND_HALF_UP."""
    return amount.quantize(quantum(places), rounding=ROUND_HALF_UP)


def floor_money(amount: Decimal, places: int = 2) -> Decimal:
    """Truncate a non-negative amount to the given number of decimal places."""
    return amount.quantize(quantum(places), rounding=ROUND_DOWN)


def is_zero(amount: Decimal, epsilon: Decimal = DEFAULT_EPSILON) -> bool:
    """True when the amount is within the settlement tolerance of zero."""
    return abs(amount) <= epsilon
