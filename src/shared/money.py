"""Fixed-point money helpers.

All amounts in the store are decimals with three fractional digits in a
single currency. Floats never reach the database.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

SCALE = Decimal("0.001")
ZERO = Decimal("0.000")

# Amount columns are NUMERIC(10, 3); counts are 32-bit INTEGER columns.
MAX_DIGITS = 10
MAX_AMOUNT = Decimal("9999999.999")
MAX_COUNT = 2_147_483_647


def to_amount(value) -> Decimal:
    """Coerce ``value`` to a three-place decimal.

    Raises ``ValueError`` for anything that is not a finite number, including
    values too large to be represented at three places.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
        if not amount.is_finite():
            raise ValueError(f"Not a monetary amount: {value!r}")
        return amount.quantize(SCALE, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a monetary amount: {value!r}") from None


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return to_amount(unit_price * quantity)


def as_number(amount: Decimal | None) -> float | None:
    """Render an amount for JSON output."""
    if amount is None:
        return None
    return float(amount)
