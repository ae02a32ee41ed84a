# storefront/services/coercion.py
"""Numeric input policies for catalog and order payloads.

Prices and stock are deliberately treated differently: a price that does not
parse is a client error, a stock count that does not parse is clamped to 0.
Both policies are kept as they are; do not merge them.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from storefront.errors import ValidationError

CENT = Decimal("0.01")
# largest amount a Numeric(10, 2) column holds
MAX_MONEY = Decimal("99999999.99")
# INTEGER columns are 32-bit on PostgreSQL and MySQL
MAX_INT = 2**31 - 1


def _to_decimal(val) -> Decimal | None:
    if val is None or isinstance(val, bool):
        return None
    s = str(val).strip()
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return d if d.is_finite() else None


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def strict_price(val, field: str = "Price") -> Decimal:
    """Strict policy: the value must be numeric; rounded to cents."""
    d = _to_decimal(val)
    if d is None:
        raise ValidationError(f"{field} must be a number")
    if abs(d) > MAX_MONEY:
        raise ValidationError(f"{field} is out of range")
    return round_money(d)


def clamped_stock(val) -> int:
    """Lenient policy: anything that is not a non-negative number becomes 0,
    counts beyond the INTEGER range are capped."""
    d = _to_decimal(val)
    if d is None or d < 0:
        return 0
    if d > MAX_INT:
        return MAX_INT
    return int(d)


def to_money(val) -> Decimal:
    """Values read back from the store (float, int, str or Decimal) as Decimal."""
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val if val is not None else 0))


def format_money(value: Decimal) -> str:
    return f"{round_money(value):.2f}"
