"""Monetary arithmetic in whole currency subunits.

Amounts are plain ``int`` values in the smallest subunit of the store
currency. Rates are ``Decimal`` fractions (``Decimal("0.09")`` is 9%). Any
multiplication by a rate is rounded half-up to a whole subunit immediately.
"""

from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal(100)


def to_rate(value) -> Decimal:
    """Coerce a rate given as ``Decimal``, ``str`` or ``int`` into a ``Decimal``.

    Floats are routed through ``str`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def apply_rate(amount: int, rate) -> int:
    """Return ``amount * rate`` rounded half-up to a whole subunit."""
    product = Decimal(amount) * to_rate(rate)
    return int(product.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def percent_of(amount: int, percent) -> int:
    """Return ``percent``% of ``amount`` rounded half-up to a whole subunit."""
    return apply_rate(amount, to_rate(percent) / HUNDRED)


def line_total(quantity: int, unit_price: int) -> int:
    return quantity * unit_price


def floor_at_zero(amount: int) -> int:
    return amount if amount > 0 else 0
