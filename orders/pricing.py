"""Order price calculation.

All money is :class:`~decimal.Decimal`. Every figure is rounded to cents with
``ROUND_HALF_UP`` on its own, and the total is the rounded sum of the three
already-rounded parts. Rounding the raw sum once instead can be a cent off.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import ValidationError


CENT = Decimal('0.01')
FREE_SHIPPING_THRESHOLD = Decimal('100.00')
FLAT_SHIPPING_PRICE = Decimal('10.00')
TAX_RATE = Decimal('0.15')


def round2(value) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """Coerce ints, strings, floats and Decimals to a finite Decimal.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal('0.1')``.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"{value!r} is not a valid amount.")
    if not result.is_finite():
        raise ValidationError(f"{value!r} is not a finite amount.")
    return result


@dataclass(frozen=True)
class Prices:
    items_price: Decimal
    shipping_price: Decimal
    tax_price: Decimal
    total_price: Decimal


def _line_total(item) -> Decimal:
    price = to_decimal(item.price)
    if price < 0:
        raise ValidationError(f"Unit price {price} cannot be negative.")
    qty = item.qty
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise ValidationError(f"Quantity {qty!r} must be a positive integer.")
    return price * qty


def calculate_prices(items) -> Prices:
    """Price a sequence of line items.

    Each item needs a catalog-sourced ``price`` and an integer ``qty``.
    """
    items_price = round2(sum((_line_total(item) for item in items), Decimal('0')))
    shipping_price = round2(Decimal('0') if items_price > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_PRICE)
    tax_price = round2(TAX_RATE * items_price)
    total_price = round2(items_price + shipping_price + tax_price)
    return Prices(
        items_price=items_price,
        shipping_price=shipping_price,
        tax_price=tax_price,
        total_price=total_price,
    )
