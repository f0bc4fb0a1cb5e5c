"""Order pricing.

``price(service, quantity) = quantity / 1000 * price_per_1000`` rounded to
cents with ROUND_HALF_UP. Pure and deterministic: no store access, no
clock, no configuration.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from storefront.modules.common import InvalidInputError, quantize, to_cents

UNIT_SIZE = 1000


class Priced(Protocol):
    price_per_1000: Decimal


def validate_quantity(quantity: object, *, max_quantity: int | None = None) -> int:
    # bool is an int subclass; True is not a quantity.
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidInputError("quantity must be an integer", quantity=quantity)
    if quantity < 1:
        raise InvalidInputError("quantity must be at least 1", quantity=quantity)
    if max_quantity is not None and quantity > max_quantity:
        raise InvalidInputError(f"quantity must be at most {max_quantity}", quantity=quantity)
    return quantity


def price(service: Priced, quantity: int) -> Decimal:
    validate_quantity(quantity)
    unit_price = Decimal(service.price_per_1000)
    if unit_price < 0:
        raise InvalidInputError("service price must not be negative")
    return quantize(Decimal(quantity) * unit_price / UNIT_SIZE)


def price_cents(service: Priced, quantity: int) -> int:
    return to_cents(price(service, quantity))


__all__ = ["UNIT_SIZE", "price", "price_cents", "validate_quantity"]
