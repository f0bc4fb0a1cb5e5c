"""Pricing engine."""

from .engine import UNIT_SIZE, price, price_cents, validate_quantity

__all__ = ["UNIT_SIZE", "price", "price_cents", "validate_quantity"]
