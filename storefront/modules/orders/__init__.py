"""Order models and status rules; the lifecycle manager lives in ``orders.lifecycle``."""

from .exceptions import OrderNotFoundError
from .models import (
    ALLOWED_TRANSITIONS,
    LedgerReceipt,
    NewOrder,
    Order,
    OrderEditInput,
    OrderQuote,
    OrderState,
    OrderStatus,
    OrderStatusCounts,
    PlaceOrderInput,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "LedgerReceipt",
    "NewOrder",
    "Order",
    "OrderEditInput",
    "OrderNotFoundError",
    "OrderQuote",
    "OrderState",
    "OrderStatus",
    "OrderStatusCounts",
    "PlaceOrderInput",
]
