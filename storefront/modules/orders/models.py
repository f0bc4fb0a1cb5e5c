"""Domain models and status rules for orders."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from storefront.modules.common import UNSET, InvalidTransitionError, from_cents


class OrderStatus(str, enum.Enum):
    PENDING_REVIEW = "pending_review"
    PROCESSING = "processing"
    COMPLETED = "completed"


# Admin-driven moves; everything else is rejected.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING_REVIEW: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.COMPLETED, OrderStatus.PENDING_REVIEW}),
    OrderStatus.COMPLETED: frozenset(),
}
EDITABLE_STATUSES = frozenset({OrderStatus.PENDING_REVIEW})
DELETABLE_STATUSES = frozenset({OrderStatus.PENDING_REVIEW, OrderStatus.PROCESSING})


def parse_status(value: str | OrderStatus) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise InvalidTransitionError(f"unknown order status: {value}") from exc


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"cannot move order from {current.value} to {target.value}",
            current=current.value,
            target=target.value,
        )


def check_editable(status: OrderStatus) -> None:
    if status not in EDITABLE_STATUSES:
        raise InvalidTransitionError(
            f"orders in {status.value} cannot be edited", current=status.value
        )


def check_deletable(status: OrderStatus) -> None:
    if status not in DELETABLE_STATUSES:
        raise InvalidTransitionError(
            f"orders in {status.value} cannot be deleted", current=status.value
        )


@dataclass(frozen=True, slots=True)
class OrderState:
    """Snapshot identity used for optimistic concurrency on writes."""

    version: int
    status: OrderStatus


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    user_id: str
    service_id: Optional[str]
    quantity: int
    target_url: str
    notes: Optional[str]
    total_cents: int
    status: OrderStatus
    version: int
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total(self) -> Decimal:
        return from_cents(self.total_cents)

    @property
    def state(self) -> OrderState:
        return OrderState(version=self.version, status=self.status)

    def evolve(self, **changes) -> "Order":
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class NewOrder:
    """An order that has been priced but not yet written."""

    user_id: str
    service_id: str
    quantity: int
    target_url: str
    notes: Optional[str]
    total_cents: int
    idempotency_key: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING_REVIEW
    # Assigned up front so the wallet debit can reference the order it pays for.
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(slots=True)
class OrderEditInput:
    quantity: int | object = UNSET
    target_url: str | object = UNSET
    notes: Optional[str] | object = UNSET


@dataclass(frozen=True, slots=True)
class OrderQuote:
    service_id: str
    quantity: int
    total: Decimal
    current_total: Optional[Decimal] = None

    @property
    def delta(self) -> Decimal:
        return self.total - (self.current_total or Decimal("0.00"))


@dataclass(frozen=True, slots=True)
class OrderStatusCounts:
    pending_review: int = 0
    processing: int = 0
    completed: int = 0


@dataclass(frozen=True, slots=True)
class PlaceOrderInput:
    service_id: str
    quantity: int
    target_url: str
    notes: Optional[str] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LedgerReceipt:
    """Server-side outcome of a money-moving order operation.

    ``order`` is the order as committed; for a deletion it is the order as
    it was just before removal. ``balance_cents`` is the wallet balance
    after the operation.
    """

    order: Order
    balance_cents: int
    replayed: bool = False

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)
