"""Admin-facing read models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from storefront.modules.accounts.models import Account
from storefront.modules.common import from_cents
from storefront.modules.orders.models import OrderStatusCounts


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_users: int
    banned_users: int
    total_services: int
    orders: OrderStatusCounts
    revenue_cents: int

    @property
    def revenue(self) -> Decimal:
        return from_cents(self.revenue_cents)

    @property
    def total_orders(self) -> int:
        return self.orders.pending_review + self.orders.processing + self.orders.completed


@dataclass(frozen=True, slots=True)
class AccountWithBalance:
    account: Account
    balance_cents: int

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)


@dataclass(slots=True)
class AdminAccountInput:
    username: str
    password: str
    role: str = "user"
    email: Optional[str] = None
    initial_balance: Decimal = Decimal("0")
