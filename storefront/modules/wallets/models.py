"""Domain models for wallet operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from storefront.modules.common import from_cents


class TransactionType(str, enum.Enum):
    FUND = "fund"
    ORDER_DEBIT = "order_debit"
    ORDER_ADJUST = "order_adjust"
    ORDER_REFUND = "order_refund"


@dataclass(slots=True)
class WalletSnapshot:
    account_id: str
    balance_cents: int
    currency: str
    updated_at: Optional[datetime]

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)


@dataclass(slots=True)
class WalletTransactionRecord:
    id: str
    account_id: str
    order_id: Optional[str]
    amount_cents: int
    balance_after_cents: int
    currency: str
    type: str
    description: Optional[str]
    created_at: datetime

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)


@dataclass(frozen=True, slots=True)
class LedgerReconciliation:
    """Money accounting for one wallet at a rest point.

    ``balance + open_orders == funded - completed_orders`` must hold for
    every wallet; ``consistent`` reports whether it does.
    """

    account_id: str
    balance_cents: int
    open_orders_cents: int
    funded_cents: int
    completed_orders_cents: int

    @property
    def consistent(self) -> bool:
        return (
            self.balance_cents + self.open_orders_cents
            == self.funded_cents - self.completed_orders_cents
        )
