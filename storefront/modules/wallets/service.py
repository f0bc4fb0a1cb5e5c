"""Read-side wallet services."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Wallet as WalletModel, WalletTransaction as WalletTransactionModel
from storefront.infrastructure.database.repositories.order_repository import SqlOrderRepository
from storefront.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

from .exceptions import WalletNotFoundError
from .models import LedgerReconciliation, TransactionType, WalletSnapshot, WalletTransactionRecord
from .repository import WalletRepository


class WalletService:
    def __init__(self, repository: WalletRepository, orders: SqlOrderRepository) -> None:
        self._repository = repository
        self._orders = orders

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        return cls(SqlWalletRepository(session), SqlOrderRepository(session))

    async def get_snapshot(self, account_id: str) -> WalletSnapshot:
        wallet = await self._repository.get_wallet(account_id)
        if wallet is None:
            raise WalletNotFoundError(account_id=account_id)
        return _snapshot(wallet)

    async def ensure_wallet(self, account_id: str, currency: str = "USD") -> WalletSnapshot:
        wallet = await self._repository.get_wallet(account_id)
        if wallet is None:
            wallet = await self._repository.create_wallet(account_id, currency)
        return _snapshot(wallet)

    async def list_transactions(
        self, account_id: str, *, limit: int = 50, offset: int = 0
    ) -> Sequence[WalletTransactionRecord]:
        rows = await self._repository.list_transactions(account_id, limit, offset)
        return [_record(row) for row in rows]

    async def reconcile(self, account_id: str) -> LedgerReconciliation:
        """Compare the wallet balance against funding and order totals."""
        wallet = await self._repository.get_wallet(account_id)
        if wallet is None:
            raise WalletNotFoundError(account_id=account_id)
        return LedgerReconciliation(
            account_id=account_id,
            balance_cents=wallet.balance_cents,
            open_orders_cents=await self._orders.sum_totals(user_id=account_id, completed=False),
            funded_cents=await self._repository.sum_transactions(account_id, TransactionType.FUND.value),
            completed_orders_cents=await self._orders.sum_totals(user_id=account_id, completed=True),
        )


def _snapshot(wallet: WalletModel) -> WalletSnapshot:
    return WalletSnapshot(
        account_id=wallet.account_id,
        balance_cents=wallet.balance_cents,
        currency=wallet.currency,
        updated_at=wallet.updated_at or wallet.created_at,
    )


def _record(row: WalletTransactionModel) -> WalletTransactionRecord:
    return WalletTransactionRecord(
        id=row.id,
        account_id=row.account_id,
        order_id=row.order_id,
        amount_cents=row.amount_cents,
        balance_after_cents=row.balance_after_cents,
        currency=row.currency,
        type=row.type,
        description=row.description,
        created_at=row.created_at,
    )
