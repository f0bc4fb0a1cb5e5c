"""SQLAlchemy implementation for wallet storage."""

from __future__ import annotations

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Wallet, WalletTransaction


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_wallet(self, account_id: str) -> Wallet | None:
        stmt = select(Wallet).where(Wallet.account_id == account_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_wallet(self, account_id: str, currency: str) -> Wallet:
        wallet = Wallet(account_id=account_id, currency=currency, balance_cents=0)
        try:
            async with self.session.begin_nested():
                self.session.add(wallet)
        except IntegrityError:
            # Created concurrently; the savepoint keeps the outer transaction usable.
            wallet = await self.get_wallet(account_id)
            if wallet is None:
                raise
        return wallet

    async def apply_debit(self, account_id: str, amount_cents: int) -> int | None:
        """Subtract ``amount_cents`` in a single statement.

        A positive amount only matches when the balance covers it, so two
        concurrent debits can never both pass on the same funds. Negative
        amounts are credits and always match an existing wallet.
        """
        stmt = update(Wallet).where(Wallet.account_id == account_id)
        if amount_cents > 0:
            stmt = stmt.where(Wallet.balance_cents >= amount_cents)
        stmt = (
            stmt.values(balance_cents=Wallet.balance_cents - amount_cents)
            .returning(Wallet.balance_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_transaction(
        self,
        *,
        account_id: str,
        order_id: str | None,
        amount_cents: int,
        balance_after_cents: int,
        currency: str,
        type: str,
        description: str | None,
    ) -> WalletTransaction:
        tx = WalletTransaction(
            account_id=account_id,
            order_id=order_id,
            amount_cents=amount_cents,
            balance_after_cents=balance_after_cents,
            currency=currency,
            type=type,
            description=description,
        )
        self.session.add(tx)
        await self.session.flush()
        return tx

    async def list_transactions(self, account_id: str, limit: int, offset: int) -> list[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.account_id == account_id)
            .order_by(desc(WalletTransaction.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_transactions(self, account_id: str, type: str) -> int:
        stmt = select(func.coalesce(func.sum(WalletTransaction.amount_cents), 0)).where(
            WalletTransaction.account_id == account_id,
            WalletTransaction.type == type,
        )
        return int((await self.session.execute(stmt)).scalar_one())
