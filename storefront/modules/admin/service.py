"""Privileged operations: order status control, forced deletion, catalog and account management.

Every method takes the acting :class:`Principal` and refuses anyone who is
not an active admin before touching the store.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.config import Settings, get_settings
from storefront.modules.accounts.models import Account, AccountCreateInput
from storefront.modules.accounts.service import AccountService
from storefront.modules.catalog.models import Service, ServiceCreateInput, ServiceUpdateInput
from storefront.modules.catalog.service import CatalogService
from storefront.modules.common import ConflictError, ForbiddenError, InvalidInputError, Principal, to_cents
from storefront.modules.ledger.store import LedgerStore, LedgerTransaction
from storefront.modules.orders.models import (
    LedgerReceipt,
    Order,
    OrderStatus,
    check_deletable,
    check_transition,
    parse_status,
)
from storefront.modules.wallets.models import LedgerReconciliation, TransactionType, WalletSnapshot
from storefront.modules.wallets.service import WalletService

from .models import AccountWithBalance, AdminAccountInput, DashboardStats

logger = logging.getLogger(__name__)

# Where "advance" moves an order from each status.
_NEXT_STATUS = {
    OrderStatus.PENDING_REVIEW: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.COMPLETED,
}


class AdminOperations:
    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    @classmethod
    def from_settings(
        cls, session_factory: async_sessionmaker[AsyncSession], settings: Settings | None = None
    ) -> "AdminOperations":
        return cls(LedgerStore.from_settings(session_factory, settings or get_settings()))

    # -- order status -------------------------------------------------------

    async def change_status(
        self,
        principal: Principal,
        order_id: str,
        target: OrderStatus | str,
        *,
        expected_version: int | None = None,
    ) -> Order:
        """Move an order along the admin state machine.

        The write is guarded by the status and version that were read, so a
        concurrent edit or transition makes this call fail with a conflict
        instead of overwriting it.
        """
        principal.require_admin()
        target = parse_status(target)

        async def _change(tx: LedgerTransaction) -> tuple[Order, OrderStatus]:
            order = await tx.get_order(order_id)
            _check_version(order, expected_version)
            check_transition(order.status, target)
            written = await tx.write_order(order.evolve(status=target), expected=order.state)
            return written, order.status

        order, previous = await self.store.run(_change, name="change_status")
        logger.info(
            "order status changed id=%s admin=%s %s -> %s total_cents=%d",
            order_id,
            principal.account_id,
            previous.value,
            order.status.value,
            order.total_cents,
        )
        return order

    async def advance(self, principal: Principal, order_id: str, *, expected_version: int | None = None) -> Order:
        principal.require_admin()
        order = await self.get_order(principal, order_id)
        target = _NEXT_STATUS.get(order.status)
        if target is None:
            check_transition(order.status, order.status)
        return await self.change_status(
            principal,
            order_id,
            target,
            expected_version=order.version if expected_version is None else expected_version,
        )

    async def revert(self, principal: Principal, order_id: str, *, expected_version: int | None = None) -> Order:
        return await self.change_status(
            principal, order_id, OrderStatus.PENDING_REVIEW, expected_version=expected_version
        )

    async def delete_order(
        self, principal: Principal, order_id: str, *, expected_version: int | None = None
    ) -> LedgerReceipt:
        """Remove an open order and refund its total to the owner in one transaction."""
        principal.require_admin()

        async def _delete(tx: LedgerTransaction) -> LedgerReceipt:
            order = await tx.get_order(order_id)
            _check_version(order, expected_version)
            check_deletable(order.status)
            await tx.ensure_wallet(order.user_id)
            balance = await tx.credit(
                order.user_id,
                order.total_cents,
                type=TransactionType.ORDER_REFUND,
                order_id=order.id,
                description=f"refund for deleted order {order.id}",
            )
            await tx.remove_order(order.id, expected=order.state)
            return LedgerReceipt(order, balance)

        receipt = await self.store.run(_delete, name="delete_order")
        logger.info(
            "order deleted id=%s admin=%s user=%s refund_cents=%d balance_cents=%d",
            order_id,
            principal.account_id,
            receipt.order.user_id,
            receipt.order.total_cents,
            receipt.balance_cents,
        )
        return receipt

    async def list_orders(
        self,
        principal: Principal,
        *,
        status: Optional[OrderStatus] = None,
        user_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Order]:
        principal.require_admin()
        return await self.store.run(
            lambda tx: tx.orders.list_orders(user_id=user_id, status=status, limit=limit, offset=offset),
            name="admin list_orders",
        )

    async def get_order(self, principal: Principal, order_id: str) -> Order:
        principal.require_admin()
        return await self.store.run(lambda tx: tx.get_order(order_id), name="admin get_order")

    # -- catalog ------------------------------------------------------------

    async def create_service(self, principal: Principal, payload: ServiceCreateInput) -> Service:
        principal.require_admin()
        return await self.store.run(
            lambda tx: CatalogService.with_session(tx.session).create_service(payload),
            name="create_service",
        )

    async def update_service(self, principal: Principal, service_id: str, payload: ServiceUpdateInput) -> Service:
        principal.require_admin()
        return await self.store.run(
            lambda tx: CatalogService.with_session(tx.session).update_service(service_id, payload),
            name="update_service",
        )

    async def delete_service(self, principal: Principal, service_id: str) -> None:
        principal.require_admin()
        await self.store.run(
            lambda tx: CatalogService.with_session(tx.session).delete_service(service_id),
            name="delete_service",
        )

    # -- accounts and wallets -----------------------------------------------

    async def list_accounts(
        self, principal: Principal, *, limit: int = 50, offset: int = 0
    ) -> Sequence[AccountWithBalance]:
        principal.require_admin()

        async def _list(tx: LedgerTransaction) -> list[AccountWithBalance]:
            accounts = await AccountService.with_session(tx.session).list_accounts(limit=limit, offset=offset)
            rows = []
            for account in accounts:
                wallet = await tx.wallets.get_wallet(account.id)
                rows.append(AccountWithBalance(account, wallet.balance_cents if wallet else 0))
            return rows

        return await self.store.run(_list, name="list_accounts")

    async def create_account(self, principal: Principal, payload: AdminAccountInput) -> AccountWithBalance:
        """Create an account with its wallet; a non-zero opening balance is recorded as funding."""
        principal.require_admin()
        initial_cents = _parse_amount(payload.initial_balance, allow_zero=True)

        async def _create(tx: LedgerTransaction) -> AccountWithBalance:
            account = await AccountService.with_session(tx.session).create_account(
                AccountCreateInput(
                    username=(payload.username or "").strip(),
                    password=payload.password,
                    role=payload.role,
                    email=payload.email,
                )
            )
            balance = await tx.ensure_wallet(account.id)
            if initial_cents:
                balance = await tx.credit(
                    account.id, initial_cents, type=TransactionType.FUND, description="opening balance"
                )
            return AccountWithBalance(account, balance)

        created = await self.store.run(_create, name="create_account")
        logger.info(
            "account created by admin id=%s admin=%s role=%s funded_cents=%d",
            created.account.id,
            principal.account_id,
            created.account.role,
            initial_cents,
        )
        return created

    async def set_banned(self, principal: Principal, account_id: str, is_banned: bool) -> Account:
        principal.require_admin()
        if account_id == principal.account_id and is_banned:
            raise ForbiddenError("admins cannot ban themselves", account_id=account_id)
        return await self.store.run(
            lambda tx: AccountService.with_session(tx.session).set_banned(account_id, is_banned),
            name="set_banned",
        )

    async def fund_wallet(
        self, principal: Principal, account_id: str, amount: Decimal | str, *, description: str | None = None
    ) -> WalletSnapshot:
        principal.require_admin()
        amount_cents = _parse_amount(amount)

        async def _fund(tx: LedgerTransaction) -> WalletSnapshot:
            await AccountService.with_session(tx.session).require(account_id)
            await tx.ensure_wallet(account_id)
            await tx.credit(
                account_id,
                amount_cents,
                type=TransactionType.FUND,
                description=description or f"funded by {principal.account_id}",
            )
            return await WalletService.with_session(tx.session).get_snapshot(account_id)

        snapshot = await self.store.run(_fund, name="fund_wallet")
        logger.info(
            "wallet funded account=%s admin=%s amount_cents=%d balance_cents=%d",
            account_id,
            principal.account_id,
            amount_cents,
            snapshot.balance_cents,
        )
        return snapshot

    async def get_wallet(self, principal: Principal, account_id: str) -> WalletSnapshot:
        principal.require_admin()
        return await self.store.run(
            lambda tx: WalletService.with_session(tx.session).get_snapshot(account_id), name="admin get_wallet"
        )

    async def reconcile(self, principal: Principal, account_id: str) -> LedgerReconciliation:
        principal.require_admin()
        return await self.store.run(
            lambda tx: WalletService.with_session(tx.session).reconcile(account_id), name="reconcile"
        )

    async def stats(self, principal: Principal) -> DashboardStats:
        principal.require_admin()

        async def _stats(tx: LedgerTransaction) -> DashboardStats:
            accounts = AccountService.with_session(tx.session)
            return DashboardStats(
                total_users=await accounts.count_accounts(),
                banned_users=await accounts.count_accounts(banned=True),
                total_services=await CatalogService.with_session(tx.session).count_services(),
                orders=await tx.orders.count_by_status(),
                revenue_cents=await tx.orders.sum_totals(completed=True),
            )

        return await self.store.run(_stats, name="stats")


def _check_version(order: Order, expected_version: int | None) -> None:
    if expected_version is not None and order.version != expected_version:
        raise ConflictError(
            "order changed since it was read",
            order_id=order.id,
            expected_version=expected_version,
            current_version=order.version,
        )


def _parse_amount(value: Any, *, allow_zero: bool = False) -> int:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidInputError("amount must be a number") from exc
    if not amount.is_finite() or amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidInputError("amount must be positive")
    if amount != amount.quantize(Decimal("0.01")):
        raise InvalidInputError("amount must have at most two decimal places")
    return to_cents(amount)
