"""Order lifecycle manager: placement, edits and owner-side reads.

Every money-moving call is one :meth:`LedgerStore.run` unit, so the wallet
change and the order write commit together or not at all.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.config import Settings, get_settings
from storefront.modules.catalog.exceptions import ServiceNotFoundError
from storefront.modules.common import UNSET, ConflictError, InvalidInputError, Principal, from_cents
from storefront.modules.ledger.store import DuplicateIdempotencyKeyError, LedgerStore, LedgerTransaction
from storefront.modules.pricing import price_cents, validate_quantity
from storefront.modules.wallets.models import TransactionType

from .models import (
    LedgerReceipt,
    NewOrder,
    Order,
    OrderEditInput,
    OrderQuote,
    OrderStatus,
    PlaceOrderInput,
    check_editable,
)

logger = logging.getLogger(__name__)

MAX_URL_LENGTH = 2048
MAX_IDEMPOTENCY_KEY_LENGTH = 100


class OrderLifecycleManager:
    """Prices, places and edits orders on behalf of an explicit principal."""

    def __init__(self, store: LedgerStore, *, max_quantity: int | None = None) -> None:
        self.store = store
        self.max_quantity = max_quantity

    @classmethod
    def from_settings(
        cls, session_factory: async_sessionmaker[AsyncSession], settings: Settings | None = None
    ) -> "OrderLifecycleManager":
        settings = settings or get_settings()
        return cls(
            LedgerStore.from_settings(session_factory, settings),
            max_quantity=settings.ledger.max_quantity,
        )

    async def quote(
        self,
        principal: Principal,
        *,
        service_id: str,
        quantity: int,
        order_id: str | None = None,
    ) -> OrderQuote:
        """Price a prospective order, or an edit of ``order_id``, without side effects."""
        principal.require_active()
        quantity = validate_quantity(quantity, max_quantity=self.max_quantity)

        async def _quote(tx: LedgerTransaction) -> OrderQuote:
            service = await tx.get_service(service_id)
            total = price_cents(service, quantity)
            current = None
            if order_id is not None:
                order = await self._owned_order(tx, principal, order_id)
                current = order.total
            return OrderQuote(
                service_id=service.id,
                quantity=quantity,
                total=from_cents(total),
                current_total=current,
            )

        return await self.store.run(_quote, name="quote")

    async def place_order(self, principal: Principal, payload: PlaceOrderInput) -> LedgerReceipt:
        principal.require_active()
        quantity = validate_quantity(payload.quantity, max_quantity=self.max_quantity)
        target_url = _clean_url(payload.target_url)
        notes = _clean_notes(payload.notes)
        key = _clean_idempotency_key(payload.idempotency_key)

        async def _place(tx: LedgerTransaction) -> LedgerReceipt:
            if key is not None:
                existing = await tx.orders.get_by_idempotency_key(principal.account_id, key)
                if existing is not None:
                    return LedgerReceipt(existing, await tx.ensure_wallet(principal.account_id), replayed=True)

            service = await tx.get_service(payload.service_id)
            new_order = NewOrder(
                user_id=principal.account_id,
                service_id=service.id,
                quantity=quantity,
                target_url=target_url,
                notes=notes,
                total_cents=price_cents(service, quantity),
                idempotency_key=key,
            )
            await tx.ensure_wallet(principal.account_id)
            balance = await tx.debit(
                principal.account_id,
                new_order.total_cents,
                type=TransactionType.ORDER_DEBIT,
                order_id=new_order.id,
                description=f"order {new_order.id}: {quantity} x {service.name}",
            )
            order = await tx.write_order(new_order, expected=None)
            return LedgerReceipt(order, balance)

        try:
            receipt = await self.store.run(_place, name="place_order")
        except DuplicateIdempotencyKeyError:
            # Lost a race with a request carrying the same key; return its order.
            receipt = await self.store.run(
                lambda tx: self._replay(tx, principal, key), name="place_order replay"
            )

        if receipt.replayed:
            logger.info("order placement replayed id=%s user=%s key=%s", receipt.order.id, principal.account_id, key)
        else:
            logger.info(
                "order placed id=%s user=%s service=%s total_cents=%d balance_cents=%d",
                receipt.order.id,
                principal.account_id,
                receipt.order.service_id,
                receipt.order.total_cents,
                receipt.balance_cents,
            )
        return receipt

    async def edit_order(
        self,
        principal: Principal,
        order_id: str,
        changes: OrderEditInput,
        *,
        expected_version: int | None = None,
    ) -> LedgerReceipt:
        """Apply field changes to a ``pending_review`` order and settle the price difference.

        The new total is recomputed against the service's current price.
        A positive difference is debited (and may fail with insufficient
        funds), a negative one is refunded. Either way the wallet change and
        the order write commit together.
        """
        principal.require_active()
        quantity = (
            validate_quantity(changes.quantity, max_quantity=self.max_quantity)
            if changes.quantity is not UNSET
            else UNSET
        )
        target_url = _clean_url(changes.target_url) if changes.target_url is not UNSET else UNSET
        notes = _clean_notes(changes.notes) if changes.notes is not UNSET else UNSET

        async def _edit(tx: LedgerTransaction) -> tuple[LedgerReceipt, int]:
            order = await tx.get_order(order_id)
            principal.require_owner(order.user_id)
            if expected_version is not None and order.version != expected_version:
                raise ConflictError(
                    "order changed since it was read",
                    order_id=order_id,
                    expected_version=expected_version,
                    current_version=order.version,
                )
            check_editable(order.status)
            if order.service_id is None:
                raise ServiceNotFoundError("the service for this order no longer exists", order_id=order_id)

            service = await tx.get_service(order.service_id)
            updated = order.evolve(
                quantity=order.quantity if quantity is UNSET else quantity,
                target_url=order.target_url if target_url is UNSET else target_url,
                notes=order.notes if notes is UNSET else notes,
            )
            new_total = price_cents(service, updated.quantity)
            delta = new_total - order.total_cents
            updated = updated.evolve(total_cents=new_total)

            if delta:
                balance = await tx.debit(
                    principal.account_id,
                    delta,
                    type=TransactionType.ORDER_ADJUST,
                    order_id=order.id,
                    description=f"order {order.id}: total {order.total_cents} -> {new_total}",
                )
            else:
                balance = await tx.ensure_wallet(principal.account_id)
            written = await tx.write_order(updated, expected=order.state)
            return LedgerReceipt(written, balance), delta

        receipt, delta = await self.store.run(_edit, name="edit_order")
        logger.info(
            "order edited id=%s user=%s delta_cents=%d total_cents=%d balance_cents=%d",
            order_id,
            principal.account_id,
            delta,
            receipt.order.total_cents,
            receipt.balance_cents,
        )
        return receipt

    async def get_order(self, principal: Principal, order_id: str) -> Order:
        principal.require_active()
        return await self.store.run(lambda tx: self._owned_order(tx, principal, order_id), name="get_order")

    async def list_orders(
        self,
        principal: Principal,
        *,
        status: Optional[OrderStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Order]:
        principal.require_active()
        return await self.store.run(
            lambda tx: tx.orders.list_orders(
                user_id=principal.account_id, status=status, limit=limit, offset=offset
            ),
            name="list_orders",
        )

    @staticmethod
    async def _owned_order(tx: LedgerTransaction, principal: Principal, order_id: str) -> Order:
        order = await tx.get_order(order_id)
        if not principal.is_admin:
            principal.require_owner(order.user_id)
        return order

    @staticmethod
    async def _replay(tx: LedgerTransaction, principal: Principal, key: str | None) -> LedgerReceipt:
        existing = await tx.orders.get_by_idempotency_key(principal.account_id, key) if key else None
        if existing is None:
            raise ConflictError("idempotency key collided but no order was found", idempotency_key=key)
        return LedgerReceipt(existing, await tx.ensure_wallet(principal.account_id), replayed=True)


def _clean_url(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError("target_url must not be empty")
    url = value.strip()
    if len(url) > MAX_URL_LENGTH:
        raise InvalidInputError(f"target_url must be at most {MAX_URL_LENGTH} characters")
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InvalidInputError("target_url must be an http(s) URL", target_url=url)
    return url


def _clean_notes(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError("notes must be text")
    return value.strip() or None


def _clean_idempotency_key(value: str | None) -> str | None:
    if value is None:
        return None
    key = value.strip()
    if not key:
        return None
    if len(key) > MAX_IDEMPOTENCY_KEY_LENGTH:
        raise InvalidInputError(f"idempotency_key must be at most {MAX_IDEMPOTENCY_KEY_LENGTH} characters")
    return key
