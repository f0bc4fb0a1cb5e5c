"""Transactional ledger store.

Everything that moves money or changes an order runs through
:meth:`LedgerStore.run`, which opens exactly one database transaction and
hands the operation a :class:`LedgerTransaction`. The two primitives the
rest of the core is built from live on that object:

``debit``
    one conditional ``UPDATE`` on the wallet row; it cannot drive the
    balance negative even when callers race on the same wallet.
``write_order``
    insert, or update guarded by the expected ``(version, status)`` so a
    write based on a stale snapshot is rejected with ``ConflictError``.

If the operation raises anywhere, the whole transaction rolls back, so a
debit is never left without its order or the other way round. Transient
driver failures are retried a bounded number of times and then surfaced
as ``UnavailableError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.config import Settings, get_settings
from storefront.infrastructure.database.repositories.order_repository import SqlOrderRepository
from storefront.infrastructure.database.repositories.service_repository import SqlServiceRepository
from storefront.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from storefront.modules.catalog.exceptions import ServiceNotFoundError
from storefront.modules.catalog.models import Service
from storefront.modules.common import ConflictError, InsufficientFundsError, UnavailableError
from storefront.modules.orders.exceptions import OrderNotFoundError
from storefront.modules.orders.models import NewOrder, Order, OrderState
from storefront.modules.wallets.exceptions import WalletNotFoundError
from storefront.modules.wallets.models import TransactionType

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateIdempotencyKeyError(ConflictError):
    """An order with this idempotency key already exists for the user."""


class LedgerTransaction:
    """Operations available inside one atomic ledger unit."""

    def __init__(self, session: AsyncSession, *, currency: str) -> None:
        self.session = session
        self.currency = currency
        self.orders = SqlOrderRepository(session)
        self.wallets = SqlWalletRepository(session)
        self.services = SqlServiceRepository(session)

    async def get_service(self, service_id: str) -> Service:
        service = await self.services.get(service_id)
        if service is None:
            raise ServiceNotFoundError(service_id=service_id)
        return service

    async def get_order(self, order_id: str) -> Order:
        order = await self.orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id=order_id)
        return order

    async def ensure_wallet(self, account_id: str) -> int:
        wallet = await self.wallets.get_wallet(account_id)
        if wallet is None:
            wallet = await self.wallets.create_wallet(account_id, self.currency)
        return wallet.balance_cents

    async def debit(
        self,
        account_id: str,
        amount_cents: int,
        *,
        type: TransactionType,
        order_id: str | None = None,
        description: str | None = None,
    ) -> int:
        """Take ``amount_cents`` from the wallet and return the new balance.

        A negative amount is a credit. A zero amount touches nothing.
        """
        if amount_cents == 0:
            wallet = await self.wallets.get_wallet(account_id)
            if wallet is None:
                raise WalletNotFoundError(account_id=account_id)
            return wallet.balance_cents

        new_balance = await self.wallets.apply_debit(account_id, amount_cents)
        if new_balance is None:
            wallet = await self.wallets.get_wallet(account_id)
            if wallet is None:
                raise WalletNotFoundError(account_id=account_id)
            raise InsufficientFundsError(
                "wallet balance does not cover this amount",
                account_id=account_id,
                balance_cents=wallet.balance_cents,
                required_cents=amount_cents,
            )

        await self.wallets.add_transaction(
            account_id=account_id,
            order_id=order_id,
            amount_cents=-amount_cents,
            balance_after_cents=new_balance,
            currency=self.currency,
            type=type.value,
            description=description,
        )
        return new_balance

    async def credit(
        self,
        account_id: str,
        amount_cents: int,
        *,
        type: TransactionType,
        order_id: str | None = None,
        description: str | None = None,
    ) -> int:
        return await self.debit(
            account_id, -amount_cents, type=type, order_id=order_id, description=description
        )

    async def write_order(self, order: NewOrder | Order, expected: OrderState | None) -> Order:
        """Insert a new order or update an existing one against ``expected``."""
        if expected is None:
            if not isinstance(order, NewOrder):
                raise ConflictError("an existing order needs its expected prior state", order_id=order.id)
            try:
                async with self.session.begin_nested():
                    return await self.orders.insert(order)
            except IntegrityError as exc:
                if order.idempotency_key:
                    raise DuplicateIdempotencyKeyError(
                        idempotency_key=order.idempotency_key, user_id=order.user_id
                    ) from exc
                raise

        if not isinstance(order, Order):
            raise ConflictError("a new order cannot have a prior state")
        written = await self.orders.update_guarded(
            order.id,
            expected,
            quantity=order.quantity,
            target_url=order.target_url,
            notes=order.notes,
            total_cents=order.total_cents,
            status=order.status,
        )
        if written is None:
            await self._raise_stale(order.id, expected)
        return written

    async def remove_order(self, order_id: str, expected: OrderState) -> None:
        if not await self.orders.delete_guarded(order_id, expected):
            await self._raise_stale(order_id, expected)

    async def _raise_stale(self, order_id: str, expected: OrderState) -> None:
        current = await self.orders.get(order_id)
        if current is None:
            raise OrderNotFoundError(order_id=order_id)
        raise ConflictError(
            "order changed since it was read",
            order_id=order_id,
            expected_version=expected.version,
            current_version=current.version,
            current_status=current.status.value,
        )


class LedgerStore:
    """Runs ledger operations as single all-or-nothing transactions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        currency: str = "USD",
        max_retries: int = 3,
        retry_backoff_seconds: float = 0.05,
    ) -> None:
        self._session_factory = session_factory
        self.currency = currency
        self.max_retries = max(1, max_retries)
        self.retry_backoff_seconds = retry_backoff_seconds

    @classmethod
    def from_settings(
        cls, session_factory: async_sessionmaker[AsyncSession], settings: Settings | None = None
    ) -> "LedgerStore":
        settings = settings or get_settings()
        return cls(
            session_factory,
            currency=settings.ledger.currency,
            max_retries=settings.ledger.max_retries,
            retry_backoff_seconds=settings.ledger.retry_backoff_seconds,
        )

    async def run(self, operation: Callable[[LedgerTransaction], Awaitable[T]], *, name: str = "ledger") -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        return await operation(LedgerTransaction(session, currency=self.currency))
            except DBAPIError as exc:
                if not _is_transient(exc):
                    raise
                if attempt >= self.max_retries:
                    logger.error("%s failed after %d attempts: %s", name, attempt, exc)
                    raise UnavailableError(f"{name} could not be completed, try again later") from exc
                delay = self.retry_backoff_seconds * (2 ** (attempt - 1))
                logger.warning("%s hit a transient store error (attempt %d), retrying in %.3fs: %s", name, attempt, delay, exc)
                await asyncio.sleep(delay)


def _is_transient(exc: Any) -> bool:
    if isinstance(exc, IntegrityError):
        return False
    if isinstance(exc, OperationalError):
        return True
    return bool(getattr(exc, "connection_invalidated", False))


__all__ = ["DuplicateIdempotencyKeyError", "LedgerStore", "LedgerTransaction"]
