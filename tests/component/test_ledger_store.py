"""
Component Tests for the transactional ledger store primitives.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from storefront.modules.common import ConflictError, InsufficientFundsError, UnavailableError
from storefront.modules.ledger import LedgerStore
from storefront.modules.orders import NewOrder, OrderStatus
from storefront.modules.wallets import TransactionType, WalletNotFoundError

pytestmark = pytest.mark.component


def _locked() -> OperationalError:
    return OperationalError("UPDATE wallets", {}, Exception("database is locked"))


class TestDebit:
    async def test_debit_and_credit(self, store, make_account):
        user = await make_account("amy", balance="10.00")

        balance = await store.run(
            lambda tx: tx.debit(user.account_id, 400, type=TransactionType.ORDER_DEBIT)
        )
        assert balance == 600

        balance = await store.run(
            lambda tx: tx.credit(user.account_id, 150, type=TransactionType.ORDER_REFUND)
        )
        assert balance == 750

    async def test_debit_cannot_go_negative(self, store, make_account, balance_of):
        user = await make_account("ben", balance="1.00")

        with pytest.raises(InsufficientFundsError) as excinfo:
            await store.run(lambda tx: tx.debit(user.account_id, 101, type=TransactionType.ORDER_DEBIT))

        assert excinfo.value.details["balance_cents"] == 100
        assert await balance_of(user) == Decimal("1.00")

    async def test_exact_balance_can_be_spent(self, store, make_account):
        user = await make_account("cleo", balance="1.00")
        balance = await store.run(lambda tx: tx.debit(user.account_id, 100, type=TransactionType.ORDER_DEBIT))
        assert balance == 0

    async def test_missing_wallet(self, store):
        with pytest.raises(WalletNotFoundError):
            await store.run(lambda tx: tx.debit("nobody", 1, type=TransactionType.ORDER_DEBIT))


class TestWriteOrder:
    async def test_stale_snapshot_is_rejected(self, store, make_account, make_service):
        user = await make_account("dina", balance="10")
        service = await make_service("10")
        new_order = NewOrder(
            user_id=user.account_id,
            service_id=service.id,
            quantity=100,
            target_url="https://example.com/a",
            notes=None,
            total_cents=100,
        )
        created = await store.run(lambda tx: tx.write_order(new_order, expected=None))
        assert created.version == 1

        # First writer wins and bumps the version.
        moved = await store.run(
            lambda tx: tx.write_order(created.evolve(status=OrderStatus.PROCESSING), expected=created.state)
        )
        assert moved.version == 2

        # A second write based on the old snapshot is refused.
        with pytest.raises(ConflictError) as excinfo:
            await store.run(lambda tx: tx.write_order(created.evolve(notes="late"), expected=created.state))
        assert excinfo.value.details["current_version"] == 2

    async def test_failure_after_debit_rolls_back_everything(self, store, make_account, balance_of):
        user = await make_account("ed", balance="10")

        async def _debit_then_fail(tx):
            await tx.debit(user.account_id, 500, type=TransactionType.ORDER_DEBIT)
            raise ConflictError("simulated failure between steps")

        with pytest.raises(ConflictError):
            await store.run(_debit_then_fail)

        assert await balance_of(user) == Decimal("10.00")


class TestRetries:
    async def test_transient_errors_are_retried_then_surface_as_unavailable(self, session_factory):
        store = LedgerStore(session_factory, max_retries=3, retry_backoff_seconds=0)
        attempts = 0

        async def _always_locked(tx):
            nonlocal attempts
            attempts += 1
            raise _locked()

        with pytest.raises(UnavailableError) as excinfo:
            await store.run(_always_locked, name="locked op")

        assert attempts == 3
        assert excinfo.value.retryable

    async def test_transient_error_recovers(self, session_factory):
        store = LedgerStore(session_factory, max_retries=3, retry_backoff_seconds=0)
        attempts = 0

        async def _flaky(tx):
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise _locked()
            return "done"

        assert await store.run(_flaky) == "done"
        assert attempts == 2

    async def test_integrity_errors_are_not_retried(self, session_factory):
        store = LedgerStore(session_factory, max_retries=3, retry_backoff_seconds=0)
        attempts = 0

        async def _violates(tx):
            nonlocal attempts
            attempts += 1
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(IntegrityError):
            await store.run(_violates)
        assert attempts == 1

    async def test_domain_errors_are_not_retried(self, session_factory):
        store = LedgerStore(session_factory, max_retries=3, retry_backoff_seconds=0)
        attempts = 0

        async def _conflicts(tx):
            nonlocal attempts
            attempts += 1
            raise ConflictError()

        with pytest.raises(ConflictError):
            await store.run(_conflicts)
        assert attempts == 1
