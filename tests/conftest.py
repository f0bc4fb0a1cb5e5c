"""
Shared fixtures: a file-backed SQLite ledger per test plus seeding helpers.
"""

from decimal import Decimal

import pytest

from storefront.core.config import DatabaseSettings, LedgerSettings, SecuritySettings, Settings
from storefront.core.container import ApplicationContainer
from storefront.infrastructure.database.session import build_engine, build_session_factory, create_all
from storefront.modules.accounts import AccountCreateInput
from storefront.modules.accounts.service import AccountService
from storefront.modules.admin.service import AdminOperations
from storefront.modules.catalog import ServiceCreateInput
from storefront.modules.catalog.service import CatalogService
from storefront.modules.common import ROLE_ADMIN, ROLE_USER, Principal, to_cents
from storefront.modules.ledger import LedgerStore
from storefront.modules.orders import PlaceOrderInput
from storefront.modules.orders.lifecycle import OrderLifecycleManager
from storefront.modules.wallets import TransactionType

TEST_PASSWORD = "secret123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", busy_timeout=10.0),
        security=SecuritySettings(secret_key="test-secret-key"),
        ledger=LedgerSettings(max_retries=3, retry_backoff_seconds=0.0, max_quantity=1_000_000),
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory, settings) -> LedgerStore:
    return LedgerStore.from_settings(session_factory, settings)


@pytest.fixture
def lifecycle(store, settings) -> OrderLifecycleManager:
    return OrderLifecycleManager(store, max_quantity=settings.ledger.max_quantity)


@pytest.fixture
def admin_ops(store) -> AdminOperations:
    return AdminOperations(store)


@pytest.fixture
def container(settings, session_factory) -> ApplicationContainer:
    return ApplicationContainer.build(settings, session_factory)


@pytest.fixture
def make_account(store):
    """Create an account with a wallet holding ``balance`` (recorded as funding)."""

    async def _make(username: str, *, balance: str = "0", role: str = ROLE_USER) -> Principal:
        async def _create(tx):
            account = await AccountService.with_session(tx.session).create_account(
                AccountCreateInput(username=username, password=TEST_PASSWORD, role=role)
            )
            await tx.ensure_wallet(account.id)
            cents = to_cents(Decimal(balance))
            if cents:
                await tx.credit(account.id, cents, type=TransactionType.FUND, description="test funding")
            return account.to_principal()

        return await store.run(_create, name="seed account")

    return _make


@pytest.fixture
async def admin(make_account) -> Principal:
    return await make_account("root-admin", role=ROLE_ADMIN)


@pytest.fixture
def make_service(store):
    async def _make(price_per_1000: str = "10", *, name: str = "Followers", category: str = "instagram"):
        return await store.run(
            lambda tx: CatalogService.with_session(tx.session).create_service(
                ServiceCreateInput(
                    name=name,
                    category=category,
                    price_per_1000=Decimal(price_per_1000),
                    estimated_process_time="1-2 days",
                )
            ),
            name="seed service",
        )

    return _make


@pytest.fixture
def balance_of(store):
    async def _balance(principal: Principal) -> Decimal:
        async def _read(tx):
            wallet = await tx.wallets.get_wallet(principal.account_id)
            return wallet.balance_cents

        cents = await store.run(_read, name="read balance")
        return (Decimal(cents) / 100).quantize(Decimal("0.01"))

    return _balance


@pytest.fixture
def order_input():
    def _input(service_id: str, quantity: int, **extra) -> PlaceOrderInput:
        return PlaceOrderInput(
            service_id=service_id,
            quantity=quantity,
            target_url=extra.pop("target_url", "https://instagram.com/someone"),
            **extra,
        )

    return _input
