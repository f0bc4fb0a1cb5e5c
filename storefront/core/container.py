"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.config import Settings, get_settings
from storefront.infrastructure.database.session import get_session_factory
from storefront.modules.admin.service import AdminOperations
from storefront.modules.ledger.store import LedgerStore
from storefront.modules.orders.lifecycle import OrderLifecycleManager


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    store: LedgerStore
    lifecycle: OrderLifecycleManager
    admin: AdminOperations

    @classmethod
    def build(
        cls, settings: Settings, session_factory: async_sessionmaker[AsyncSession]
    ) -> "ApplicationContainer":
        store = LedgerStore.from_settings(session_factory, settings)
        return cls(
            settings=settings,
            session_factory=session_factory,
            store=store,
            lifecycle=OrderLifecycleManager(store, max_quantity=settings.ledger.max_quantity),
            admin=AdminOperations(store),
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer.build(get_settings(), get_session_factory())


__all__ = ["ApplicationContainer", "get_container"]
