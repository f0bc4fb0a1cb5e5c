"""Database session dependency."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.container import ApplicationContainer, get_container


def get_app_container() -> ApplicationContainer:
    return get_container()


async def get_db_session(
    container: ApplicationContainer = Depends(get_app_container),
) -> AsyncGenerator[AsyncSession, None]:
    async with container.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


__all__ = ["get_app_container", "get_db_session"]
