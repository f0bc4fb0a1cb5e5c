"""Catalog service: read-only lookups for pricing plus plain CRUD."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.infrastructure.database.repositories.service_repository import SqlServiceRepository
from storefront.modules.common import InvalidInputError

from .exceptions import ServiceInUseError, ServiceNotFoundError
from .models import Service, ServiceCreateInput, ServiceUpdateInput
from .repository import ServiceRepository

logger = logging.getLogger(__name__)

_REQUIRED_TEXT = ("name", "category")


@dataclass(slots=True)
class CatalogService:
    repository: ServiceRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CatalogService":
        return cls(SqlServiceRepository(session))

    async def get_service(self, service_id: str) -> Service:
        service = await self.repository.get(service_id)
        if service is None:
            raise ServiceNotFoundError(service_id=service_id)
        return service

    async def list_services(
        self, *, category: str | None = None, limit: int = 100, offset: int = 0
    ) -> Sequence[Service]:
        return await self.repository.list(category=category, limit=limit, offset=offset)

    async def list_categories(self) -> Sequence[str]:
        return await self.repository.list_categories()

    async def count_services(self) -> int:
        return await self.repository.count()

    async def create_service(self, payload: ServiceCreateInput) -> Service:
        fields = _clean_fields(
            {
                "name": payload.name,
                "category": payload.category,
                "price_per_1000": payload.price_per_1000,
                "estimated_process_time": payload.estimated_process_time,
                "tag": payload.tag,
                "description": payload.description,
            }
        )
        service = await self.repository.create(**fields)
        logger.info("service created id=%s name=%s price_per_1000=%s", service.id, service.name, service.price_per_1000)
        return service

    async def update_service(self, service_id: str, payload: ServiceUpdateInput) -> Service:
        """Apply the provided fields; stored order totals are never repriced."""
        fields = _clean_fields(payload.changes())
        if not fields:
            return await self.get_service(service_id)
        service = await self.repository.update(service_id, **fields)
        if service is None:
            raise ServiceNotFoundError(service_id=service_id)
        logger.info("service updated id=%s fields=%s", service_id, sorted(fields))
        return service

    async def delete_service(self, service_id: str) -> None:
        await self.get_service(service_id)
        open_orders = await self.repository.count_open_orders(service_id)
        if open_orders:
            raise ServiceInUseError(
                f"service has {open_orders} open order(s)", service_id=service_id
            )
        await self.repository.delete(service_id)
        logger.info("service deleted id=%s", service_id)


def _clean_fields(fields: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(fields)
    for name in _REQUIRED_TEXT:
        if name in cleaned:
            value = (cleaned[name] or "").strip()
            if not value:
                raise InvalidInputError(f"{name} must not be empty")
            cleaned[name] = value
    if "price_per_1000" in cleaned:
        cleaned["price_per_1000"] = _parse_price(cleaned["price_per_1000"])
    for name in ("estimated_process_time", "tag", "description"):
        if name in cleaned and cleaned[name] is not None:
            cleaned[name] = cleaned[name].strip() or None
    return cleaned


def _parse_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidInputError("price_per_1000 must be a number") from exc
    if not price.is_finite() or price < 0:
        raise InvalidInputError("price_per_1000 must be a non-negative number")
    return price
