"""SQLAlchemy implementation of the catalog service repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Order as OrderModel, Service as ServiceModel
from storefront.modules.catalog.models import Service
from storefront.modules.orders.models import OrderStatus


class SqlServiceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, service_id: str) -> Service | None:
        model = await self.session.get(ServiceModel, service_id)
        return self._to_domain(model) if model else None

    async def list(self, *, category: str | None, limit: int, offset: int) -> Sequence[Service]:
        stmt = select(ServiceModel)
        if category:
            stmt = stmt.where(ServiceModel.category == category)
        stmt = stmt.order_by(ServiceModel.created_at.desc(), ServiceModel.name).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def list_categories(self) -> Sequence[str]:
        stmt = select(ServiceModel.category).distinct().order_by(ServiceModel.category)
        result = await self.session.execute(stmt)
        return [row[0] for row in result.all() if row[0]]

    async def create(self, **fields: Any) -> Service:
        model = ServiceModel(**fields)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def update(self, service_id: str, **fields: Any) -> Service | None:
        model = await self.session.get(ServiceModel, service_id)
        if model is None:
            return None
        for name, value in fields.items():
            setattr(model, name, value)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def delete(self, service_id: str) -> bool:
        # Same effect as ON DELETE SET NULL, which SQLite skips unless foreign keys are enabled.
        await self.session.execute(
            update(OrderModel).where(OrderModel.service_id == service_id).values(service_id=None)
        )
        result = await self.session.execute(delete(ServiceModel).where(ServiceModel.id == service_id))
        return result.rowcount > 0

    async def count_open_orders(self, service_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(OrderModel)
            .where(OrderModel.service_id == service_id, OrderModel.status != OrderStatus.COMPLETED.value)
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def count(self) -> int:
        return (await self.session.execute(select(func.count()).select_from(ServiceModel))).scalar_one()

    @staticmethod
    def _to_domain(model: ServiceModel) -> Service:
        return Service(
            id=model.id,
            name=model.name,
            category=model.category,
            price_per_1000=Decimal(model.price_per_1000),
            estimated_process_time=model.estimated_process_time,
            tag=model.tag,
            description=model.description,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
