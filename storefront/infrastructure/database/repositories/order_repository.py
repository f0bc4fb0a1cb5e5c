"""SQLAlchemy implementation for order storage with optimistic concurrency."""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Order as OrderModel
from storefront.modules.orders.models import NewOrder, Order, OrderState, OrderStatus, OrderStatusCounts


class SqlOrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, order_id: str) -> Order | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id).execution_options(populate_existing=True)
        model = (await self.session.execute(stmt)).scalars().first()
        return self._to_domain(model) if model else None

    async def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        stmt = select(OrderModel).where(OrderModel.user_id == user_id, OrderModel.idempotency_key == key)
        model = (await self.session.execute(stmt)).scalars().first()
        return self._to_domain(model) if model else None

    async def insert(self, order: NewOrder) -> Order:
        model = OrderModel(
            id=order.id,
            user_id=order.user_id,
            service_id=order.service_id,
            quantity=order.quantity,
            target_url=order.target_url,
            notes=order.notes,
            total_cents=order.total_cents,
            status=order.status.value,
            version=1,
            idempotency_key=order.idempotency_key,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def update_guarded(self, order_id: str, expected: OrderState, **values: Any) -> Order | None:
        """Write ``values`` only if the row still has the expected version and status."""
        if "status" in values and isinstance(values["status"], OrderStatus):
            values["status"] = values["status"].value
        stmt = (
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.version == expected.version,
                OrderModel.status == expected.status.value,
            )
            .values(version=OrderModel.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get(order_id)

    async def delete_guarded(self, order_id: str, expected: OrderState) -> bool:
        stmt = delete(OrderModel).where(
            OrderModel.id == order_id,
            OrderModel.version == expected.version,
            OrderModel.status == expected.status.value,
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def list_orders(
        self,
        *,
        user_id: str | None,
        status: OrderStatus | None,
        limit: int,
        offset: int,
    ) -> Sequence[Order]:
        stmt = select(OrderModel)
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if status is not None:
            stmt = stmt.where(OrderModel.status == status.value)
        stmt = stmt.order_by(desc(OrderModel.created_at), OrderModel.id).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def count_by_status(self, *, user_id: str | None = None) -> OrderStatusCounts:
        stmt = select(OrderModel.status, func.count()).group_by(OrderModel.status)
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        counts = {status: count for status, count in (await self.session.execute(stmt)).all()}
        return OrderStatusCounts(
            pending_review=counts.get(OrderStatus.PENDING_REVIEW.value, 0),
            processing=counts.get(OrderStatus.PROCESSING.value, 0),
            completed=counts.get(OrderStatus.COMPLETED.value, 0),
        )

    async def sum_totals(self, *, user_id: str | None = None, completed: bool) -> int:
        stmt = select(func.coalesce(func.sum(OrderModel.total_cents), 0))
        if completed:
            stmt = stmt.where(OrderModel.status == OrderStatus.COMPLETED.value)
        else:
            stmt = stmt.where(OrderModel.status != OrderStatus.COMPLETED.value)
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        return int((await self.session.execute(stmt)).scalar_one())

    @staticmethod
    def _to_domain(model: OrderModel) -> Order:
        return Order(
            id=model.id,
            user_id=model.user_id,
            service_id=model.service_id,
            quantity=model.quantity,
            target_url=model.target_url,
            notes=model.notes,
            total_cents=model.total_cents,
            status=OrderStatus(model.status),
            version=model.version,
            idempotency_key=model.idempotency_key,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
