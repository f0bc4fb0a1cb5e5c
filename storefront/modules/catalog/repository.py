"""Repository protocol for catalog services."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import Service


class ServiceRepository(Protocol):
    async def get(self, service_id: str) -> Service | None:
        ...

    async def list(self, *, category: str | None, limit: int, offset: int) -> Sequence[Service]:
        ...

    async def list_categories(self) -> Sequence[str]:
        ...

    async def create(self, **fields: Any) -> Service:
        ...

    async def update(self, service_id: str, **fields: Any) -> Service | None:
        ...

    async def delete(self, service_id: str) -> bool:
        ...

    async def count_open_orders(self, service_id: str) -> int:
        ...

    async def count(self) -> int:
        ...
