"""Domain models for the service catalog."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from typing import Optional

from storefront.modules.common import UNSET


@dataclass(frozen=True, slots=True)
class Service:
    id: str
    name: str
    category: str
    price_per_1000: Decimal
    estimated_process_time: Optional[str] = None
    tag: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class ServiceCreateInput:
    name: str
    category: str
    price_per_1000: Decimal
    estimated_process_time: Optional[str] = None
    tag: Optional[str] = None
    description: Optional[str] = None


@dataclass(slots=True)
class ServiceUpdateInput:
    name: str | object = UNSET
    category: str | object = UNSET
    price_per_1000: Decimal | object = UNSET
    estimated_process_time: Optional[str] | object = UNSET
    tag: Optional[str] | object = UNSET
    description: Optional[str] | object = UNSET

    def changes(self) -> dict:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not UNSET
        }
