"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from storefront.modules.common import ROLE_USER, Principal


@dataclass(slots=True)
class Account:
    id: str
    username: str
    role: str
    is_banned: bool
    password_hash: str = field(repr=False)
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def to_principal(self) -> Principal:
        return Principal(account_id=self.id, role=self.role, is_banned=self.is_banned)


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    password: str
    role: str = ROLE_USER
    email: Optional[str] = None
