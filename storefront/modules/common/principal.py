"""Explicit caller identity passed into every ledger operation."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ForbiddenError

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = frozenset({ROLE_USER, ROLE_ADMIN})


@dataclass(frozen=True, slots=True)
class Principal:
    account_id: str
    role: str = ROLE_USER
    is_banned: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def require_active(self) -> "Principal":
        if self.is_banned:
            raise ForbiddenError("account is banned", account_id=self.account_id)
        return self

    def require_admin(self) -> "Principal":
        self.require_active()
        if not self.is_admin:
            raise ForbiddenError("admin role required", account_id=self.account_id)
        return self

    def require_owner(self, owner_id: str) -> "Principal":
        self.require_active()
        if self.account_id != owner_id:
            raise ForbiddenError("order belongs to another account", account_id=self.account_id)
        return self
