"""Domain services for account management."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.crypto import hash_password, password_problem, verify_password
from storefront.infrastructure.database.repositories.account_repository import SqlAccountRepository
from storefront.modules.common import ROLES, InvalidInputError

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import Account, AccountCreateInput
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def require(self, account_id: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id=account_id)
        return account

    async def get_by_username(self, username: str) -> Account | None:
        return await self._repository.get_by_username(username)

    async def list_accounts(self, limit: int = 50, offset: int = 0) -> Sequence[Account]:
        return await self._repository.list_accounts(limit=limit, offset=offset)

    async def authenticate(self, username: str, password: str) -> Account | None:
        account = await self._repository.get_by_username(username)
        if account is None or account.is_banned:
            return None
        if not verify_password(password, account.password_hash):
            return None
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        if payload.role not in ROLES:
            raise InvalidInputError(f"unknown role: {payload.role}")
        problem = password_problem(payload.password)
        if problem:
            raise InvalidInputError(problem)
        if await self._repository.get_by_username(payload.username) is not None:
            raise AccountAlreadyExistsError(f"username already exists: {payload.username}")
        if payload.email and await self._repository.get_by_email(payload.email) is not None:
            raise AccountAlreadyExistsError(f"email already registered: {payload.email}")

        account = await self._repository.create_account(
            username=payload.username,
            password_hash=hash_password(payload.password),
            role=payload.role,
            email=payload.email,
        )
        logger.info("account created id=%s username=%s role=%s", account.id, account.username, account.role)
        return account

    async def set_banned(self, account_id: str, is_banned: bool) -> Account:
        account = await self._repository.set_banned(account_id, is_banned)
        logger.info("account %s id=%s", "banned" if is_banned else "unbanned", account_id)
        return account

    async def set_last_login(self, account_id: str) -> None:
        await self._repository.set_last_login(account_id, datetime.now(timezone.utc))

    async def count_accounts(self, *, banned: bool | None = None) -> int:
        return await self._repository.count_accounts(banned=banned)
