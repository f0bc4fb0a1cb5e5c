"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Account as AccountModel
from storefront.modules.accounts.exceptions import AccountNotFoundError
from storefront.modules.accounts.models import Account


class SqlAccountRepository:
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.username == username)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.email == email)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def list_accounts(self, *, limit: int, offset: int) -> Sequence[Account]:
        stmt = (
            select(AccountModel)
            .order_by(AccountModel.created_at.desc(), AccountModel.username)
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def create_account(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        email: str | None,
    ) -> Account:
        model = AccountModel(
            username=username,
            password_hash=password_hash,
            role=role,
            email=email,
            is_banned=False,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def set_banned(self, account_id: str, is_banned: bool) -> Account:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(is_banned=is_banned)
            .returning(AccountModel)
            .execution_options(synchronize_session=False)
        )
        model = (await self._session.execute(stmt)).scalar_one_or_none()
        if model is None:
            raise AccountNotFoundError(account_id=account_id)
        await self._session.refresh(model)
        return self._to_domain(model)

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(last_login_at=timestamp)
        )
        await self._session.execute(stmt)

    async def count_accounts(self, *, banned: bool | None = None) -> int:
        stmt = select(func.count()).select_from(AccountModel)
        if banned is not None:
            stmt = stmt.where(AccountModel.is_banned.is_(banned))
        return (await self._session.execute(stmt)).scalar_one()

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            username=model.username,
            role=model.role or "user",
            is_banned=bool(model.is_banned),
            password_hash=model.password_hash,
            email=model.email,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )
