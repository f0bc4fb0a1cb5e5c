"""JWT helpers and the request principal."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import get_settings
from storefront.interfaces.http.deps.database import get_db_session
from storefront.modules.accounts import Account as AccountDomain
from storefront.modules.accounts.service import AccountService
from storefront.modules.common import Principal

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


def create_access_token(account_id: str, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": account_id,
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    account_id = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")
    if not all([account_id, username, role]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(account_id=account_id, username=username, role=role)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> AccountDomain:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    token_data = decode_access_token(credentials.credentials)
    account = await AccountService.with_session(db).get_by_id(token_data.account_id)
    # Ends the lookup transaction; ledger operations open their own.
    await db.commit()
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account no longer exists")
    return account


async def get_current_principal(account: AccountDomain = Depends(get_current_account)) -> Principal:
    """Principal built from the stored account, so role and ban changes apply immediately.

    Banned accounts are refused here as well as inside every ledger call.
    """
    return account.to_principal().require_active()


async def get_current_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    return principal.require_admin()
