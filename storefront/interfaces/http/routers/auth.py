"""Registration and login endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import get_settings
from storefront.core.security import create_access_token, get_current_account
from storefront.interfaces.http.deps import get_account_service, get_db_session
from storefront.modules.accounts import Account as AccountDomain, AccountCreateInput
from storefront.modules.accounts.service import AccountService
from storefront.modules.common import ROLE_USER
from storefront.modules.wallets.service import WalletService
from storefront.schemas import AccountCreate, AccountLoginResponse, AccountResponse, LoginRequest

router = APIRouter()


@router.post(
    "/register",
    response_model=AccountLoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a customer account",
)
async def register(
    payload: AccountCreate,
    accounts: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
) -> AccountLoginResponse:
    account = await accounts.create_account(
        AccountCreateInput(
            username=payload.username.strip(),
            password=payload.password,
            role=ROLE_USER,
            email=payload.email,
        )
    )
    await WalletService.with_session(db).ensure_wallet(account.id, get_settings().ledger.currency)
    await db.commit()

    access_token = create_access_token(account.id, account.username, account.role)
    return AccountLoginResponse(
        access_token=access_token,
        account_id=account.id,
        username=account.username,
        role=account.role,
    )


@router.post("/login", response_model=AccountLoginResponse, summary="Log in and receive a bearer token")
async def login(
    payload: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
    db: AsyncSession = Depends(get_db_session),
) -> AccountLoginResponse:
    account = await accounts.authenticate(payload.username, payload.password)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")

    await accounts.set_last_login(account.id)
    await db.commit()

    access_token = create_access_token(account.id, account.username, account.role)
    return AccountLoginResponse(
        access_token=access_token,
        account_id=account.id,
        username=account.username,
        role=account.role,
    )


@router.get("/me", response_model=AccountResponse, summary="Current account")
async def me(account: AccountDomain = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.model_validate(account)
