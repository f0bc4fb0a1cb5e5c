"""Administrative endpoints: order control, catalog, accounts and wallets."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from storefront.core.security import get_current_admin
from storefront.interfaces.http.deps import get_admin_operations
from storefront.interfaces.http.routers.customer import receipt_response
from storefront.modules.admin import AccountWithBalance, AdminAccountInput
from storefront.modules.admin.service import AdminOperations
from storefront.modules.catalog import ServiceCreateInput, ServiceUpdateInput
from storefront.modules.common import Principal
from storefront.modules.orders.models import parse_status
from storefront.schemas import (
    AccountBanRequest,
    AccountResponse,
    AdminAccountCreate,
    AdminAccountListResponse,
    AdminAccountResponse,
    AdminStatsResponse,
    OrderListResponse,
    OrderReceiptResponse,
    OrderResponse,
    OrderStatusRequest,
    OrderVersionRequest,
    ReconciliationResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    SuccessResponse,
    WalletFundRequest,
    WalletSnapshotResponse,
)

router = APIRouter()


def _account_response(row: AccountWithBalance) -> AdminAccountResponse:
    account = row.account
    return AdminAccountResponse(
        id=account.id,
        username=account.username,
        email=account.email,
        role=account.role,
        is_banned=account.is_banned,
        created_at=account.created_at,
        last_login_at=account.last_login_at,
        balance=row.balance,
        balance_cents=row.balance_cents,
    )


# -- orders ------------------------------------------------------------------


@router.get("/orders", response_model=OrderListResponse, summary="List all orders")
async def admin_list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    user_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> OrderListResponse:
    orders = await operations.list_orders(
        admin,
        status=parse_status(status_filter) if status_filter else None,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return OrderListResponse(orders=[OrderResponse.model_validate(order) for order in orders])


@router.get("/orders/{order_id}", response_model=OrderResponse, summary="Order details")
async def admin_get_order(
    order_id: str,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> OrderResponse:
    return OrderResponse.model_validate(await operations.get_order(admin, order_id))


@router.post("/orders/{order_id}/status", response_model=OrderResponse, summary="Change order status")
async def admin_change_status(
    order_id: str,
    payload: OrderStatusRequest,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> OrderResponse:
    order = await operations.change_status(
        admin, order_id, payload.status, expected_version=payload.expected_version
    )
    return OrderResponse.model_validate(order)


@router.post("/orders/{order_id}/advance", response_model=OrderResponse, summary="Move an order to its next status")
async def admin_advance_order(
    order_id: str,
    payload: Optional[OrderVersionRequest] = None,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> OrderResponse:
    expected = payload.expected_version if payload else None
    return OrderResponse.model_validate(await operations.advance(admin, order_id, expected_version=expected))


@router.post("/orders/{order_id}/revert", response_model=OrderResponse, summary="Send a processing order back to review")
async def admin_revert_order(
    order_id: str,
    payload: Optional[OrderVersionRequest] = None,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> OrderResponse:
    expected = payload.expected_version if payload else None
    return OrderResponse.model_validate(await operations.revert(admin, order_id, expected_version=expected))


@router.delete("/orders/{order_id}", response_model=OrderReceiptResponse, summary="Delete an order and refund it")
async def admin_delete_order(
    order_id: str,
    expected_version: Optional[int] = None,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> OrderReceiptResponse:
    receipt = await operations.delete_order(admin, order_id, expected_version=expected_version)
    return receipt_response(receipt)


# -- catalog -----------------------------------------------------------------


@router.post(
    "/services",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a service",
)
async def admin_create_service(
    payload: ServiceCreate,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> ServiceResponse:
    service = await operations.create_service(admin, ServiceCreateInput(**payload.model_dump()))
    return ServiceResponse.model_validate(service)


@router.patch("/services/{service_id}", response_model=ServiceResponse, summary="Update a service")
async def admin_update_service(
    service_id: str,
    payload: ServiceUpdate,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> ServiceResponse:
    changes = ServiceUpdateInput(**payload.model_dump(exclude_unset=True))
    return ServiceResponse.model_validate(await operations.update_service(admin, service_id, changes))


@router.delete("/services/{service_id}", response_model=SuccessResponse, summary="Delete a service")
async def admin_delete_service(
    service_id: str,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> SuccessResponse:
    await operations.delete_service(admin, service_id)
    return SuccessResponse(message="service deleted")


# -- accounts and wallets ----------------------------------------------------


@router.get("/accounts", response_model=AdminAccountListResponse, summary="List accounts with balances")
async def admin_list_accounts(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> AdminAccountListResponse:
    rows = await operations.list_accounts(admin, limit=limit, offset=offset)
    return AdminAccountListResponse(accounts=[_account_response(row) for row in rows])


@router.post(
    "/accounts",
    response_model=AdminAccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def admin_create_account(
    payload: AdminAccountCreate,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> AdminAccountResponse:
    created = await operations.create_account(admin, AdminAccountInput(**payload.model_dump()))
    return _account_response(created)


@router.post("/accounts/{account_id}/ban", response_model=AccountResponse, summary="Ban or unban an account")
async def admin_set_banned(
    account_id: str,
    payload: AccountBanRequest,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> AccountResponse:
    account = await operations.set_banned(admin, account_id, payload.is_banned)
    return AccountResponse.model_validate(account)


@router.get("/accounts/{account_id}/wallet", response_model=WalletSnapshotResponse, summary="Wallet of an account")
async def admin_get_wallet(
    account_id: str,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> WalletSnapshotResponse:
    return WalletSnapshotResponse.model_validate(await operations.get_wallet(admin, account_id))


@router.post("/accounts/{account_id}/fund", response_model=WalletSnapshotResponse, summary="Fund a wallet")
async def admin_fund_wallet(
    account_id: str,
    payload: WalletFundRequest,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> WalletSnapshotResponse:
    snapshot = await operations.fund_wallet(admin, account_id, payload.amount, description=payload.description)
    return WalletSnapshotResponse.model_validate(snapshot)


@router.get(
    "/accounts/{account_id}/reconciliation",
    response_model=ReconciliationResponse,
    summary="Check a wallet against its funding and orders",
)
async def admin_reconcile(
    account_id: str,
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> ReconciliationResponse:
    return ReconciliationResponse.model_validate(await operations.reconcile(admin, account_id))


@router.get("/stats", response_model=AdminStatsResponse, summary="Dashboard statistics")
async def admin_stats(
    admin: Principal = Depends(get_current_admin),
    operations: AdminOperations = Depends(get_admin_operations),
) -> AdminStatsResponse:
    stats = await operations.stats(admin)
    return AdminStatsResponse(
        total_users=stats.total_users,
        banned_users=stats.banned_users,
        total_services=stats.total_services,
        total_orders=stats.total_orders,
        pending_review_orders=stats.orders.pending_review,
        processing_orders=stats.orders.processing,
        completed_orders=stats.orders.completed,
        revenue=stats.revenue,
        revenue_cents=stats.revenue_cents,
    )
