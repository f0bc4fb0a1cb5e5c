"""Customer-facing endpoints: catalog browsing, wallet and own orders."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.security import get_current_principal
from storefront.interfaces.http.deps import get_db_session, get_lifecycle_manager
from storefront.modules.catalog.service import CatalogService
from storefront.modules.common import UNSET, Principal
from storefront.modules.orders import LedgerReceipt, OrderEditInput, OrderStatus, PlaceOrderInput
from storefront.modules.orders.lifecycle import OrderLifecycleManager
from storefront.modules.orders.models import parse_status
from storefront.modules.wallets.service import WalletService
from storefront.schemas import (
    CategoryListResponse,
    OrderCreate,
    OrderListResponse,
    OrderQuoteResponse,
    OrderReceiptResponse,
    OrderResponse,
    OrderUpdate,
    ServiceListResponse,
    ServiceResponse,
    WalletSnapshotResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)

router = APIRouter()


def receipt_response(receipt: LedgerReceipt) -> OrderReceiptResponse:
    return OrderReceiptResponse(
        order=OrderResponse.model_validate(receipt.order),
        balance=receipt.balance,
        balance_cents=receipt.balance_cents,
        replayed=receipt.replayed,
    )


# -- catalog -----------------------------------------------------------------


@router.get("/services", response_model=ServiceListResponse, summary="Browse the service catalog")
async def list_services(
    category: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ServiceListResponse:
    services = await CatalogService.with_session(db).list_services(category=category, limit=limit, offset=offset)
    return ServiceListResponse(services=[ServiceResponse.model_validate(item) for item in services])


@router.get("/services/categories", response_model=CategoryListResponse, summary="List service categories")
async def list_categories(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryListResponse:
    return CategoryListResponse(categories=list(await CatalogService.with_session(db).list_categories()))


@router.get("/services/{service_id}", response_model=ServiceResponse, summary="Service details")
async def get_service(
    service_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    return ServiceResponse.model_validate(await CatalogService.with_session(db).get_service(service_id))


# -- wallet ------------------------------------------------------------------


@router.get("/wallet", response_model=WalletSnapshotResponse, summary="Wallet balance")
async def get_wallet_snapshot(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> WalletSnapshotResponse:
    snapshot = await WalletService.with_session(db).ensure_wallet(principal.account_id)
    await db.commit()
    return WalletSnapshotResponse.model_validate(snapshot)


@router.get(
    "/wallet/transactions",
    response_model=WalletTransactionListResponse,
    summary="Wallet transaction history",
)
async def list_wallet_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTransactionListResponse:
    records = await WalletService.with_session(db).list_transactions(principal.account_id, limit=limit, offset=offset)
    return WalletTransactionListResponse(
        transactions=[WalletTransactionResponse.model_validate(record) for record in records]
    )


# -- orders ------------------------------------------------------------------


@router.get("/orders/quote", response_model=OrderQuoteResponse, summary="Price preview")
async def quote_order(
    service_id: str,
    quantity: int,
    order_id: Optional[str] = None,
    principal: Principal = Depends(get_current_principal),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
) -> OrderQuoteResponse:
    quote = await lifecycle.quote(principal, service_id=service_id, quantity=quantity, order_id=order_id)
    return OrderQuoteResponse.model_validate(quote)


@router.post(
    "/orders",
    response_model=OrderReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
)
async def place_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_current_principal),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
) -> OrderReceiptResponse:
    receipt = await lifecycle.place_order(
        principal,
        PlaceOrderInput(
            service_id=payload.service_id,
            quantity=payload.quantity,
            target_url=payload.target_url,
            notes=payload.notes,
            idempotency_key=payload.idempotency_key,
        ),
    )
    return receipt_response(receipt)


@router.get("/orders", response_model=OrderListResponse, summary="List own orders")
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
) -> OrderListResponse:
    order_status: Optional[OrderStatus] = parse_status(status_filter) if status_filter else None
    orders = await lifecycle.list_orders(principal, status=order_status, limit=limit, offset=offset)
    return OrderListResponse(orders=[OrderResponse.model_validate(order) for order in orders])


@router.get("/orders/{order_id}", response_model=OrderResponse, summary="Order details")
async def get_order(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
) -> OrderResponse:
    return OrderResponse.model_validate(await lifecycle.get_order(principal, order_id))


@router.patch("/orders/{order_id}", response_model=OrderReceiptResponse, summary="Edit a pending order")
async def edit_order(
    order_id: str,
    payload: OrderUpdate,
    principal: Principal = Depends(get_current_principal),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
) -> OrderReceiptResponse:
    provided = payload.model_dump(exclude_unset=True)
    changes = OrderEditInput(
        quantity=provided.get("quantity", UNSET),
        target_url=provided.get("target_url", UNSET),
        notes=provided.get("notes", UNSET),
    )
    receipt = await lifecycle.edit_order(
        principal, order_id, changes, expected_version=payload.expected_version
    )
    return receipt_response(receipt)
