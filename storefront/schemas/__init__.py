"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.modules.orders.models import OrderStatus


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class AccountCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None


class AccountLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str
    username: str
    role: str


class AccountResponse(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    role: str
    is_banned: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SuccessResponse(BaseModel):
    success: bool = True
    message: str = "ok"
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


# -- catalog -----------------------------------------------------------------


class ServiceResponse(BaseModel):
    id: str
    name: str
    category: str
    description: Optional[str] = None
    price_per_1000: Decimal
    estimated_process_time: Optional[str] = None
    tag: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ServiceListResponse(BaseModel):
    services: list[ServiceResponse] = Field(default_factory=list)


class CategoryListResponse(BaseModel):
    categories: list[str] = Field(default_factory=list)


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    category: str = Field(..., min_length=1, max_length=100)
    price_per_1000: Decimal = Field(..., ge=0, max_digits=12, decimal_places=4)
    estimated_process_time: Optional[str] = Field(None, max_length=100)
    tag: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price_per_1000: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=4)
    estimated_process_time: Optional[str] = Field(None, max_length=100)
    tag: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None


# -- orders ------------------------------------------------------------------


class OrderCreate(BaseModel):
    service_id: str
    quantity: int
    target_url: str = Field(..., max_length=2048)
    notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=100)


class OrderUpdate(BaseModel):
    quantity: Optional[int] = None
    target_url: Optional[str] = Field(None, max_length=2048)
    notes: Optional[str] = None
    expected_version: Optional[int] = None


class OrderResponse(BaseModel):
    id: str
    user_id: str
    service_id: Optional[str] = None
    quantity: int
    target_url: str
    notes: Optional[str] = None
    total: Decimal
    total_cents: int
    status: OrderStatus
    version: int
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class OrderReceiptResponse(BaseModel):
    success: bool = True
    order: OrderResponse
    balance: Decimal
    balance_cents: int
    replayed: bool = False


class OrderQuoteResponse(BaseModel):
    service_id: str
    quantity: int
    total: Decimal
    current_total: Optional[Decimal] = None
    delta: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderStatusRequest(BaseModel):
    status: str
    expected_version: Optional[int] = None


class OrderVersionRequest(BaseModel):
    expected_version: Optional[int] = None


# -- wallets -----------------------------------------------------------------


class WalletSnapshotResponse(BaseModel):
    account_id: str
    balance: Decimal
    balance_cents: int
    currency: str

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionResponse(BaseModel):
    id: str
    order_id: Optional[str] = None
    amount: Decimal
    amount_cents: int
    balance_after_cents: int
    currency: str
    type: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionListResponse(BaseModel):
    transactions: list[WalletTransactionResponse] = Field(default_factory=list)


class WalletFundRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)


class ReconciliationResponse(BaseModel):
    account_id: str
    balance_cents: int
    open_orders_cents: int
    funded_cents: int
    completed_orders_cents: int
    consistent: bool

    model_config = ConfigDict(from_attributes=True)


# -- admin -------------------------------------------------------------------


class AdminAccountCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[str] = None
    role: str = "user"
    initial_balance: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)


class AdminAccountResponse(AccountResponse):
    balance: Decimal
    balance_cents: int


class AdminAccountListResponse(BaseModel):
    accounts: list[AdminAccountResponse] = Field(default_factory=list)


class AccountBanRequest(BaseModel):
    is_banned: bool = True


class AdminStatsResponse(BaseModel):
    total_users: int = 0
    banned_users: int = 0
    total_services: int = 0
    total_orders: int = 0
    pending_review_orders: int = 0
    processing_orders: int = 0
    completed_orders: int = 0
    revenue: Decimal = Decimal("0.00")
    revenue_cents: int = 0
