"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .order_repository import SqlOrderRepository
from .service_repository import SqlServiceRepository
from .wallet_repository import SqlWalletRepository

__all__ = [
    "SqlAccountRepository",
    "SqlOrderRepository",
    "SqlServiceRepository",
    "SqlWalletRepository",
]
