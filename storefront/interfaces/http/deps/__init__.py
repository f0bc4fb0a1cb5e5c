"""Reusable FastAPI dependencies."""

from .account import get_account_repository, get_account_service
from .database import get_app_container, get_db_session
from .ledger import get_admin_operations, get_lifecycle_manager

__all__ = [
    "get_account_repository",
    "get_account_service",
    "get_admin_operations",
    "get_app_container",
    "get_db_session",
    "get_lifecycle_manager",
]
