"""Providers for the transactional order and admin services."""

from fastapi import Depends

from storefront.core.container import ApplicationContainer
from storefront.modules.admin.service import AdminOperations
from storefront.modules.orders.lifecycle import OrderLifecycleManager

from .database import get_app_container


def get_lifecycle_manager(container: ApplicationContainer = Depends(get_app_container)) -> OrderLifecycleManager:
    return container.lifecycle


def get_admin_operations(container: ApplicationContainer = Depends(get_app_container)) -> AdminOperations:
    return container.admin


__all__ = ["get_admin_operations", "get_lifecycle_manager"]
