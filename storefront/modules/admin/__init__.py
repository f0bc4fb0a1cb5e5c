"""Admin read models; privileged operations live in ``admin.service``."""

from .models import AccountWithBalance, AdminAccountInput, DashboardStats

__all__ = ["AccountWithBalance", "AdminAccountInput", "DashboardStats"]
