"""Account domain models; the service lives in ``accounts.service``."""

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import Account, AccountCreateInput

__all__ = [
    "Account",
    "AccountCreateInput",
    "AccountAlreadyExistsError",
    "AccountNotFoundError",
]
