"""Shared errors, principal and money helpers."""

from .exceptions import (
    ConflictError,
    ForbiddenError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidTransitionError,
    LedgerError,
    NotFoundError,
    UnavailableError,
)
from .fields import UNSET
from .money import from_cents, quantize, to_cents
from .principal import ROLE_ADMIN, ROLE_USER, ROLES, Principal

__all__ = [
    "ConflictError",
    "ForbiddenError",
    "InsufficientFundsError",
    "InvalidInputError",
    "InvalidTransitionError",
    "LedgerError",
    "NotFoundError",
    "UnavailableError",
    "Principal",
    "UNSET",
    "ROLE_ADMIN",
    "ROLE_USER",
    "ROLES",
    "from_cents",
    "quantize",
    "to_cents",
]
