"""Service catalog models; the service lives in ``catalog.service``."""

from .exceptions import ServiceInUseError, ServiceNotFoundError
from .models import UNSET, Service, ServiceCreateInput, ServiceUpdateInput

__all__ = [
    "Service",
    "ServiceCreateInput",
    "ServiceInUseError",
    "ServiceNotFoundError",
    "ServiceUpdateInput",
    "UNSET",
]
