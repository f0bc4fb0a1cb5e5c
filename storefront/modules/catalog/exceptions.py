"""Catalog specific exceptions."""

from storefront.modules.common import ConflictError, NotFoundError


class ServiceNotFoundError(NotFoundError):
    """The requested service is not in the catalog."""


class ServiceInUseError(ConflictError):
    """The service still backs orders that are not completed."""
