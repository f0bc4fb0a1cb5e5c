"""Order specific exceptions."""

from storefront.modules.common import NotFoundError


class OrderNotFoundError(NotFoundError):
    """The requested order does not exist."""
