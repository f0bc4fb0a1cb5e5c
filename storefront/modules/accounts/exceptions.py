"""Account domain specific exceptions."""

from storefront.modules.common import ConflictError, NotFoundError


class AccountAlreadyExistsError(ConflictError):
    """Username or email is already registered."""


class AccountNotFoundError(NotFoundError):
    """The requested account cannot be found."""
