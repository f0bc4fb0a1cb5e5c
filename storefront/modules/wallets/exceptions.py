"""Wallet specific exceptions."""

from storefront.modules.common import NotFoundError


class WalletNotFoundError(NotFoundError):
    """The account has no wallet."""
