"""Prepaid storefront order and wallet ledger."""

__version__ = "0.1.0"
