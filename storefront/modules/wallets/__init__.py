"""Wallet models; the read service lives in ``wallets.service``."""

from .exceptions import WalletNotFoundError
from .models import LedgerReconciliation, TransactionType, WalletSnapshot, WalletTransactionRecord

__all__ = [
    "LedgerReconciliation",
    "TransactionType",
    "WalletNotFoundError",
    "WalletSnapshot",
    "WalletTransactionRecord",
]
