"""Atomic ledger store: wallet debits and guarded order writes in one transaction."""

from .store import DuplicateIdempotencyKeyError, LedgerStore, LedgerTransaction

__all__ = ["DuplicateIdempotencyKeyError", "LedgerStore", "LedgerTransaction"]
