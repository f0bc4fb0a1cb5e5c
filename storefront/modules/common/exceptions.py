"""Error taxonomy shared by every ledger operation.

Each operation either commits fully or has no effect, so every error below
leaves the store exactly as it was before the call. Only
:class:`UnavailableError` is worth retrying automatically.
"""


class LedgerError(Exception):
    """Base class for ledger domain errors."""

    code = "ledger_error"
    retryable = False

    def __init__(self, message: str | None = None, **details) -> None:
        self.message = message or (self.__doc__ or self.code).strip()
        self.details = details
        super().__init__(self.message)


class InvalidInputError(LedgerError):
    """Malformed quantity, URL or other request field."""

    code = "invalid_input"


class NotFoundError(LedgerError):
    """Requested service, order, account or wallet does not exist."""

    code = "not_found"


class InsufficientFundsError(LedgerError):
    """Wallet balance does not cover the requested debit."""

    code = "insufficient_funds"


class InvalidTransitionError(LedgerError):
    """Operation is not allowed in the order's current status."""

    code = "invalid_transition"


class ConflictError(LedgerError):
    """Stored state changed since it was read."""

    code = "conflict"


class ForbiddenError(LedgerError):
    """Principal lacks the role or ownership the operation requires."""

    code = "forbidden"


class UnavailableError(LedgerError):
    """The store failed transiently; the caller may retry."""

    code = "unavailable"
    retryable = True


__all__ = [
    "LedgerError",
    "InvalidInputError",
    "NotFoundError",
    "InsufficientFundsError",
    "InvalidTransitionError",
    "ConflictError",
    "ForbiddenError",
    "UnavailableError",
]
