"""Map domain errors onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from storefront.modules.common import (
    ConflictError,
    ForbiddenError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidTransitionError,
    LedgerError,
    NotFoundError,
    UnavailableError,
)
from storefront.schemas import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[LedgerError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientFundsError: status.HTTP_402_PAYMENT_REQUIRED,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    UnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(exc: LedgerError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


def _jsonable(details: dict) -> dict:
    return {key: value if isinstance(value, (int, float, bool, type(None))) else str(value) for key, value in details.items()}


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    body = ErrorResponse(code=exc.code, message=exc.message, details=_jsonable(exc.details))
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("%s %s hit a constraint violation: %s", request.method, request.url.path, exc.orig)
    body = ErrorResponse(code=ConflictError.code, message="request conflicts with existing data")
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)


__all__ = ["STATUS_CODES", "register_exception_handlers", "status_code_for"]
