"""Map domain and framework exceptions onto HTTP responses.

Every error body carries ``message`` and ``error`` (the exception type).
Validation failures add ``errors`` with field-level detail.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import (
    AuthenticationError,
    CartItemNotFoundError,
    CartNotFoundError,
    EmptyCartError,
    ForbiddenError,
    InsufficientStockError,
    InvalidTransitionError,
    MarketplaceError,
    OrderNotFoundError,
    ProductNotFoundError,
    StaleCartError,
    StockExceededError,
    UserNotFoundError,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type, int] = {
    StockExceededError: 400,
    InsufficientStockError: 400,
    EmptyCartError: 400,
    InvalidTransitionError: 400,
    AuthenticationError: 401,
    ForbiddenError: 403,
    CartNotFoundError: 404,
    CartItemNotFoundError: 404,
    ProductNotFoundError: 404,
    OrderNotFoundError: 404,
    UserNotFoundError: 404,
    StaleCartError: 409,
}


def _error_body(message, exc, **extra):
    return {"message": message, "error": type(exc).__name__, **extra}


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=_error_body(exc.message, exc), headers=headers)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body("Validation failed", exc, errors=exc.messages))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
        errors.setdefault(field, []).append(error["msg"])
    return JSONResponse(status_code=400, content=_error_body("Validation failed", exc, errors=errors))


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body("Resource not found", exc))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content=_error_body("Internal server error", exc))


def register_error_handlers(app: FastAPI) -> None:
    # Protean's handlers cover the remaining framework exceptions
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
