"""Map storefront errors to HTTP responses.

Body shape: {"error": message, "code": code, ...details}.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import (
    BusinessRuleError,
    InputError,
    InvalidSignature,
    NotFoundError,
    PaymentGatewayError,
    StorefrontError,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES = (
    (NotFoundError, 404),
    (InputError, 400),
    (BusinessRuleError, 422),
    (InvalidSignature, 401),
    (PaymentGatewayError, 502),
)


def status_code_for(exc: StorefrontError) -> int:
    for error_cls, status_code in _STATUS_CODES:
        if isinstance(exc, error_cls):
            return status_code
    return 500


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "code": exc.code, **exc.details()},
    )


async def concurrent_update_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent update rejected", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=409,
        content={"error": "This record was changed by another request, please retry", "code": "conflict"},
    )


def register_storefront_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ExpectedVersionError, concurrent_update_handler)
