"""Global error handlers; every error body carries `code` and `request_id`."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.request_id import get_request_id
from app.domain.common.errors import (
    ConflictError,
    DomainError,
    LocationRequiredError,
    NotFoundError,
    NotMutualFollowError,
    StoreUnavailableError,
    ValidationError,
)
from app.infra.rate_limit import RateLimitExceeded

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (LocationRequiredError, status.HTTP_400_BAD_REQUEST),
    (NotMutualFollowError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

_CODE_BY_STATUS = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMITED",
    503: "STORE_UNAVAILABLE",
}


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _body(request: Request, detail, code: str, **extra) -> dict:
    return {"detail": detail, "code": code, "request_id": get_request_id(request), **extra}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_exc_handler(request: Request, exc: DomainError):  # type: ignore[override]
        status_code = status_for(exc)
        if status_code >= 500:
            logger.warning("domain error code=%s reason=%s", exc.code, exc.reason)
        return JSONResponse(status_code=status_code, content=_body(request, exc.reason, exc.code))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):  # type: ignore[override]
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=_body(request, "rate_limited", exc.code, kind=exc.reason),
            headers={"Retry-After": "60"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        code = _CODE_BY_STATUS.get(exc.status_code, "HTTP_ERROR")
        return JSONResponse(
            status_code=exc.status_code,
            content=_body(request, exc.detail, code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        return JSONResponse(
            status_code=422,
            content=_body(
                request,
                "validation_error",
                ValidationError.code,
                errors=jsonable_encoder(exc.errors()),
            ),
        )
