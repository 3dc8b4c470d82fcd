"""Translate domain errors into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from venue_booking.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VENUE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_STATUS_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.PERSISTENCE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.PERMISSION_DENIED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error as ``{"detail": ..., "code": ...}``."""
    status_code = _STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code.value})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are validation failures like any other: 400."""
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}" for err in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message or "Invalid request", "code": ErrorCode.VALIDATION_ERROR.value},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
