"""Translation of classified errors into HTTP responses."""

from typing import Final, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from billing_engine.domain.common.exceptions import DomainError, ErrorKind

logger = structlog.get_logger(__name__)

# kind -> (HTTP status, RPC-style status name)
ERROR_KIND_STATUS: Final[dict[ErrorKind, tuple[int, str]]] = {
    ErrorKind.INTERNAL: (500, "internal"),
    ErrorKind.BAD_REQUEST: (400, "invalid_argument"),
    ErrorKind.UNPROCESSABLE_ENTITY: (422, "failed_precondition"),
    ErrorKind.NOT_FOUND: (404, "not_found"),
    ErrorKind.ALREADY_EXISTS: (409, "already_exists"),
}
UNCLASSIFIED_STATUS: Final[tuple[int, str]] = (500, "unknown")


def status_for(error: BaseException) -> tuple[int, str]:
    """Return the (HTTP status, status name) pair reported for `error`."""
    if isinstance(error, DomainError):
        return ERROR_KIND_STATUS.get(error.kind, UNCLASSIFIED_STATUS)
    return UNCLASSIFIED_STATUS


def error_body(kind: str, status_name: str, message: str) -> dict[str, dict[str, str]]:
    return {"error": {"kind": kind, "status": status_name, "message": message}}


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(DomainError, exc)
    http_status, status_name = status_for(error)
    if error.kind == ErrorKind.INTERNAL:
        logger.error("request_failed", path=request.url.path, error=error.message)
    return JSONResponse(
        status_code=http_status,
        content=error_body(error.kind.value, status_name, error.message),
    )


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Malformed request bodies and parameters are reported as invalid arguments."""
    errors = cast(RequestValidationError, exc).errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(ErrorKind.BAD_REQUEST.value, "invalid_argument", message),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, exc_info=exc)
    http_status, status_name = UNCLASSIFIED_STATUS
    return JSONResponse(
        status_code=http_status,
        content=error_body("unknown", status_name, "An unexpected error occurred."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
