"""
Exception handlers turning every failure into the AutoParts error envelope:

    {"error": {"code", "message", "message_tr", "details", "request_id"}}

Domain exceptions keep their own status and details. Request validation
becomes a 422 listing each offending parameter. Database errors are mapped by
type, and anything else becomes a 500 without internals unless DEBUG is on.
"""

import uuid
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as SQLAlchemyTimeoutError,
)

from autoparts.core.config import settings
from autoparts.core.exceptions import AutoPartsException, ErrorCode, get_error_message
from autoparts.core.logging import get_logger

logger = get_logger(__name__)

# Checked in order; OperationalError and IntegrityError are DBAPIError subclasses
DATABASE_ERRORS: list[tuple[type[SQLAlchemyError], ErrorCode, int]] = [
    (OperationalError, ErrorCode.DATABASE_CONNECTION, status.HTTP_503_SERVICE_UNAVAILABLE),
    (IntegrityError, ErrorCode.DATABASE_INTEGRITY, status.HTTP_409_CONFLICT),
    (SQLAlchemyTimeoutError, ErrorCode.DATABASE_TIMEOUT, status.HTTP_504_GATEWAY_TIMEOUT),
    (DBAPIError, ErrorCode.POSTGRES_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def build_error_response(
    request_id: str,
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
) -> ORJSONResponse:
    content = {
        "error": {
            "code": code.value,
            "message": message,
            "message_tr": get_error_message(code, message),
            "details": details or {},
            "request_id": request_id,
        }
    }
    return ORJSONResponse(status_code=status_code, content=jsonable_encoder(content))


def get_request_id(request: Request) -> str:
    """Request ID bound by RequestLoggingMiddleware, or a fresh one outside it."""
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _log_context(request: Request, request_id: str, **fields: Any) -> dict[str, Any]:
    return {"request_id": request_id, "method": request.method, "path": request.url.path, **fields}


def _debug_details(exc: Exception) -> dict[str, Any]:
    if not settings.DEBUG:
        return {}
    return {"error_type": type(exc).__name__, "error_message": str(exc)[:200]}


def _parameter_name(loc: tuple[Any, ...]) -> str:
    """``("query", "year_list", 1)`` -> ``query.year_list[1]``"""
    name = ""
    for part in loc:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name = f"{name}.{part}" if name else str(part)
    return name


async def autoparts_exception_handler(request: Request, exc: AutoPartsException) -> ORJSONResponse:
    request_id = get_request_id(request)
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "%s: %s",
        exc.code.value,
        exc.message,
        extra=_log_context(request, request_id, error_code=exc.code.value, details=exc.details),
    )
    return build_error_response(
        request_id=request_id,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        status_code=exc.status_code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    request_id = get_request_id(request)
    errors = [
        {"field": _parameter_name(tuple(error["loc"])), "message": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    logger.info(
        "Rejected request parameters: %s",
        ", ".join(e["field"] for e in errors),
        extra=_log_context(request, request_id, validation_errors=errors),
    )
    return build_error_response(
        request_id=request_id,
        code=ErrorCode.VALIDATION_ERROR,
        message="Validation error",
        details={"validation_errors": errors},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
    request_id = get_request_id(request)
    code, status_code = ErrorCode.DATABASE_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped_code, mapped_status in DATABASE_ERRORS:
        if isinstance(exc, error_type):
            code, status_code = mapped_code, mapped_status
            break

    logger.error(
        "Database error %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        extra=_log_context(request, request_id, error_code=code.value),
        exc_info=settings.DEBUG,
    )
    return build_error_response(
        request_id=request_id,
        code=code,
        message="Database error",
        details=_debug_details(exc),
        status_code=status_code,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    request_id = get_request_id(request)
    logger.error(
        "Unhandled %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        extra=_log_context(request, request_id),
        exc_info=exc,
    )
    return build_error_response(
        request_id=request_id,
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
        details=_debug_details(exc),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the handlers; the catch-all Exception handler goes last."""
    app.add_exception_handler(AutoPartsException, autoparts_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
