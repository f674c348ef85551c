"""
Logging configuration for AutoParts.

JSON lines in production, plain text locally. Every record written while a
request is in flight carries the request ID bound by RequestLoggingMiddleware,
so catalog queries and CSV imports can be traced back to the call that
triggered them.
"""

from __future__ import annotations

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, UTC
from typing import Any, Optional, TYPE_CHECKING

from pythonjsonlogger import jsonlogger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from autoparts.core.config import settings

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS: dict[str, int] = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.ERROR,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "python_multipart": logging.WARNING,
    "aiosqlite": logging.WARNING,
}


class StructuredJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service, source and request context to each record."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = f"{settings.PROJECT_NAME}/{settings.VERSION}"
        log_record["environment"] = settings.ENVIRONMENT
        log_record["source"] = f"{record.module}.{record.funcName}:{record.lineno}"

        log_record.setdefault("request_id", request_id_var.get())
        log_record.setdefault("correlation_id", correlation_id_var.get())

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            log_record["error"] = {
                "type": type(exc).__name__,
                "message": str(exc),
                "stack_trace": self.formatException(record.exc_info),
            }
            if exc.__cause__ is not None:
                log_record["error"]["cause"] = f"{type(exc.__cause__).__name__}: {exc.__cause__}"

        for key in [k for k, v in log_record.items() if v is None]:
            del log_record[key]


def _status_level(status_code: int, duration_ms: float) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400 or duration_ms > settings.LOG_SLOW_REQUEST_MS:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds X-Request-ID / X-Correlation-ID to the logging context and logs
    one line per request.

    The line records the matched route template (``/api/v1/parts/{part_id}``)
    rather than the raw path, plus the names of the query parameters used, so
    filter usage on the catalog listings can be aggregated without logging the
    search text itself.
    """

    QUIET_PATHS = frozenset({"/health", "/api/v1/health/live"})

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        correlation_id = request.headers.get("X-Correlation-ID")
        request.state.request_id = request_id

        request_token = request_id_var.set(request_id)
        correlation_token = correlation_id_var.set(correlation_id)
        logger = get_logger("autoparts.request")
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error on %s %s",
                request.method,
                request.url.path,
                extra={"event": "request_error", "duration_ms": _elapsed_ms(started)},
            )
            raise
        finally:
            request_id_var.reset(request_token)
            correlation_id_var.reset(correlation_token)

        duration_ms = _elapsed_ms(started)
        if request.url.path not in self.QUIET_PATHS:
            route = request.scope.get("route")
            logger.log(
                _status_level(response.status_code, duration_ms),
                "%s %s -> %s",
                request.method,
                request.url.path,
                response.status_code,
                extra={
                    "event": "request_complete",
                    "request_id": request_id,
                    "http": {
                        "method": request.method,
                        "route": getattr(route, "path", request.url.path),
                        "status_code": response.status_code,
                        "params": sorted(set(request.query_params.keys())) or None,
                    },
                    "duration_ms": duration_ms,
                },
            )

        response.headers["X-Request-ID"] = request_id
        if correlation_id:
            response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class PerformanceLogger:
    """
    Context manager timing a unit of work.

    Fields passed to the constructor or attached later with ``add`` are
    logged with the timing, e.g. row counts of a CSV import::

        with PerformanceLogger("vehicle_csv_import", bytes=len(content)) as perf:
            staged = stage_vehicles(content)
            perf.add(rows=len(staged.vehicles))

    Failures are logged and re-raised; a run slower than
    ``LOG_SLOW_OPERATION_MS`` is logged as a warning.
    """

    def __init__(self, operation: str, logger_name: str = "autoparts.performance", **fields: Any):
        self.operation = operation
        self.logger = get_logger(logger_name)
        self.fields = fields
        self.elapsed_ms = 0.0
        self._started = 0.0

    def add(self, **fields: Any) -> None:
        self.fields.update(fields)

    def __enter__(self) -> PerformanceLogger:
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.elapsed_ms = _elapsed_ms(self._started)
        extra = {
            "event": "operation_timing",
            "operation": self.operation,
            "duration_ms": self.elapsed_ms,
            "success": exc_type is None,
            **self.fields,
        }

        if exc_type is not None:
            extra["error_type"] = exc_type.__name__
            self.logger.warning("%s failed after %.0fms: %s", self.operation, self.elapsed_ms, exc_val, extra=extra)
        elif self.elapsed_ms > settings.LOG_SLOW_OPERATION_MS:
            self.logger.warning("%s slow (%.0fms)", self.operation, self.elapsed_ms, extra=extra)
        else:
            self.logger.debug("%s done (%.0fms)", self.operation, self.elapsed_ms, extra=extra)


def setup_logging() -> None:
    """Install the stdout handler on the root logger (json or text per LOG_FORMAT)."""
    if settings.LOG_FORMAT == "json":
        formatter: logging.Formatter = StructuredJsonFormatter("%(level)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.LOG_LEVEL.upper())

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_database_operation(
    operation: str,
    table: str,
    duration_ms: float,
    rows_affected: int = 0,
    success: bool = True,
    error: str | None = None,
) -> None:
    """
    Log a write against a catalog table with standard fields.

    Args:
        operation: insert, update or delete
        table: Table name
        duration_ms: Operation duration in milliseconds
        rows_affected: Number of rows written
        success: Whether the statement (and its transaction) succeeded
        error: Driver error message when it did not
    """
    logger = get_logger("autoparts.database")
    extra = {
        "event": "database_operation",
        "operation": operation,
        "table": table,
        "duration_ms": round(duration_ms, 2),
        "rows_affected": rows_affected,
        "success": success,
    }

    if not success:
        logger.error("%s on %s rolled back: %s", operation, table, error, extra=extra)
    elif duration_ms > settings.LOG_SLOW_OPERATION_MS:
        logger.warning("slow %s on %s (%d rows)", operation, table, rows_affected, extra=extra)
    else:
        logger.info("%s on %s (%d rows)", operation, table, rows_affected, extra=extra)
