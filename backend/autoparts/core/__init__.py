# Core module
"""
Core module for AutoParts backend.

This module provides:
- Configuration management (config.py)
- Custom exceptions with Turkish messages (exceptions.py)
- Global error handlers (error_handlers.py)
- Structured logging (logging.py)
"""

from autoparts.core.config import settings, get_settings
from autoparts.core.exceptions import (
    # Base exceptions
    AutoPartsException,
    ValidationException,
    NotFoundException,
    # Database exceptions
    DatabaseException,
    PostgresException,
    PostgresConnectionException,
    # Business logic exceptions
    VehicleYearException,
    VehicleImportException,
    VehicleNotFoundException,
    PartNotFoundException,
    # Error codes
    ErrorCode,
    get_error_message,
)
from autoparts.core.logging import (
    setup_logging,
    get_logger,
    log_database_operation,
    PerformanceLogger,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Exceptions
    "AutoPartsException",
    "ValidationException",
    "NotFoundException",
    "DatabaseException",
    "PostgresException",
    "PostgresConnectionException",
    "VehicleYearException",
    "VehicleImportException",
    "VehicleNotFoundException",
    "PartNotFoundException",
    "ErrorCode",
    "get_error_message",
    # Logging
    "setup_logging",
    "get_logger",
    "log_database_operation",
    "PerformanceLogger",
]
