"""
Custom exception classes for AutoParts.

Every exception carries an ErrorCode, an HTTP status and a details dict;
error_handlers turns them into the JSON error envelope with the Turkish
message for the code.
"""

from enum import StrEnum
from typing import Any

from fastapi import status

from autoparts.core.config import settings

# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(StrEnum):
    """Standardized error codes for client-side handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "ERR_1000"
    VALIDATION_ERROR = "ERR_1001"
    NOT_FOUND = "ERR_1002"

    # Database errors (2xxx)
    DATABASE_ERROR = "ERR_2000"
    DATABASE_CONNECTION = "ERR_2001"
    DATABASE_TIMEOUT = "ERR_2002"
    DATABASE_INTEGRITY = "ERR_2003"
    POSTGRES_ERROR = "ERR_2010"

    # Business logic errors (4xxx)
    VEHICLE_NOT_FOUND = "ERR_4003"
    PART_NOT_FOUND = "ERR_4004"
    VEHICLE_YEAR_ERROR = "ERR_4005"
    VEHICLE_IMPORT_ERROR = "ERR_4010"


# =============================================================================
# Turkish Error Messages
# =============================================================================


ERROR_MESSAGES_TR: dict[ErrorCode, str] = {
    # General errors
    ErrorCode.INTERNAL_ERROR: "Sunucu hatasi olustu. Lutfen daha sonra tekrar deneyin.",
    ErrorCode.VALIDATION_ERROR: "Gecersiz veri. Lutfen girdiginiz bilgileri kontrol edin.",
    ErrorCode.NOT_FOUND: "Aranan kayit bulunamadi.",

    # Database errors
    ErrorCode.DATABASE_ERROR: "Veritabani hatasi olustu. Lutfen daha sonra tekrar deneyin.",
    ErrorCode.DATABASE_CONNECTION: "Veritabanina baglanilamadi.",
    ErrorCode.DATABASE_TIMEOUT: "Veritabani baglantisi zaman asimina ugradi.",
    ErrorCode.DATABASE_INTEGRITY: "Veri butunlugu hatasi olustu.",
    ErrorCode.POSTGRES_ERROR: "PostgreSQL veritabani hatasi.",

    # Business logic errors
    ErrorCode.VEHICLE_NOT_FOUND: "Secilen arac bulunamadi.",
    ErrorCode.PART_NOT_FOUND: "Parca bulunamadi.",
    ErrorCode.VEHICLE_YEAR_ERROR: "Arac yil bilgisi gecersiz.",
    ErrorCode.VEHICLE_IMPORT_ERROR: "Arac CSV aktarimi basarisiz.",
}


def get_error_message(code: ErrorCode, fallback: str | None = None) -> str:
    """Get Turkish error message for error code."""
    return ERROR_MESSAGES_TR.get(code, fallback or "Bilinmeyen bir hata olustu.")


# =============================================================================
# Base Exception Classes
# =============================================================================


class AutoPartsException(Exception):
    """
    Base exception class for all AutoParts exceptions.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional error context
        status_code: HTTP status code
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationException(AutoPartsException):
    """Exception for validation errors."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class VehicleYearException(ValidationException):
    """Exception for an inconsistent model year / production range."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message=message, field=field)
        self.code = ErrorCode.VEHICLE_YEAR_ERROR


class VehicleImportException(ValidationException):
    """
    Exception for a CSV import that cannot proceed at all.

    Raised for an empty file, missing Brand/Model columns, or when no row
    survived validation. Row-level problems collected so far travel in
    ``details["row_errors"]``.
    """

    def __init__(
        self,
        message: str,
        row_errors: list[str] | None = None,
    ):
        details: dict[str, Any] = {}
        if row_errors:
            details["row_errors"] = list(row_errors)

        super().__init__(message=message, field="file", details=details)
        self.code = ErrorCode.VEHICLE_IMPORT_ERROR
        self.row_errors = list(row_errors or [])


# =============================================================================
# Resource Exceptions
# =============================================================================


class NotFoundException(AutoPartsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            details=details,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class VehicleNotFoundException(NotFoundException):
    """Exception when vehicle is not found."""

    def __init__(self, vehicle_id: int | None = None, message: str = "Secilen arac bulunamadi."):
        super().__init__(
            message=message,
            resource_type="vehicle",
            resource_id=str(vehicle_id) if vehicle_id is not None else None,
        )
        self.code = ErrorCode.VEHICLE_NOT_FOUND


class PartNotFoundException(NotFoundException):
    """Exception when part is not found."""

    def __init__(self, part_id: int | None = None, message: str = "Parca bulunamadi."):
        super().__init__(
            message=message,
            resource_type="part",
            resource_id=str(part_id) if part_id is not None else None,
        )
        self.code = ErrorCode.PART_NOT_FOUND


# =============================================================================
# Database Exceptions
# =============================================================================


class DatabaseException(AutoPartsException):
    """Base exception for database errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DATABASE_ERROR,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ):
        error_details = details or {}
        # Driver messages can carry SQL and parameters
        if original_error is not None and settings.DEBUG:
            error_details["original_error"] = str(original_error)

        super().__init__(
            message=message,
            code=code,
            details=error_details,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.original_error = original_error


class PostgresException(DatabaseException):
    """Exception for PostgreSQL errors."""

    def __init__(
        self,
        message: str = "PostgreSQL veritabani hatasi.",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(
            message=message,
            code=ErrorCode.POSTGRES_ERROR,
            details=details,
            original_error=original_error,
        )


class PostgresConnectionException(PostgresException):
    """Exception for PostgreSQL connection errors."""

    def __init__(
        self,
        message: str = "PostgreSQL veritabanina baglanilamadi.",
        original_error: Exception | None = None,
    ):
        super().__init__(
            message=message,
            details={"type": "connection"},
            original_error=original_error,
        )
        self.code = ErrorCode.DATABASE_CONNECTION
