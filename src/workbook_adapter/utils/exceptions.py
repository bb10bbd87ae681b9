"""Centralized exception classes for the workbook adapter.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling throughout the
package.

Exception Hierarchy:
    WorkbookAdapterError (base)
    ├── SchemaError
    │   ├── SchemaValidationError
    │   ├── UnknownSheetError
    │   └── UnknownColumnError
    ├── CacheError
    │   └── PoisonedCacheAccessError
    └── WorkbookStorageError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the package.

    Error codes are grouped by category:
    - E1xxx: Schema errors
    - E2xxx: Virtual cell cache errors
    - E3xxx: Raw storage errors
    - E9xxx: Internal/unexpected errors
    """

    # Schema errors (E1xxx)
    INVALID_SCHEMA = "E1001"
    SCHEMA_VALIDATION_FAILED = "E1002"
    UNKNOWN_SHEET = "E1003"
    UNKNOWN_COLUMN = "E1004"

    # Cache errors (E2xxx)
    CACHE_ERROR = "E2001"
    POISONED_CACHE_ACCESS = "E2002"

    # Storage errors (E3xxx)
    STORAGE_ERROR = "E3001"
    STORAGE_READ_FAILED = "E3002"
    STORAGE_WRITE_FAILED = "E3003"
    STORAGE_PATH_MISSING = "E3004"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class WorkbookAdapterError(Exception):
    """Base exception for all workbook adapter errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for structured logging.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Schema Errors (E1xxx)
# =============================================================================


class SchemaError(WorkbookAdapterError):
    """Base class for schema-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_SCHEMA,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation errors.

        Args:
            message: Main error message.
            error_code: Error code.
            errors: List of specific validation error messages.
            details: Additional details.
        """
        details = details or {}
        if errors:
            details["validation_errors"] = errors
        super().__init__(message, error_code, details)
        self.errors = errors or []


class SchemaValidationError(SchemaError):
    """Raised when a schema declaration is malformed."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.SCHEMA_VALIDATION_FAILED,
            errors=errors,
            details=details,
        )


class UnknownSheetError(SchemaError, KeyError):
    """Raised when a sheet name is not declared in the schema."""

    def __init__(
        self,
        sheet: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["sheet"] = sheet
        super().__init__(
            message=message or f"Unknown sheet: {sheet!r}",
            error_code=ErrorCode.UNKNOWN_SHEET,
            details=details,
        )
        self.sheet = sheet


class UnknownColumnError(SchemaError, KeyError):
    """Raised when a column name is not declared for a sheet."""

    def __init__(
        self,
        sheet: str,
        column: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["sheet"] = sheet
        details["column"] = column
        super().__init__(
            message=message or f"Unknown column {column!r} in sheet {sheet!r}",
            error_code=ErrorCode.UNKNOWN_COLUMN,
            details=details,
        )
        self.sheet = sheet
        self.column = column


# =============================================================================
# Cache Errors (E2xxx)
# =============================================================================


class CacheError(WorkbookAdapterError):
    """Base class for virtual cell cache errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CACHE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class PoisonedCacheAccessError(CacheError):
    """Raised when a cached value is used after its slot was overwritten.

    The stale object no longer corresponds to any live cache slot, so any
    change made through it would never reach raw storage.
    """

    def __init__(
        self,
        sheet: str | None = None,
        column: str | None = None,
        row: int | None = None,
        attribute: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the slot the poisoned value used to occupy.

        Args:
            sheet: Sheet name of the overwritten slot.
            column: Column name of the overwritten slot.
            row: Row index of the overwritten slot.
            attribute: Attribute or operation that was attempted.
            details: Additional details.
        """
        details = details or {}
        if sheet is not None:
            details["sheet"] = sheet
        if column is not None:
            details["column"] = column
        if row is not None:
            details["row"] = row
        if attribute is not None:
            details["attribute"] = attribute
        message = (
            "Cannot read or modify a virtual cell value after it has been "
            "overwritten; it is no longer bound to the workbook"
        )
        if sheet is not None and column is not None and row is not None:
            message = f"{message} (slot {sheet}.{column}[{row}])"
        super().__init__(
            message=message,
            error_code=ErrorCode.POISONED_CACHE_ACCESS,
            details=details,
        )
        self.sheet = sheet
        self.column = column
        self.row = row
        self.attribute = attribute


# =============================================================================
# Storage Errors (E3xxx)
# =============================================================================


class WorkbookStorageError(WorkbookAdapterError):
    """Raised by storage collaborators when reading or writing fails."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.STORAGE_ERROR,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path information.

        Args:
            message: Error message.
            error_code: Error code.
            file_path: Path to the problematic file.
            details: Additional details.
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path
