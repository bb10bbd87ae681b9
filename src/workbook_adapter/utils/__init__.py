"""Utilities package for the workbook adapter.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from workbook_adapter.utils.exceptions import (
    CacheError,
    ErrorCode,
    PoisonedCacheAccessError,
    SchemaError,
    SchemaValidationError,
    UnknownColumnError,
    UnknownSheetError,
    WorkbookAdapterError,
    WorkbookStorageError,
)
from workbook_adapter.utils.logging import (
    LogContext,
    ProgressTracker,
    StructuredLogger,
    configure_logging,
    get_logger,
    timed_operation,
)

__all__ = [
    # Exceptions
    "CacheError",
    "ErrorCode",
    "PoisonedCacheAccessError",
    "SchemaError",
    "SchemaValidationError",
    "UnknownColumnError",
    "UnknownSheetError",
    "WorkbookAdapterError",
    "WorkbookStorageError",
    # Logging
    "LogContext",
    "ProgressTracker",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "timed_operation",
]
