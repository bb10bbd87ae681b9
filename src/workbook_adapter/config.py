"""Configuration management for the workbook adapter.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
WBA_ prefix, or via a .env file in the project root.

Environment Variables:
    WBA_LOG_LEVEL: Logging level (default: INFO)
    WBA_FLUSH_PROGRESS_INTERVAL: Rows between flush progress logs (default: 500)
    WBA_XLSX_HEADER_ROW: 1-based row holding column names in xlsx files (default: 1)
    WBA_EXPORT_JSON_INDENT: Indent for JSON exports, unset for compact (default: 2)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Adapter settings loaded from environment variables.

    Example .env file:
        WBA_LOG_LEVEL=DEBUG
        WBA_XLSX_HEADER_ROW=2
    """

    model_config = SettingsConfigDict(
        env_prefix="WBA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    flush_progress_interval: int = 500
    """Number of rows flushed between progress log lines."""

    # =========================================================================
    # Storage Settings
    # =========================================================================

    xlsx_header_row: int = 1
    """1-based row that holds the column names in xlsx-backed workbooks."""

    export_json_indent: int | None = 2
    """Indentation used by the in-memory adapter's JSON export."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("flush_progress_interval", "xlsx_header_row")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate counters and row numbers are at least 1."""
        if v < 1:
            raise ValueError(f"Value must be at least 1, got {v}")
        return v

    @field_validator("export_json_indent")
    @classmethod
    def validate_indent(cls, v: int | None) -> int | None:
        """Validate JSON indent is non-negative."""
        if v is not None and v < 0:
            raise ValueError(f"export_json_indent must be non-negative, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary."""
        return {
            "log_level": self.log_level,
            "flush_progress_interval": self.flush_progress_interval,
            "xlsx_header_row": self.xlsx_header_row,
            "export_json_indent": self.export_json_indent,
        }


# Create the global settings instance
settings = Settings()
