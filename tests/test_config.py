"""Tests for configuration management module."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from workbook_adapter.config import Settings


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.flush_progress_interval == 500
        assert settings.xlsx_header_row == 1
        assert settings.export_json_indent == 2

    def test_environment_variable_override(self) -> None:
        """Test that environment variables override defaults."""
        env_vars = {
            "WBA_LOG_LEVEL": "DEBUG",
            "WBA_FLUSH_PROGRESS_INTERVAL": "25",
            "WBA_XLSX_HEADER_ROW": "3",
            "WBA_EXPORT_JSON_INDENT": "4",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.flush_progress_interval == 25
        assert settings.xlsx_header_row == 3
        assert settings.export_json_indent == 4

    def test_unprefixed_variables_are_ignored(self) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"

    def test_log_level_is_uppercased(self) -> None:
        with patch.dict(os.environ, {"WBA_LOG_LEVEL": "warning"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level == "WARNING"

    def test_log_level_int(self) -> None:
        with patch.dict(os.environ, {"WBA_LOG_LEVEL": "ERROR"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level_int == logging.ERROR

    def test_to_dict(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.to_dict() == {
            "log_level": "INFO",
            "flush_progress_interval": 500,
            "xlsx_header_row": 1,
            "export_json_indent": 2,
        }


class TestSettingsValidation:
    """Tests for settings validators."""

    def test_invalid_log_level(self) -> None:
        with patch.dict(os.environ, {"WBA_LOG_LEVEL": "LOUD"}, clear=True):
            with pytest.raises(ValidationError, match="Invalid log level"):
                Settings(_env_file=None)

    @pytest.mark.parametrize("field", ["flush_progress_interval", "xlsx_header_row"])
    def test_counters_must_be_positive(self, field: str) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError, match="at least 1"):
                Settings(_env_file=None, **{field: 0})

    def test_negative_indent_rejected(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError, match="non-negative"):
                Settings(_env_file=None, export_json_indent=-1)

    def test_indent_can_be_disabled(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None, export_json_indent=None)
        assert settings.export_json_indent is None
