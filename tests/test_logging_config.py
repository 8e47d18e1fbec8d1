"""
Tests for logger setup.
"""
import logging

import pytest
from pydantic import ValidationError

from table_export.core.config import Settings
from table_export.core.logging_config import setup_logger


def test_console_and_file_handlers(tmp_path):
    logger = setup_logger("table_export_test.files", level="DEBUG", log_dir=str(tmp_path))

    assert logger.level == logging.DEBUG
    assert not logger.propagate
    assert len(logger.handlers) == 2

    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in (tmp_path / "table_export_test_files.log").read_text(encoding="utf-8")


def test_handlers_added_once():
    first = setup_logger("table_export_test.once", level="INFO")
    count = len(first.handlers)
    second = setup_logger("table_export_test.once", level="WARNING")

    assert first is second
    assert len(second.handlers) == count
    assert second.level == logging.WARNING


def test_unknown_level_rejected():
    with pytest.raises(ValueError, match="Unknown log level: VERBOSE"):
        setup_logger("table_export_test.unknown", level="verbose")


def test_settings_log_level_validated():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="verbose")
