"""
Tests for logging utilities.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest
from rich.logging import RichHandler

from docx_merger.utils.logger import configure_logging, get_logger, set_log_level
from docx_merger.utils.rich_logger import setup_logging


class TestLogger:
    """Test cases for logging configuration."""

    def test_get_logger(self):
        assert get_logger("docx_merger.test").name == "docx_merger.test"

    def test_get_logger_empty_name(self):
        with pytest.raises(ValueError):
            get_logger("")

    def test_configure_logging_with_file(self, temp_dir):
        """Test that a rotating file handler is added for log files."""
        log_file = temp_dir / "logs" / "merge.log"

        configure_logging("DEBUG", log_file=str(log_file))
        logging.getLogger("docx_merger.test").debug("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert any(isinstance(handler, RotatingFileHandler) for handler in root_logger.handlers)
        assert "written" in log_file.read_text()

        for handler in root_logger.handlers:
            handler.close()

    def test_configure_logging_invalid_level(self):
        with pytest.raises(ValueError):
            configure_logging("VERBOSE")

    def test_set_log_level(self):
        set_log_level("error")

        assert logging.getLogger().level == logging.ERROR


class TestRichLogger:
    """Test cases for rich logging setup."""

    def test_setup_logging_rich(self):
        setup_logging("INFO")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)

    def test_setup_logging_plain(self):
        setup_logging("WARNING", use_rich=False)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RichHandler)
