"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, parse_level, setup_logging


class TestLogging:
    """Test core logging API."""

    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "formtree"

    def test_setup_logging(self) -> None:
        """Verify logging setup."""
        stream = StringIO()
        setup_logging(level=logging.DEBUG, stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")

        # basicConfig is a no-op once logging is configured, so only the
        # API contract is checked here.
        assert logger.level == logging.NOTSET


class TestParseLevel:
    """Tests for level name resolution."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            (" Warning ", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_known_names(self, name, expected) -> None:
        """Level names resolve case-insensitively."""
        assert parse_level(name) == expected

    @pytest.mark.unit
    def test_unknown_name_uses_default(self) -> None:
        """Unknown names fall back to the default."""
        assert parse_level("chatty", default=logging.ERROR) == logging.ERROR

    @pytest.mark.unit
    def test_empty_uses_default(self) -> None:
        """None and empty strings fall back to the default."""
        assert parse_level(None) == logging.INFO
        assert parse_level("") == logging.INFO
