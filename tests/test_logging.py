"""Tests for prwatch.logging (PrwatchLogging, level/format from config)."""

import logging

from prwatch.config import LoggingConfig
from prwatch.logging import (
    DEFAULT_FORMAT,
    DEFAULT_LEVEL,
    LEVELS,
    PrwatchLogging,
    _resolve_level,
)


class TestResolveLevel:
    """_resolve_level maps level names to logging constants."""

    def test_known_levels(self) -> None:
        for name, value in LEVELS.items():
            assert _resolve_level(name) == value

    def test_case_and_whitespace_normalized(self) -> None:
        assert _resolve_level("debug") == logging.DEBUG
        assert _resolve_level("  WARNING\t") == logging.WARNING

    def test_unknown_level_returns_info(self) -> None:
        """Unknown level name falls back to DEFAULT_LEVEL (INFO)."""
        assert DEFAULT_LEVEL == "INFO"
        assert _resolve_level("TRACE") == LEVELS[DEFAULT_LEVEL]
        assert _resolve_level("") == logging.INFO


class TestPrwatchLogging:
    """PrwatchLogging applies LoggingConfig (level + format) to root logger."""

    def test_setup_sets_root_level_from_config(self) -> None:
        for level_name, expected_num in LEVELS.items():
            PrwatchLogging(LoggingConfig(level=level_name, format="%(message)s")).setup()
            assert logging.root.level == expected_num

    def test_setup_applies_format(self) -> None:
        custom = "%(levelname)s || %(message)s"
        PrwatchLogging(LoggingConfig(level="INFO", format=custom)).setup()
        handler = logging.root.handlers[0]
        assert handler.formatter is not None
        assert handler.formatter._fmt == custom

    def test_empty_format_uses_default(self) -> None:
        PrwatchLogging(LoggingConfig(level="INFO", format="")).setup()
        fmt = logging.root.handlers[0].formatter
        assert fmt is not None
        assert fmt._fmt == DEFAULT_FORMAT

