"""Logging from config and env.

Levels (inclusive):
- ERROR: critical errors only
- WARNING: non-critical issues and ERROR
- INFO: service messages, WARNING, and ERROR
- DEBUG: debugging and all levels above

Configure via config.yaml (logging.level, logging.format) or env (LOGGING_LEVEL, LOGGING_FORMAT).
"""

import logging

from prwatch.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant. Unknown names get DEFAULT_LEVEL."""
    return LEVELS.get(level.upper().strip(), LEVELS[DEFAULT_LEVEL])


class PrwatchLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
