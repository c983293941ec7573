"""Logger manager for diagnostic output.

This module provides a LoggerManager class that routes every ``tracewire``
logger to standard error (or a file) with the configured format and level.
"""

import logging
import sys
from typing import Optional

from tracewire.observability.config import LoggingConfig
from tracewire.observability.logging.structured import StructuredFormatter, TextFormatter

ROOT_LOGGER_NAME = "tracewire"
# Backend resolution and service name lines, emitted at INFO whatever the level
DIAGNOSTICS_LOGGER_NAME = f"{ROOT_LOGGER_NAME}.diagnostics"


class LoggerManager:
    """Manager for the ``tracewire`` logger hierarchy.

    Example:
        >>> from tracewire.observability.config import LoggingConfig
        >>> manager = LoggerManager(LoggingConfig(level="DEBUG", format="json"))
        >>> manager.configure()
        >>> manager.get_logger("tracing").info("Hello")
    """

    def __init__(self, config: LoggingConfig) -> None:
        self.config = config
        self._handler: Optional[logging.Handler] = None
        self._formatter: Optional[logging.Formatter] = None
        self._configured = False

    def configure(self) -> None:
        """Attach the handler and level to the ``tracewire`` logger.

        Should be called once during application startup.
        """
        if self._configured:
            return

        if self.config.format == "json":
            self._formatter = StructuredFormatter(
                include_trace_context=self.config.trace_correlation,
            )
        else:
            self._formatter = TextFormatter(
                include_trace_context=self.config.trace_correlation,
            )

        if self.config.output_file:
            self._handler = logging.FileHandler(self.config.output_file)
        else:
            self._handler = logging.StreamHandler(sys.stderr)

        self._handler.setFormatter(self._formatter)

        level = self._parse_level(self.config.level)
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(level)
        root_logger.addHandler(self._handler)
        logging.getLogger(DIAGNOSTICS_LOGGER_NAME).setLevel(min(level, logging.INFO))

        # Prevent propagation to Python's root logger
        root_logger.propagate = False

        self._configured = True

    def shutdown(self) -> None:
        """Remove the handler and restore propagation."""
        if not self._configured:
            return

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if self._handler:
            root_logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None

        root_logger.propagate = True
        logging.getLogger(DIAGNOSTICS_LOGGER_NAME).setLevel(logging.NOTSET)
        self._configured = False

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger below the ``tracewire`` hierarchy."""
        return get_logger(name)

    def set_level(self, level: str) -> None:
        parsed = self._parse_level(level)
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(parsed)
        logging.getLogger(DIAGNOSTICS_LOGGER_NAME).setLevel(min(parsed, logging.INFO))

    @property
    def is_configured(self) -> bool:
        return self._configured

    @property
    def handler(self) -> Optional[logging.Handler]:
        return self._handler

    def _parse_level(self, level: str) -> int:
        return getattr(logging, level.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Convenience function to get a logger.

    Args:
        name: Component name, prefixed with ``tracewire.`` if not already.

    Example:
        >>> from tracewire.observability.logging import get_logger
        >>> logger = get_logger("my_module")
        >>> logger.info("Hello world")
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
