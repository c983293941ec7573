"""Diagnostic logging for the tracing bootstrap."""

from tracewire.observability.logging.manager import LoggerManager, get_logger
from tracewire.observability.logging.structured import StructuredFormatter, TextFormatter

__all__ = ["LoggerManager", "StructuredFormatter", "TextFormatter", "get_logger"]
