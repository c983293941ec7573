"""Log formatters with trace context.

Diagnostics default to the human-readable :class:`TextFormatter`;
:class:`StructuredFormatter` emits one JSON object per line for log shippers.
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from opentelemetry import trace


def current_trace_context() -> Optional[Dict[str, str]]:
    """Return trace_id and span_id of the active span, if any."""
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return {
        "trace_id": format(ctx.trace_id, "032x"),
        "span_id": format(ctx.span_id, "016x"),
    }


class StructuredFormatter(logging.Formatter):
    """JSON log formatter with structured output and trace context.

    Example output:
        {
            "timestamp": "2024-01-15T10:30:45.123456+00:00",
            "level": "INFO",
            "logger": "tracewire.observability.tracing.resolver",
            "message": "Sending to Jaeger at collector.local:4317 ...",
            "trace_id": "abc123...",
            "span_id": "def456..."
        }
    """

    # LogRecord attributes that are not user-supplied extras
    STANDARD_FIELDS = {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }

    def __init__(
        self,
        include_trace_context: bool = True,
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize the structured formatter.

        Args:
            include_trace_context: Include trace_id and span_id of the active span.
            extra_fields: Static fields to include in every log entry.
        """
        super().__init__()
        self.include_trace_context = include_trace_context
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(timespec="microseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_trace_context:
            entry.update(current_trace_context() or {})

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb)
                if exc_tb
                else None,
            }

        entry.update(self.extra_fields)

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_FIELDS and not key.startswith("_"):
                entry[key] = value

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter with optional trace context.

    Produces log entries such as:
        2024-01-15T10:30:45.123Z INFO     [tracewire.observability.manager] Sending as service name checkout
    """

    def __init__(self, include_trace_context: bool = True) -> None:
        super().__init__()
        self.include_trace_context = include_trace_context

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

        parts = [timestamp, record.levelname.ljust(8), f"[{record.name}]"]

        if self.include_trace_context:
            ctx = current_trace_context()
            if ctx:
                parts.append(f"[trace={ctx['trace_id'][:16]}]")

        parts.append(record.getMessage())
        result = " ".join(parts)

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result
