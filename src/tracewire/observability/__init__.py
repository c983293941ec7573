"""Observability package for tracewire.

This package wires the process's distributed tracing:
- Resolution of trace backends (Honeycomb, Jaeger, console) from the environment
- One shared OpenTelemetry provider sampling every span
- W3C trace context and baggage propagation
- Diagnostic logging to standard error

Example:
    >>> from tracewire.observability import initialize_tracing, shutdown_tracing
    >>>
    >>> # HONEYCOMB_API_KEY / JAEGER_LOCATION / SERVICE_NAME read from the environment
    >>> provider = initialize_tracing()
    >>>
    >>> from opentelemetry import trace
    >>> with trace.get_tracer(__name__).start_as_current_span("handle_request"):
    ...     pass
    >>>
    >>> shutdown_tracing()
"""

from tracewire.observability.config import (
    LoggingConfig,
    ObservabilityConfig,
    TracingConfig,
)
from tracewire.observability.manager import (
    TracingManager,
    get_tracing,
    initialize_tracing,
    shutdown_tracing,
)

__all__ = [
    "LoggingConfig",
    "ObservabilityConfig",
    "TracingConfig",
    "TracingManager",
    "get_tracing",
    "initialize_tracing",
    "shutdown_tracing",
]
