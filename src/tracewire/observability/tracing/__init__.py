"""Tracing module for wiring OpenTelemetry trace backends.

Backends are resolved from environment settings, attached to one shared
provider, and installed together with W3C trace context and baggage
propagation.
"""

from tracewire.observability.tracing.backends import (
    BACKEND_PROFILES,
    BackendProfile,
    Configured,
    Unconfigured,
)
from tracewire.observability.tracing.propagation import (
    install_propagator,
    install_tracer_provider,
)
from tracewire.observability.tracing.provider import TracingProvider
from tracewire.observability.tracing.resolver import resolve_backend, resolve_backends

__all__ = [
    "BACKEND_PROFILES",
    "BackendProfile",
    "Configured",
    "TracingProvider",
    "Unconfigured",
    "install_propagator",
    "install_tracer_provider",
    "resolve_backend",
    "resolve_backends",
]
