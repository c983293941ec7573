"""Process-wide tracer provider and propagator registration.

OpenTelemetry keeps the tracer provider and the text map propagator as
module-level globals read by every ``trace.get_tracer()`` and
``propagate.inject()`` call site. This module is their only writer and is
called at startup by :class:`~tracewire.observability.manager.TracingManager`.

The OpenTelemetry API accepts a global tracer provider only once per process.
The global is therefore a :class:`DelegatingTracerProvider`, registered once;
installing a provider swaps its delegate, so a second initialization fully
supersedes the first, including tracers handed out before it.
"""

import logging
import threading
from typing import Any, Optional

from opentelemetry import trace as otel_trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

logger = logging.getLogger(__name__)


class DelegatingTracerProvider(otel_trace.TracerProvider):
    """Tracer provider forwarding to a replaceable delegate.

    Until a delegate is set, tracers are no-ops.
    """

    def __init__(self) -> None:
        self._delegate: otel_trace.TracerProvider = otel_trace.NoOpTracerProvider()
        self._lock = threading.Lock()

    @property
    def delegate(self) -> otel_trace.TracerProvider:
        return self._delegate

    def set_delegate(self, tracer_provider: otel_trace.TracerProvider) -> None:
        with self._lock:
            self._delegate = tracer_provider

    def get_tracer(
        self, instrumenting_module_name: str, *args: Any, **kwargs: Any
    ) -> otel_trace.Tracer:
        return _DelegatingTracer(self, instrumenting_module_name, args, kwargs)


class _DelegatingTracer(otel_trace.Tracer):
    """Tracer resolving the provider's current delegate on every span."""

    def __init__(
        self,
        provider: DelegatingTracerProvider,
        name: str,
        args: tuple,
        kwargs: dict,
    ) -> None:
        self._provider = provider
        self._name = name
        self._args = args
        self._kwargs = kwargs
        self._delegate: Optional[otel_trace.TracerProvider] = None
        self._tracer: Optional[otel_trace.Tracer] = None

    def _current(self) -> otel_trace.Tracer:
        delegate = self._provider.delegate
        if self._tracer is None or delegate is not self._delegate:
            self._tracer = delegate.get_tracer(self._name, *self._args, **self._kwargs)
            self._delegate = delegate
        return self._tracer

    def start_span(self, *args: Any, **kwargs: Any) -> otel_trace.Span:
        return self._current().start_span(*args, **kwargs)

    def start_as_current_span(self, *args: Any, **kwargs: Any) -> Any:
        return self._current().start_as_current_span(*args, **kwargs)


GLOBAL_TRACER_PROVIDER = DelegatingTracerProvider()


def build_propagator() -> CompositePropagator:
    """W3C trace context and W3C baggage, both always active."""
    return CompositePropagator(
        [TraceContextTextMapPropagator(), W3CBaggagePropagator()]
    )


def install_propagator() -> CompositePropagator:
    """Install the composite propagator as the global text map propagator."""
    propagator = build_propagator()
    set_global_textmap(propagator)
    return propagator


def install_tracer_provider(
    tracer_provider: otel_trace.TracerProvider,
) -> DelegatingTracerProvider:
    """Route the global tracer provider to ``tracer_provider``.

    Replaces any provider installed earlier through this function.

    Returns:
        The registered global provider.
    """
    if GLOBAL_TRACER_PROVIDER.delegate is tracer_provider:
        return GLOBAL_TRACER_PROVIDER
    if not isinstance(GLOBAL_TRACER_PROVIDER.delegate, otel_trace.NoOpTracerProvider):
        logger.info("Replacing previously installed tracer provider")
    GLOBAL_TRACER_PROVIDER.set_delegate(tracer_provider)

    if otel_trace.get_tracer_provider() is not GLOBAL_TRACER_PROVIDER:
        otel_trace.set_tracer_provider(GLOBAL_TRACER_PROVIDER)
        if otel_trace.get_tracer_provider() is not GLOBAL_TRACER_PROVIDER:
            logger.warning(
                "A global tracer provider was already set elsewhere; "
                "spans from trace.get_tracer() will not reach configured backends"
            )
    return GLOBAL_TRACER_PROVIDER
