"""Tracing provider assembly.

This module provides a TracingProvider class that builds one OpenTelemetry
TracerProvider and attaches a span processor for every configured backend.
"""

import logging
from typing import Iterable, List, Optional

from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import Tracer

from tracewire.observability.config import TracingConfig
from tracewire.observability.tracing.backends import (
    SIMPLE,
    Configured,
    ResolvedBackend,
)
from tracewire.observability.tracing.resolver import configured_backends

logger = logging.getLogger(__name__)

TRACER_NAME = "tracewire"


class TracingProvider:
    """Trace provider shared by every configured backend.

    Every span is sampled. Each ``Configured`` backend gets its own span
    processor; ``Unconfigured`` results are ignored. With no configured
    backend the provider still creates spans, they are just not exported.

    Example:
        >>> from tracewire.observability.config import TracingConfig
        >>> from tracewire.observability.tracing.resolver import resolve_backends
        >>> config = TracingConfig.from_env()
        >>> provider = TracingProvider(config, resolve_backends(config.settings))
        >>> provider.start()
        >>> with provider.tracer.start_as_current_span("work"):
        ...     pass
        >>> provider.shutdown()
    """

    def __init__(
        self, config: TracingConfig, backends: Iterable[ResolvedBackend] = ()
    ) -> None:
        """Initialize tracing provider.

        Args:
            config: Tracing configuration.
            backends: Resolution results; only configured ones are attached.
        """
        self.config = config
        self._backends: List[Configured] = configured_backends(backends)
        self._tracer_provider: Optional[TracerProvider] = None
        self._tracer: Optional[Tracer] = None
        self._span_processors: List[SpanProcessor] = []
        self._running = False

    def start(self) -> None:
        """Build the TracerProvider and attach the backend span processors."""
        if self._running:
            logger.warning("TracingProvider already running")
            return

        self._tracer_provider = TracerProvider(
            sampler=ALWAYS_ON,
            resource=self._create_resource(),
        )

        for backend in self._backends:
            processor = self._create_span_processor(backend)
            self._tracer_provider.add_span_processor(processor)
            self._span_processors.append(processor)

        if not self._span_processors:
            logger.debug("No trace backend configured, spans will not be exported")

        self._tracer = self._tracer_provider.get_tracer(
            TRACER_NAME, self.config.service_version
        )
        self._running = True

    def shutdown(self) -> None:
        """Flush pending spans and shut down every attached exporter."""
        if not self._running:
            return

        logger.debug("Shutting down tracing provider")

        if self._tracer_provider:
            try:
                self._tracer_provider.shutdown()
            except Exception as e:
                logger.error(f"Error shutting down tracer provider: {e}")

        self._running = False

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Export all pending spans.

        Returns:
            True if every processor flushed within the timeout.
        """
        if not self._running or not self._tracer_provider:
            return True
        return self._tracer_provider.force_flush(timeout_millis)

    def _create_resource(self) -> Resource:
        """Create resource carrying the service identity.

        ``service.name`` is set to the configured value even when it is
        empty, overriding the SDK's ``unknown_service`` default.
        """
        resource = Resource.create({SERVICE_VERSION: self.config.service_version})
        return resource.merge(Resource({SERVICE_NAME: self.config.service_name}))

    def _create_span_processor(self, backend: Configured) -> SpanProcessor:
        if backend.processor == SIMPLE:
            return SimpleSpanProcessor(backend.exporter)
        return BatchSpanProcessor(
            backend.exporter,
            max_queue_size=self.config.max_queue_size,
            schedule_delay_millis=self.config.schedule_delay_millis,
            max_export_batch_size=self.config.max_export_batch_size,
        )

    @property
    def tracer_provider(self) -> TracerProvider:
        """Get the underlying OpenTelemetry TracerProvider.

        Raises:
            RuntimeError: If provider not started.
        """
        if not self._running or not self._tracer_provider:
            raise RuntimeError("TracingProvider not started")
        return self._tracer_provider

    @property
    def tracer(self) -> Tracer:
        """Get the default tracer.

        Raises:
            RuntimeError: If provider not started.
        """
        if not self._running or not self._tracer:
            raise RuntimeError("TracingProvider not started")
        return self._tracer

    def get_tracer(self, name: str, version: Optional[str] = None) -> Tracer:
        """Get a named tracer from this provider."""
        return self.tracer_provider.get_tracer(name, version)

    @property
    def backend_names(self) -> List[str]:
        """Names of the backends spans are exported to."""
        return [backend.name for backend in self._backends]

    @property
    def exporters(self) -> List[SpanExporter]:
        """Exporters attached to this provider, one per configured backend."""
        return [backend.exporter for backend in self._backends]

    @property
    def span_processors(self) -> List[SpanProcessor]:
        return list(self._span_processors)

    @property
    def is_running(self) -> bool:
        return self._running
