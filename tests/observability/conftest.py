"""Pytest fixtures for tracing tests.

This module provides reusable fixtures for configurations, exporter mocks and
isolation of the OpenTelemetry globals between tests.
"""

from typing import Callable, Dict, Iterator
from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace
from opentelemetry.propagate import get_global_textmap, set_global_textmap
from opentelemetry.sdk.trace.export import SpanExporter
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)
from opentelemetry.util._once import Once

from tracewire.observability.config import (
    LoggingConfig,
    ObservabilityConfig,
    TracingConfig,
)
from tracewire.observability.manager import reset_tracing
from tracewire.observability.tracing.backends import (
    SIMPLE,
    BackendProfile,
    required_setting_keys,
)
from tracewire.observability.tracing.propagation import GLOBAL_TRACER_PROVIDER

ENV_KEYS = (
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "TRACING_LOG_LEVEL",
    "TRACING_LOG_FORMAT",
    "TRACING_LOG_TRACE_CORRELATION",
    "TRACING_LOG_FILE",
) + required_setting_keys()


def _reset_tracer_provider() -> None:
    trace._TRACER_PROVIDER_SET_ONCE = Once()
    trace._TRACER_PROVIDER = None
    GLOBAL_TRACER_PROVIDER.set_delegate(trace.NoOpTracerProvider())


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_tracing(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test with a clean environment and fresh OpenTelemetry globals."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    original_textmap = get_global_textmap()
    reset_tracing()
    _reset_tracer_provider()
    yield
    reset_tracing()
    _reset_tracer_provider()
    set_global_textmap(original_textmap)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def tracing_config() -> TracingConfig:
    """Create a tracing configuration without any backend."""
    return TracingConfig(
        service_name="tracewire-test",
        service_version="1.0.0-test",
        settings={},
        max_queue_size=64,
        schedule_delay_millis=100,
        max_export_batch_size=16,
    )


@pytest.fixture
def logging_config() -> LoggingConfig:
    return LoggingConfig(level="DEBUG", format="text", trace_correlation=True)


@pytest.fixture
def observability_config(
    tracing_config: TracingConfig, logging_config: LoggingConfig
) -> ObservabilityConfig:
    return ObservabilityConfig(tracing=tracing_config, logging=logging_config)


# =============================================================================
# Exporter Fixtures
# =============================================================================


def _fake_otlp_exporter(**kwargs) -> MagicMock:
    """Stand-in for OTLPSpanExporter; fails for endpoints or keys marked 'fail'."""
    if kwargs["endpoint"].startswith("fail"):
        raise ValueError(f"malformed endpoint {kwargs['endpoint']}")
    if any(value.startswith("fail") for value in kwargs.get("headers", {}).values()):
        raise ValueError("invalid credentials header")
    exporter = MagicMock(spec=SpanExporter)
    exporter.kwargs = kwargs
    return exporter


@pytest.fixture
def mock_otlp_exporter() -> Iterator[MagicMock]:
    """Patch the OTLP gRPC exporter class used by the backend profiles.

    Yields:
        The mock class; each call returns a distinct exporter mock whose
        ``kwargs`` attribute records the constructor arguments.
    """
    with patch(
        "tracewire.observability.tracing.backends.OTLPSpanExporter",
        side_effect=_fake_otlp_exporter,
    ) as mock_cls:
        yield mock_cls


@pytest.fixture
def memory_profile() -> Callable[[str], BackendProfile]:
    """Factory for profiles exporting synchronously into an InMemorySpanExporter.

    The profile requires ``<NAME>_ENABLED`` and exposes its exporter as
    ``memory_profile.exporters[name]``.
    """
    exporters: Dict[str, InMemorySpanExporter] = {}

    def factory(name: str) -> BackendProfile:
        exporter = InMemorySpanExporter()
        exporters[name] = exporter
        return BackendProfile(
            name=name,
            required_settings=(f"{name.upper()}_ENABLED",),
            endpoint=lambda settings: "memory",
            insecure=True,
            exporter=lambda endpoint, insecure, headers: exporter,
            processor=SIMPLE,
        )

    factory.exporters = exporters
    return factory
