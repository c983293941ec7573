"""Unit tests for global tracer provider and propagator installation."""

from opentelemetry import baggage, trace
from opentelemetry.context import attach, detach
from opentelemetry.propagate import extract, get_global_textmap, inject
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)

from tracewire.observability.tracing.propagation import (
    GLOBAL_TRACER_PROVIDER,
    build_propagator,
    install_propagator,
    install_tracer_provider,
)


class TestInstallTracerProvider:
    """Tests for the process-wide tracer provider."""

    def test_install(self):
        provider = TracerProvider()
        installed = install_tracer_provider(provider)

        assert installed is GLOBAL_TRACER_PROVIDER
        assert trace.get_tracer_provider() is GLOBAL_TRACER_PROVIDER
        assert GLOBAL_TRACER_PROVIDER.delegate is provider

    def test_second_install_replaces(self):
        first = TracerProvider()
        second = TracerProvider()

        install_tracer_provider(first)
        install_tracer_provider(second)

        assert trace.get_tracer_provider() is GLOBAL_TRACER_PROVIDER
        assert GLOBAL_TRACER_PROVIDER.delegate is second

    def test_install_same_provider_twice(self):
        provider = TracerProvider()
        install_tracer_provider(provider)
        install_tracer_provider(provider)
        assert GLOBAL_TRACER_PROVIDER.delegate is provider

    def test_tracer_from_before_replacement_follows_new_provider(self):
        first_exporter = InMemorySpanExporter()
        second_exporter = InMemorySpanExporter()
        first = TracerProvider()
        first.add_span_processor(SimpleSpanProcessor(first_exporter))
        second = TracerProvider()
        second.add_span_processor(SimpleSpanProcessor(second_exporter))

        install_tracer_provider(first)
        tracer = trace.get_tracer(__name__)
        with tracer.start_as_current_span("before"):
            pass

        install_tracer_provider(second)
        with tracer.start_as_current_span("after"):
            pass

        assert [s.name for s in first_exporter.get_finished_spans()] == ["before"]
        assert [s.name for s in second_exporter.get_finished_spans()] == ["after"]

    def test_tracer_before_install_is_noop(self):
        with trace.get_tracer(__name__).start_as_current_span("early") as span:
            assert span.is_recording() is False


class TestInstallPropagator:
    """Tests for the composite trace context and baggage propagator."""

    def test_build_fields(self):
        fields = build_propagator().fields
        assert {"traceparent", "tracestate", "baggage"} <= set(fields)

    def test_install(self):
        propagator = install_propagator()
        assert get_global_textmap() is propagator
        assert isinstance(propagator, CompositePropagator)

    def test_inject_trace_context_and_baggage(self):
        install_propagator()
        provider = TracerProvider()
        tracer = provider.get_tracer(__name__)

        token = attach(baggage.set_baggage("tenant", "acme"))
        try:
            with tracer.start_as_current_span("outgoing"):
                carrier = {}
                inject(carrier)
        finally:
            detach(token)
            provider.shutdown()

        assert carrier["traceparent"].startswith("00-")
        assert carrier["baggage"] == "tenant=acme"

    def test_extract_round_trip(self):
        install_propagator()
        carrier = {
            "traceparent": "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01",
            "baggage": "tenant=acme",
        }

        context = extract(carrier)

        span_context = trace.get_current_span(context).get_span_context()
        assert format(span_context.trace_id, "032x") == "4bf92f3577b34da6a3ce929d0e0e4736"
        assert baggage.get_baggage("tenant", context) == "acme"
