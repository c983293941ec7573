"""Trace backend profiles.

Each supported backend is described by a :class:`BackendProfile`: which
environment settings it needs, how its endpoint and headers are derived from
those settings, the transport security mode, and the factory that builds its
span exporter. :mod:`tracewire.observability.tracing.resolver` evaluates the
profiles; adding a backend means adding an entry to ``BACKEND_PROFILES``.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from grpc import ssl_channel_credentials
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SpanExporter

HONEYCOMB_ENDPOINT = "api.honeycomb.io:443"
HONEYCOMB_TEAM_HEADER = "x-honeycomb-team"
JAEGER_OTLP_PORT = 4317

# Span processor kinds
BATCH = "batch"
SIMPLE = "simple"

Settings = Mapping[str, str]
ExporterFactory = Callable[[str, bool, Dict[str, str]], SpanExporter]


def otlp_grpc_exporter(
    endpoint: str, insecure: bool, headers: Dict[str, str]
) -> SpanExporter:
    """Build an OTLP gRPC span exporter.

    Secure exporters use TLS with the system root certificates.
    """
    if insecure:
        return OTLPSpanExporter(endpoint=endpoint, insecure=True, headers=headers)
    return OTLPSpanExporter(
        endpoint=endpoint,
        insecure=False,
        credentials=ssl_channel_credentials(),
        headers=headers,
    )


def console_exporter(
    endpoint: str, insecure: bool, headers: Dict[str, str]
) -> SpanExporter:
    """Build an exporter printing finished spans to stdout."""
    return ConsoleSpanExporter()


def _no_headers(settings: Settings) -> Dict[str, str]:
    return {}


@dataclass(frozen=True)
class BackendProfile:
    """Static descriptor of a trace backend.

    Attributes:
        name: Human-readable backend name used in diagnostics.
        required_settings: Environment keys that must be present and non-empty.
        endpoint: Builds the export target from the resolved settings.
        insecure: Use a plaintext transport instead of TLS.
        headers: Builds per-request headers from the resolved settings.
        exporter: Factory called as ``exporter(endpoint, insecure, headers)``.
        processor: ``"batch"`` or ``"simple"`` span processing.
        secret_settings: Keys whose values are masked in diagnostics.
        fatal: Raise instead of skipping the backend when construction fails.
    """

    name: str
    required_settings: Tuple[str, ...]
    endpoint: Callable[[Settings], str]
    insecure: bool = False
    headers: Callable[[Settings], Dict[str, str]] = _no_headers
    exporter: ExporterFactory = otlp_grpc_exporter
    processor: str = BATCH
    secret_settings: Tuple[str, ...] = ()
    fatal: bool = False


@dataclass(frozen=True)
class Configured:
    """A backend whose exporter was built and should be attached."""

    name: str
    exporter: SpanExporter = field(repr=False)
    processor: str = BATCH
    endpoint: Optional[str] = None


@dataclass(frozen=True)
class Unconfigured:
    """A backend that was skipped, with the reason why."""

    name: str
    reason: str


ResolvedBackend = Union[Configured, Unconfigured]


HONEYCOMB = BackendProfile(
    name="Honeycomb",
    required_settings=("HONEYCOMB_API_KEY",),
    endpoint=lambda settings: HONEYCOMB_ENDPOINT,
    insecure=False,
    headers=lambda settings: {HONEYCOMB_TEAM_HEADER: settings["HONEYCOMB_API_KEY"]},
    secret_settings=("HONEYCOMB_API_KEY",),
)

JAEGER = BackendProfile(
    name="Jaeger",
    required_settings=("JAEGER_LOCATION",),
    endpoint=lambda settings: f"{settings['JAEGER_LOCATION']}:{JAEGER_OTLP_PORT}",
    insecure=True,
)

CONSOLE = BackendProfile(
    name="Console",
    required_settings=("TRACE_CONSOLE",),
    endpoint=lambda settings: "stdout",
    insecure=True,
    exporter=console_exporter,
    processor=SIMPLE,
)

BACKEND_PROFILES: Tuple[BackendProfile, ...] = (HONEYCOMB, JAEGER, CONSOLE)


def required_setting_keys(profiles: Tuple[BackendProfile, ...] = BACKEND_PROFILES) -> Tuple[str, ...]:
    """Return every environment key read by the given profiles, in order."""
    keys = []
    for profile in profiles:
        for key in profile.required_settings:
            if key not in keys:
                keys.append(key)
    return tuple(keys)
