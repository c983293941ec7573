"""Distributed tracing bootstrap for OpenTelemetry."""

__version__ = "0.1.0"
