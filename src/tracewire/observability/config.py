"""Observability configuration module.

This module provides configuration for tracing and diagnostic logging.
"""

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence

if TYPE_CHECKING:
    from tracewire.observability.tracing.backends import BackendProfile

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("json", "text")


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing."""

    service_name: str = ""
    service_version: str = "0.0.0"
    # Backend settings, keyed by environment variable name
    settings: Dict[str, str] = field(default_factory=dict)
    max_queue_size: int = 2048
    schedule_delay_millis: int = 5000
    max_export_batch_size: int = 512

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        profiles: Optional[Sequence["BackendProfile"]] = None,
    ) -> "TracingConfig":
        """Create configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            profiles: Backend profiles whose settings are collected; defaults
                to the shipped profile table.
        """
        from tracewire.observability.tracing.backends import (
            BACKEND_PROFILES,
            required_setting_keys,
        )

        profiles = BACKEND_PROFILES if profiles is None else profiles

        environ = os.environ if environ is None else environ
        return cls(
            service_name=environ.get("SERVICE_NAME", ""),
            service_version=environ.get("SERVICE_VERSION", "0.0.0"),
            settings={
                key: environ[key] for key in required_setting_keys(tuple(profiles))
                if key in environ
            },
        )


@dataclass
class LoggingConfig:
    """Configuration for diagnostic logging."""

    level: str = "INFO"
    format: str = "text"  # or "json"
    trace_correlation: bool = True
    output_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LoggingConfig":
        """Create configuration from environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            level=environ.get("TRACING_LOG_LEVEL", "INFO").upper(),
            format=environ.get("TRACING_LOG_FORMAT", "text").lower(),
            trace_correlation=environ.get("TRACING_LOG_TRACE_CORRELATION", "true").lower()
            == "true",
            output_file=environ.get("TRACING_LOG_FILE"),
        )


@dataclass
class ObservabilityConfig:
    """Complete tracing bootstrap configuration.

    Example:
        >>> # Create from environment variables
        >>> config = ObservabilityConfig.from_env()
        >>>
        >>> # Create programmatically
        >>> config = ObservabilityConfig(
        ...     tracing=TracingConfig(
        ...         service_name="checkout",
        ...         settings={"JAEGER_LOCATION": "collector.local"},
        ...     ),
        ...     logging=LoggingConfig(level="DEBUG"),
        ... )
    """

    tracing: TracingConfig = field(default_factory=TracingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        profiles: Optional[Sequence["BackendProfile"]] = None,
    ) -> "ObservabilityConfig":
        """Create complete configuration from environment variables.

        All variables are optional; an absent backend setting simply leaves
        that backend unconfigured.

        Environment Variables:
            Tracing:
                SERVICE_NAME: service.name resource attribute (default: empty)
                SERVICE_VERSION: service.version resource attribute (default: 0.0.0)
                HONEYCOMB_API_KEY: Enables Honeycomb export
                JAEGER_LOCATION: Enables export to a collector at <value>:4317
                TRACE_CONSOLE: Enables printing spans to stdout

            Logging:
                TRACING_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
                TRACING_LOG_FORMAT: text or json (default: text)
                TRACING_LOG_TRACE_CORRELATION: Include trace IDs (default: true)
                TRACING_LOG_FILE: Log file path (optional, defaults to stderr)

        Args:
            environ: Mapping to read instead of ``os.environ``.
            profiles: Backend profiles whose settings are collected.

        Returns:
            ObservabilityConfig with all sub-configurations.
        """
        return cls(
            tracing=TracingConfig.from_env(environ, profiles),
            logging=LoggingConfig.from_env(environ),
        )

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If configuration is invalid.
        """
        # Validate tracing
        if self.tracing.max_queue_size < 1:
            raise ValueError(f"Invalid max queue size: {self.tracing.max_queue_size}")
        if self.tracing.max_export_batch_size < 1:
            raise ValueError(
                f"Invalid max export batch size: {self.tracing.max_export_batch_size}"
            )
        if self.tracing.max_export_batch_size > self.tracing.max_queue_size:
            raise ValueError(
                "Max export batch size must not exceed max queue size: "
                f"{self.tracing.max_export_batch_size} > {self.tracing.max_queue_size}"
            )
        if self.tracing.schedule_delay_millis < 0:
            raise ValueError(
                f"Schedule delay must be >= 0: {self.tracing.schedule_delay_millis}"
            )

        # Validate logging
        if self.logging.level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.logging.level}. Must be one of {VALID_LOG_LEVELS}"
            )
        if self.logging.format not in VALID_LOG_FORMATS:
            raise ValueError(
                f"Invalid log format: {self.logging.format}. Must be 'json' or 'text'"
            )

    def apply_logging_defaults(self) -> List[str]:
        """Replace invalid logging values with their defaults.

        Used for configuration read from the environment, where any value is
        accepted and startup must not fail.

        Returns:
            One message per replaced value, for logging once output is set up.
        """
        defaults = LoggingConfig()
        replaced = []
        if self.logging.level not in VALID_LOG_LEVELS:
            replaced.append(
                f"Invalid log level {self.logging.level!r}, using {defaults.level}"
            )
            self.logging.level = defaults.level
        if self.logging.format not in VALID_LOG_FORMATS:
            replaced.append(
                f"Invalid log format {self.logging.format!r}, using {defaults.format}"
            )
            self.logging.format = defaults.format
        return replaced
