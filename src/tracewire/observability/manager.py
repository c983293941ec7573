"""Tracing manager for process-wide tracing setup.

This module provides a singleton manager that owns the installed tracing
provider. Lifecycle of the process-wide state:

1. ``initialize()`` runs once at startup, before any span is created. It
   resolves backends, assembles the provider and installs it, together with
   the propagator, as the OpenTelemetry globals.
2. Application code reads the globals implicitly through
   ``opentelemetry.trace.get_tracer()`` and ``opentelemetry.propagate``.
3. ``shutdown()`` runs once at exit and flushes every exporter.

The manager is the single writer of that state. Calling ``initialize()``
again replaces the installed provider, it never merges backends.
"""

import logging
import os
import threading
from typing import List, Mapping, Optional

from tracewire.observability.config import ObservabilityConfig
from tracewire.observability.logging.manager import DIAGNOSTICS_LOGGER_NAME, LoggerManager
from tracewire.observability.tracing.backends import (
    BACKEND_PROFILES,
    BackendProfile,
    ResolvedBackend,
)
from tracewire.observability.tracing.propagation import (
    install_propagator,
    install_tracer_provider,
)
from tracewire.observability.tracing.provider import TracingProvider
from tracewire.observability.tracing.resolver import resolve_backends

# Singleton instance
_tracing_manager: Optional["TracingManager"] = None
_lock = threading.Lock()

logger = logging.getLogger(__name__)
diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER_NAME)


class TracingManager:
    """Singleton owner of the process-wide tracing provider.

    Example:
        >>> tracing = get_tracing()
        >>> provider = tracing.initialize()
        >>> tracer = provider.tracer
        >>> # ... at exit
        >>> tracing.shutdown()
    """

    def __init__(self, profiles: Optional[List[BackendProfile]] = None) -> None:
        self._profiles = list(BACKEND_PROFILES if profiles is None else profiles)
        self._config: Optional[ObservabilityConfig] = None
        self._provider: Optional[TracingProvider] = None
        self._logger_manager: Optional[LoggerManager] = None
        self._resolved: List[ResolvedBackend] = []
        self._initialized = False

    def initialize(
        self,
        config: Optional[ObservabilityConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> TracingProvider:
        """Resolve backends, assemble the provider and install it globally.

        Args:
            config: Configuration. If None, loads from ``environ``.
            environ: Mapping read when no config is given; defaults to
                ``os.environ``.

        Returns:
            The installed TracingProvider.

        Raises:
            ValueError: If configuration is invalid.
            FatalStartupFailure: If a backend marked fatal failed to start.
        """
        replaced: List[str] = []
        if config is None:
            config = ObservabilityConfig.from_env(
                os.environ if environ is None else environ, self._profiles
            )
            replaced = config.apply_logging_defaults()
        config.validate()

        if self._initialized:
            logger.warning("TracingManager already initialized, replacing provider")

        self._initialize_logging(config)
        for message in replaced:
            logger.warning(message)

        diagnostics.info(f"Sending as service name {config.tracing.service_name}")

        try:
            resolved = resolve_backends(config.tracing.settings, self._profiles)
            provider = TracingProvider(config.tracing, resolved)
            provider.start()
        except Exception:
            # A live previous provider keeps its logging
            if not self._initialized:
                self._shutdown_logging()
            raise

        previous = self._provider if self._initialized else None

        install_tracer_provider(provider.tracer_provider)
        install_propagator()

        self._config = config
        self._resolved = resolved
        self._provider = provider
        self._initialized = True

        if previous is not None:
            try:
                previous.shutdown()
            except Exception as e:
                logger.error(f"Error shutting down replaced provider: {e}")

        logger.debug(
            f"Tracing installed with backends: {', '.join(provider.backend_names) or 'none'}"
        )
        return provider

    def shutdown(self) -> None:
        """Flush and shut down the installed provider."""
        if not self._initialized:
            return

        if self._provider:
            try:
                self._provider.shutdown()
            except Exception as e:
                logger.error(f"Error shutting down tracing: {e}")

        # Shutdown logging last so errors above are still reported
        self._shutdown_logging()

        self._initialized = False

    def _initialize_logging(self, config: ObservabilityConfig) -> None:
        if self._logger_manager and self._logger_manager.is_configured:
            if self._logger_manager.config == config.logging:
                return
            self._logger_manager.shutdown()
        self._logger_manager = LoggerManager(config.logging)
        self._logger_manager.configure()

    def _shutdown_logging(self) -> None:
        if self._logger_manager:
            self._logger_manager.shutdown()

    @property
    def config(self) -> ObservabilityConfig:
        """Get current configuration.

        Raises:
            RuntimeError: If not initialized.
        """
        if not self._initialized or not self._config:
            raise RuntimeError("TracingManager not initialized")
        return self._config

    @property
    def provider(self) -> TracingProvider:
        """Get the installed tracing provider.

        Raises:
            RuntimeError: If not initialized.
        """
        if not self._initialized or not self._provider:
            raise RuntimeError("TracingManager not initialized")
        return self._provider

    @property
    def resolved_backends(self) -> List[ResolvedBackend]:
        """Resolution results of the last initialization."""
        return list(self._resolved)

    @property
    def is_initialized(self) -> bool:
        return self._initialized


def get_tracing() -> TracingManager:
    """Get the singleton TracingManager instance."""
    global _tracing_manager

    if _tracing_manager is None:
        with _lock:
            if _tracing_manager is None:
                _tracing_manager = TracingManager()

    return _tracing_manager


def reset_tracing() -> None:
    """Reset the singleton instance (mainly for testing).

    Warning:
        This should only be used in tests. In production code,
        use ``shutdown_tracing()`` instead.
    """
    global _tracing_manager

    with _lock:
        if _tracing_manager is not None:
            if _tracing_manager.is_initialized:
                _tracing_manager.shutdown()
        _tracing_manager = None


def initialize_tracing(
    config: Optional[ObservabilityConfig] = None,
) -> TracingProvider:
    """Configure tracing for this process from the environment.

    Example:
        >>> from tracewire.observability import initialize_tracing, shutdown_tracing
        >>> provider = initialize_tracing()
        >>> with provider.tracer.start_as_current_span("startup"):
        ...     pass
        >>> shutdown_tracing()
    """
    return get_tracing().initialize(config)


def shutdown_tracing() -> None:
    """Flush and shut down the process-wide tracing provider."""
    get_tracing().shutdown()
