"""Exceptions raised while wiring trace backends.

Backend problems are normally contained at the resolution boundary: the
exception is built, logged and turned into an ``Unconfigured`` result. Only
``FatalStartupFailure`` is ever raised out of backend resolution.
"""

from typing import Sequence


class TracingError(Exception):
    """Base exception for tracing setup errors."""


class BackendError(TracingError):
    """Error tied to a single named backend."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(message)
        self.backend = backend


class MissingConfiguration(BackendError):
    """A required setting for a backend is absent or empty."""

    def __init__(self, backend: str, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            backend, f"missing required setting(s): {', '.join(self.missing)}"
        )


class ClientConstructionFailure(BackendError):
    """The backend's export client could not be constructed."""

    def __init__(self, backend: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            backend, f"export client construction failed: {type(cause).__name__}: {cause}"
        )


class FatalStartupFailure(BackendError):
    """A backend whose construction must succeed for startup to continue failed."""

    def __init__(self, backend: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(backend, f"{backend} is required but failed to start: {cause}")
