"""Backend resolution.

Evaluates backend profiles against a settings mapping (normally the process
environment) and produces one ``Configured`` or ``Unconfigured`` result per
profile. Every attempt writes exactly one diagnostic line.
"""

import logging
from typing import Dict, Iterable, List, Mapping

from tracewire.observability.errors import (
    ClientConstructionFailure,
    FatalStartupFailure,
    MissingConfiguration,
)
from tracewire.observability.logging.manager import DIAGNOSTICS_LOGGER_NAME
from tracewire.observability.tracing.backends import (
    BACKEND_PROFILES,
    BackendProfile,
    Configured,
    ResolvedBackend,
    Unconfigured,
)

logger = logging.getLogger(DIAGNOSTICS_LOGGER_NAME)


def mask_secret(value: str) -> str:
    """Mask a secret, keeping its first four characters."""
    if len(value) <= 4:
        return "*" * len(value)
    return value[:4] + "*" * (len(value) - 4)


def _describe_settings(profile: BackendProfile, settings: Mapping[str, str]) -> str:
    parts = []
    for key in profile.required_settings:
        value = settings[key]
        if key in profile.secret_settings:
            value = mask_secret(value)
        parts.append(f"{key}=<{value}>")
    return ", ".join(parts)


def resolve_backend(
    profile: BackendProfile, environ: Mapping[str, str]
) -> ResolvedBackend:
    """Resolve a single backend profile.

    Args:
        profile: Backend descriptor.
        environ: Settings mapping, queried only for the profile's keys.

    Returns:
        ``Configured`` with the built exporter, or ``Unconfigured`` with the
        reason the backend was skipped.

    Raises:
        FatalStartupFailure: If construction failed for a profile marked fatal.
    """
    missing = [key for key in profile.required_settings if not environ.get(key)]
    if missing:
        error = MissingConfiguration(profile.name, missing)
        logger.info(f"Not sending to {profile.name}: {error}")
        return Unconfigured(profile.name, str(error))

    settings: Dict[str, str] = {key: environ[key] for key in profile.required_settings}

    try:
        endpoint = profile.endpoint(settings)
        exporter = profile.exporter(endpoint, profile.insecure, profile.headers(settings))
    except Exception as e:
        if profile.fatal:
            logger.error(f"Failed to configure required backend {profile.name}: {e}")
            raise FatalStartupFailure(profile.name, e) from e
        error = ClientConstructionFailure(profile.name, e)
        logger.warning(f"Not sending to {profile.name}: {error}")
        return Unconfigured(profile.name, str(error))

    logger.info(
        f"Sending to {profile.name} at {endpoint} "
        f"({'insecure' if profile.insecure else 'TLS'}) with "
        f"{_describe_settings(profile, settings)}"
    )
    return Configured(
        profile.name, exporter, processor=profile.processor, endpoint=endpoint
    )


def resolve_backends(
    environ: Mapping[str, str],
    profiles: Iterable[BackendProfile] = BACKEND_PROFILES,
) -> List[ResolvedBackend]:
    """Resolve every profile in order; one backend never stops the others."""
    return [resolve_backend(profile, environ) for profile in profiles]


def configured_backends(resolved: Iterable[ResolvedBackend]) -> List[Configured]:
    """Keep only the backends that resolved as configured."""
    return [backend for backend in resolved if isinstance(backend, Configured)]
