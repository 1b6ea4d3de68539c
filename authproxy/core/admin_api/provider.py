"""Shared provider configuration handed to every reconciler."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import requests

from ..validators import normalize_endpoint
from .client import REQUEST_TIMEOUT, AuthProxyClient
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from authproxy.config.settings import ProviderSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharedConfig:
    """Endpoint, credentials and transport handle.

    Built once at setup and shared by reference across reconcilers and
    threads. Nothing in it changes after construction.
    """

    endpoint: str
    username: str
    password: str = field(repr=False)
    client: AuthProxyClient = field(repr=False, compare=False)

    @classmethod
    def from_settings(cls, settings: "ProviderSettings", session: Optional[requests.Session] = None) -> "SharedConfig":
        return configure_provider(
            settings.endpoint,
            settings.username,
            settings.password,
            timeout=settings.request_timeout,
            session=session,
        )


def configure_provider(
    endpoint: str,
    username: str,
    password: str,
    *,
    timeout: float = REQUEST_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> SharedConfig:
    """Validate provider settings and build the shared configuration.

    Every problem is collected before raising so a misconfigured provider is
    reported in one go.

    Raises:
        ConfigurationError: If any setting is missing or invalid
    """
    errors: List[str] = []

    normalized = ""
    if not endpoint:
        errors.append("endpoint is required")
    else:
        try:
            normalized = normalize_endpoint(endpoint)
        except ValueError as exc:
            errors.append(str(exc))

    if not username:
        errors.append("username is required")
    if not password:
        errors.append("password is required")
    if timeout <= 0:
        errors.append(f"request timeout must be positive: {timeout}")

    if errors:
        raise ConfigurationError("Provider configuration failed:\n  - " + "\n  - ".join(errors))

    client = AuthProxyClient(normalized, username, password, timeout=timeout, session=session)
    logger.info("Configured AuthProxy provider", extra={"endpoint": normalized, "username": username})
    return SharedConfig(endpoint=normalized, username=username, password=password, client=client)
