"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from authproxy.core.admin_api.client import REQUEST_TIMEOUT
from authproxy.core.admin_api.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SECRETS_DIR = "/run/secrets"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path(SECRETS_DIR) / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from %s", secret_name, SECRETS_DIR)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read %s/%s: %s", SECRETS_DIR, secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info("Loaded %s from environment (fallback)", env_var)
            return secret_value

    return None


@dataclass
class ProviderSettings:
    """Values needed to configure the AuthProxy provider."""
    endpoint: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    request_timeout: float = REQUEST_TIMEOUT

    @property
    def is_complete(self) -> bool:
        return bool(self.endpoint and self.username and self.password)


_SETTING_NAMES = frozenset(f.name for f in fields(ProviderSettings))

def _get_timeout(var_name: str, default: float) -> float:
    value = os.environ.get(var_name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{var_name} must be a number: {value}") from e


def load_settings(overrides: Optional[dict] = None) -> ProviderSettings:
    """Load provider settings from environment and /run/secrets.

    Environment Variables:
        AUTHPROXY_ENDPOINT: Base URL of the AuthProxy administration API
        AUTHPROXY_USERNAME: Admin username
        AUTHPROXY_PASSWORD: Admin password (``/run/secrets/authproxy_password`` wins)
        AUTHPROXY_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 5)

    Args:
        overrides: Explicit values (e.g. from CLI flags); None entries are ignored

    Raises:
        ConfigurationError: If a numeric setting cannot be parsed
    """
    password = _load_secret_from_file("authproxy_password", "AUTHPROXY_PASSWORD") or ""

    settings = ProviderSettings(
        endpoint=os.environ.get("AUTHPROXY_ENDPOINT", ""),
        username=os.environ.get("AUTHPROXY_USERNAME", ""),
        password=password,
        request_timeout=_get_timeout("AUTHPROXY_REQUEST_TIMEOUT", REQUEST_TIMEOUT),
    )

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key not in _SETTING_NAMES:
            raise ConfigurationError(f"Unknown setting: {key}")
        setattr(settings, key, value)

    logger.info("Settings loaded; endpoint=%s; username=%s", settings.endpoint or "<unset>", settings.username or "<unset>")
    return settings
