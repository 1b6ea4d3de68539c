"""Input validation helpers for endpoints and entity keys."""
from __future__ import annotations

from urllib.parse import quote, urlparse


def normalize_endpoint(raw: str) -> str:
    """Normalize and validate the AuthProxy endpoint.

    Args:
        raw: Raw endpoint URL (e.g. "https://authproxy.internal/api/")

    Returns:
        Endpoint without trailing slash

    Raises:
        ValueError: If endpoint is not an absolute http(s) URL
    """
    endpoint = raw.strip()
    parsed = urlparse(endpoint)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"Endpoint must use http or https: {raw!r}")
    if not parsed.netloc:
        raise ValueError(f"Endpoint must include a host: {raw!r}")
    if parsed.query or parsed.fragment:
        raise ValueError(f"Endpoint must not carry a query or fragment: {raw!r}")
    return endpoint.rstrip("/")


def path_segment(value: str, field: str) -> str:
    """Validate an entity key and encode it for use as a URL path segment.

    Args:
        value: Key value (tenant name, role name)
        field: Field name for error messages (e.g., "Tenant name")

    Returns:
        Percent-encoded segment

    Raises:
        ValueError: If the key is empty
    """
    if not value or not value.strip():
        raise ValueError(f"{field} is required")
    return quote(value, safe="")
