"""AuthProxy-specific exceptions for error handling."""
from __future__ import annotations

from typing import Optional


class AuthProxyError(Exception):
    """Base exception for all AuthProxy operations."""
    pass


class ConfigurationError(AuthProxyError):
    """Provider settings are missing or invalid."""
    pass


class RequestBuildError(AuthProxyError):
    """The request could not be constructed (malformed URL, unserializable body, missing key)."""
    pass


class TransportError(AuthProxyError):
    """Network-level failure while talking to the AuthProxy API.

    Attributes:
        status_code: HTTP status already received when the failure happened
            (e.g. the body could not be drained), otherwise None
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RemoteRejected(AuthProxyError):
    """The AuthProxy API answered with a status other than 200.

    Attributes:
        status_code: HTTP status code
        body: Response body, kept for diagnostics only
        endpoint: API endpoint that rejected the request
    """

    def __init__(self, status_code: int, body: str, endpoint: str):
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {body}")


class DecodeError(AuthProxyError):
    """Response body does not match the expected success schema."""

    def __init__(self, message: str, body: bytes = b""):
        self.body = body
        super().__init__(message)
