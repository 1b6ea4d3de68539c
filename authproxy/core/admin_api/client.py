"""Low-level HTTP client for the AuthProxy administration API.

Handles basic authentication, request serialization and response draining.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests
from requests.auth import HTTPBasicAuth

from .exceptions import RequestBuildError, TransportError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 5

_BUILD_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


@dataclass(frozen=True)
class TransportResponse:
    """A completed request/response exchange.

    Attributes:
        status_code: HTTP status code (any value; 200 is the only success)
        body: Fully drained response body
        url: URL the request was sent to
    """
    status_code: int
    body: bytes
    url: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class AuthProxyClient:
    """HTTP client for the AuthProxy administration API.

    Features:
    - HTTP Basic authentication on every request
    - JSON request bodies
    - Non-200 statuses are returned, never raised

    The client keeps no per-request state and can be shared between threads.

    Usage:
        client = AuthProxyClient("http://authproxy:8080", "admin", "password")
        response = client.get("/tenants/acme")
        if response.ok:
            ...
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize AuthProxy client.

        Args:
            base_url: AuthProxy endpoint, e.g. "https://authproxy.internal"
            username: Admin username
            password: Admin password
            timeout: Per-request timeout in seconds
            session: Pre-built requests session (defaults to a new one)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._auth = HTTPBasicAuth(username, password)

    def execute(self, method: str, path: str, body: Optional[Any] = None) -> TransportResponse:
        """Perform one authenticated request/response exchange.

        Args:
            method: HTTP method
            path: Path relative to the endpoint (e.g., "/tenants/acme")
            body: JSON-serializable request body, if any

        Returns:
            The drained response, whatever its status code

        Raises:
            RequestBuildError: If the URL or body cannot be built
            TransportError: On connection, timeout or protocol failure
        """
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        data = None
        if body is not None:
            try:
                data = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise RequestBuildError(f"request body for {method} {path} is not serializable: {exc}") from exc
            headers["Content-Type"] = "application/json"

        logger.debug("Setting basic auth")
        logger.debug("Making request", extra={"method": method, "url": url})
        try:
            resp = self.session.request(
                method,
                url,
                data=data,
                headers=headers,
                auth=self._auth,
                timeout=self.timeout,
                stream=True,
            )
        except _BUILD_ERRORS as exc:
            raise RequestBuildError(f"invalid request {method} {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        with resp:
            try:
                content = resp.content
            except requests.RequestException as exc:
                raise TransportError(
                    f"{method} {url} returned {resp.status_code} but the body could not be read: {exc}",
                    status_code=resp.status_code,
                ) from exc

        logger.debug("Request finished", extra={"method": method, "url": url, "status": resp.status_code})
        return TransportResponse(resp.status_code, content or b"", url)

    def get(self, path: str) -> TransportResponse:
        return self.execute("GET", path)

    def post(self, path: str, json: Optional[Any] = None) -> TransportResponse:
        return self.execute("POST", path, json)

    def patch(self, path: str, json: Optional[Any] = None) -> TransportResponse:
        return self.execute("PATCH", path, json)

    def delete(self, path: str) -> TransportResponse:
        return self.execute("DELETE", path)

    def close(self) -> None:
        """Release pooled connections held by the underlying session."""
        self.session.close()
