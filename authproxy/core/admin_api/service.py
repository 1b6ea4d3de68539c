"""Request execution shared by the tenant and role services."""
from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from .client import TransportResponse
from .diagnostics import CLIENT_ERROR_SUMMARY, Diagnostics
from .exceptions import DecodeError, RemoteRejected, RequestBuildError, TransportError
from .plan import RemoteCall
from .provider import SharedConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AdminService:
    """Base class for services issuing calls against the AuthProxy API."""

    def __init__(self, config: SharedConfig):
        """Initialize the service.

        Args:
            config: Shared provider configuration
        """
        self.config = config

    @property
    def client(self):
        return self.config.client

    def _send(self, call: RemoteCall, diagnostics: Diagnostics) -> Optional[TransportResponse]:
        """Execute a call and classify the outcome.

        Returns the response on status 200. Every failure is recorded in
        ``diagnostics`` and None is returned; the caller must stop there.
        """
        try:
            response = self.client.execute(call.method, call.path, call.body)
        except RequestBuildError as exc:
            diagnostics.add_exception(call.operation, exc)
            return None
        except TransportError as exc:
            if exc.status_code is not None and exc.status_code != 200:
                # The status was known before the body failed; report both.
                diagnostics.add_exception(
                    call.operation,
                    RemoteRejected(exc.status_code, "<unreadable body>", f"{call.method} {call.path}"),
                )
                diagnostics.add_error(
                    CLIENT_ERROR_SUMMARY,
                    f"Unable to handle non 200 status code on {call.operation}, got error: {exc}",
                    type(exc).__name__,
                )
            else:
                diagnostics.add_exception(call.operation, exc)
            return None

        if not response.ok:
            logger.error(
                "could not %s", call.operation,
                extra={"status": response.status_code, "body": response.text},
            )
            diagnostics.add_exception(
                call.operation,
                RemoteRejected(response.status_code, response.text, f"{call.method} {call.path}"),
            )
            return None
        return response

    def _decode(
        self,
        decoder: Callable[[bytes], T],
        response: TransportResponse,
        operation: str,
        diagnostics: Diagnostics,
    ) -> Optional[T]:
        try:
            return decoder(response.body)
        except DecodeError as exc:
            diagnostics.add_exception(operation, exc)
            return None

    def _build(self, builder: Callable[..., RemoteCall], operation: str, diagnostics: Diagnostics, *args) -> Optional[RemoteCall]:
        try:
            return builder(*args)
        except RequestBuildError as exc:
            diagnostics.add_exception(operation, exc)
            return None
