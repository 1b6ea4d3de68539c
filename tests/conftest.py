"""Pytest shared fixtures for the AuthProxy reconciler tests."""
import base64
import json
import pathlib
import sys
import threading
import uuid
from typing import Optional
from urllib.parse import unquote, urlsplit

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from authproxy.core.admin_api import (
    RoleReconciler,
    TenantDataSource,
    TenantReconciler,
    configure_provider,
)

ENDPOINT = "http://authproxy.test"
USERNAME = "admin"
PASSWORD = "s3cret"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_real_http(monkeypatch, request):
    """
    Prevent unit tests from hitting a live AuthProxy.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# Stub responses / sessions
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(self, status_code: int, payload=None, raw: Optional[bytes] = None, fail_on_read: bool = False):
        self.status_code = status_code
        if raw is not None:
            self._content = raw
        elif payload is None:
            self._content = b""
        else:
            self._content = json.dumps(payload).encode("utf-8")
        self._fail_on_read = fail_on_read
        self.closed = False

    @property
    def content(self) -> bytes:
        if self._fail_on_read:
            raise requests.exceptions.ChunkedEncodingError("connection broken while reading body")
        return self._content

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


class RecordingSession:
    """Session returning canned responses and recording every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


class FakeAuthProxy:
    """Thread-safe in-memory emulation of the AuthProxy administration API."""

    def __init__(self, username: str = USERNAME, password: str = PASSWORD):
        self._expected_auth = (username, password)
        self._lock = threading.Lock()
        self.tenants = {}  # name -> id
        self.roles = {}  # (tenant, name) -> {"id", "scopes"}
        self.calls = []

    # requests.Session protocol ------------------------------------------------
    def request(self, method, url, data=None, headers=None, auth=None, timeout=None, stream=False):
        body = json.loads(data.decode("utf-8")) if data else None
        with self._lock:
            self.calls.append((method, urlsplit(url).path, body))
            if not self._authorized(auth):
                return StubResponse(401, {"error": "unauthorized"})
            status, payload = self._dispatch(method, urlsplit(url).path, body)
        return StubResponse(status, payload)

    def close(self) -> None:
        pass

    # helpers -----------------------------------------------------------------
    def _authorized(self, auth) -> bool:
        if auth is None:
            return False
        prepared = requests.Request("GET", ENDPOINT, auth=auth).prepare()
        header = prepared.headers.get("Authorization", "")
        expected = "Basic " + base64.b64encode(":".join(self._expected_auth).encode()).decode()
        return header == expected

    def _dispatch(self, method, path, body):
        segments = [unquote(part) for part in path.strip("/").split("/")]

        if segments == ["tenants"] and method == "POST":
            name = body["tenant"]
            if name in self.tenants:
                return 409, {"error": f"tenant {name} already exists"}
            self.tenants[name] = str(uuid.uuid4())
            return 200, {"id": self.tenants[name]}

        if segments == ["tenants"] and method == "PATCH":
            old, new = body["tenant"], body["new_tenant"]
            if old not in self.tenants:
                return 404, {"error": f"tenant {old} not found"}
            if new != old and new in self.tenants:
                return 409, {"error": f"tenant {new} already exists"}
            tenant_id = self.tenants.pop(old)
            self.tenants[new] = tenant_id
            for (tenant, name) in list(self.roles):
                if tenant == old:
                    self.roles[(new, name)] = self.roles.pop((tenant, name))
            return 200, {"id": tenant_id}

        if len(segments) == 2 and segments[0] == "tenants":
            name = segments[1]
            if name not in self.tenants:
                return 404, {"error": f"tenant {name} not found"}
            if method == "GET":
                return 200, {"id": self.tenants[name], "name": name}
            if method == "DELETE":
                tenant_id = self.tenants.pop(name)
                for key in [key for key in self.roles if key[0] == name]:
                    del self.roles[key]
                return 200, {"id": tenant_id, "name": name}

        if segments == ["roles"] and method == "POST":
            key = (body["tenant"], body["name"])
            if body["tenant"] not in self.tenants:
                return 404, {"error": f"tenant {body['tenant']} not found"}
            if key in self.roles:
                return 409, {"error": f"role {key[1]} already exists"}
            self.roles[key] = {"id": str(uuid.uuid4()), "scopes": list(body["scopes"])}
            return 200, {"id": self.roles[key]["id"]}

        if segments == ["roles"] and method == "PATCH":
            key = (body["tenant"], body["name"])
            if key not in self.roles:
                return 404, {"error": f"role {key[1]} not found"}
            new_key = (body["tenant"], body["new_name"])
            if new_key != key and new_key in self.roles:
                return 409, {"error": f"role {new_key[1]} already exists"}
            role = self.roles.pop(key)
            role["scopes"] = list(body["new_scopes"])
            self.roles[new_key] = role
            return 200, {"id": role["id"]}

        if len(segments) == 4 and segments[0] == "tenants" and segments[2] == "roles":
            key = (segments[1], segments[3])
            if key not in self.roles:
                return 404, {"error": f"role {key[1]} not found"}
            role = self.roles[key]
            if method == "GET":
                return 200, {"id": role["id"], "name": key[1], "tenant": key[0], "scopes": role["scopes"]}
            if method == "DELETE":
                del self.roles[key]
                return 200, {"id": role["id"], "name": key[1]}

        return 405, {"error": f"{method} {path} not supported"}


# ─────────────────────────────────────────────────────────────────────────────
# Provider fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def fake_api():
    """Fresh in-memory AuthProxy."""
    return FakeAuthProxy()


@pytest.fixture()
def config(fake_api):
    """Shared provider configuration wired to the fake AuthProxy."""
    return configure_provider(ENDPOINT, USERNAME, PASSWORD, session=fake_api)


@pytest.fixture()
def tenants(config):
    return TenantReconciler(config)


@pytest.fixture()
def roles(config):
    return RoleReconciler(config)


@pytest.fixture()
def tenant_lookup(config):
    return TenantDataSource(config)


@pytest.fixture()
def make_config():
    """Build a provider configuration around a RecordingSession."""

    def _make(*responses):
        session = RecordingSession(*responses)
        return configure_provider(ENDPOINT, USERNAME, PASSWORD, session=session), session

    return _make


@pytest.fixture()
def stub_response():
    """Factory for canned responses used with ``make_config``."""
    return StubResponse
