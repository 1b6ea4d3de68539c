import json

import pytest

import scripts.authproxy_admin as cli
from authproxy.config import settings
from authproxy.core.admin_api import SharedConfig, configure_provider


@pytest.fixture(autouse=True)
def cli_environment(monkeypatch, tmp_path, fake_api):
    """Point the CLI at the in-memory AuthProxy instead of the network."""
    monkeypatch.setattr(settings, "SECRETS_DIR", str(tmp_path))
    monkeypatch.setenv("AUTHPROXY_ENDPOINT", "http://authproxy.test")
    monkeypatch.setenv("AUTHPROXY_USERNAME", "admin")
    monkeypatch.setenv("AUTHPROXY_PASSWORD", "s3cret")
    monkeypatch.delenv("AUTHPROXY_REQUEST_TIMEOUT", raising=False)

    def from_settings(cls, provider_settings, session=None):
        return configure_provider(
            provider_settings.endpoint,
            provider_settings.username,
            provider_settings.password,
            session=fake_api,
        )

    monkeypatch.setattr(SharedConfig, "from_settings", classmethod(from_settings))
    return fake_api


def _run(capsys, *argv):
    status = cli.main(list(argv))
    out, err = capsys.readouterr()
    return status, out, err


def test_no_command_prints_help(capsys):
    status, out, _ = _run(capsys)
    assert status == 0
    assert "tenant-create" in out


def test_tenant_create_prints_state(capsys, fake_api):
    status, out, err = _run(capsys, "tenant-create", "--name", "acme")

    assert status == 0
    assert json.loads(out) == {"id": fake_api.tenants["acme"], "name": "acme"}
    assert err == ""


def test_failure_goes_to_stderr_with_nonzero_exit(capsys):
    _run(capsys, "tenant-create", "--name", "acme")
    status, out, err = _run(capsys, "tenant-create", "--name", "acme")

    assert status == 1
    assert json.loads(out) == {"id": None, "name": "acme"}
    assert "[error] Client Error: Unable to create tenant" in err


def test_tenant_rename_and_lookup(capsys, fake_api):
    fake_api.tenants["a"] = "t-1"

    status, out, _ = _run(capsys, "tenant-rename", "--from-name", "a", "--to-name", "b", "--id", "t-1")
    assert status == 0
    assert json.loads(out) == {"id": "t-1", "name": "b"}

    status, out, _ = _run(capsys, "tenant-lookup", "--name", "b")
    assert json.loads(out)["id"] == "t-1"


def test_tenant_import_reads_remote_state(capsys, fake_api):
    fake_api.tenants["acme"] = "t-1"
    status, out, _ = _run(capsys, "tenant-import", "acme")
    assert status == 0
    assert json.loads(out) == {"id": "t-1", "name": "acme"}


def test_tenant_delete(capsys, fake_api):
    fake_api.tenants["acme"] = "t-1"
    status, out, _ = _run(capsys, "tenant-delete", "--name", "acme", "--id", "t-1")
    assert status == 0
    assert json.loads(out) is None
    assert fake_api.tenants == {}


def test_role_lifecycle(capsys, fake_api):
    fake_api.tenants["acme"] = "t-1"

    status, out, _ = _run(
        capsys, "role-create", "--tenant", "acme", "--name", "editor", "--scope", "read", "--scope", "write"
    )
    assert status == 0
    created = json.loads(out)
    assert created["scopes"] == ["read", "write"]

    status, out, _ = _run(capsys, "role-update", "--tenant", "acme", "--name", "editor", "--new-name", "writer")
    assert status == 0
    updated = json.loads(out)
    assert updated == {"id": created["id"], "name": "writer", "tenant": "acme", "scopes": ["read", "write"]}

    status, out, _ = _run(capsys, "role-import", "acme/writer")
    assert json.loads(out) == updated

    status, out, _ = _run(capsys, "role-delete", "--tenant", "acme", "--name", "writer")
    assert status == 0
    assert fake_api.roles == {}


def test_role_update_of_missing_role(capsys, fake_api):
    fake_api.tenants["acme"] = "t-1"
    status, _, err = _run(capsys, "role-update", "--tenant", "acme", "--name", "ghost", "--scope", "read")
    assert status == 1
    assert "Unable to read role" in err
    assert [call[0] for call in fake_api.calls] == ["GET"]


def test_missing_configuration_exits(monkeypatch, capsys):
    monkeypatch.delenv("AUTHPROXY_ENDPOINT")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["tenant-read", "--name", "acme"])
    assert excinfo.value.code == 2
    assert "endpoint is required" in capsys.readouterr().err


def test_flags_override_environment(monkeypatch, capsys, fake_api):
    seen = {}

    def from_settings(cls, provider_settings, session=None):
        seen["endpoint"] = provider_settings.endpoint
        return configure_provider(provider_settings.endpoint, "admin", "s3cret", session=fake_api)

    monkeypatch.setattr(SharedConfig, "from_settings", classmethod(from_settings))
    fake_api.tenants["acme"] = "t-1"

    status, _, _ = _run(capsys, "--endpoint", "http://cli.test/", "tenant-read", "--name", "acme")

    assert status == 0
    assert seen["endpoint"] == "http://cli.test/"


def test_role_update_keeps_scopes_unless_told_otherwise(capsys, fake_api):
    fake_api.tenants["acme"] = "t-1"
    _run(capsys, "role-create", "--tenant", "acme", "--name", "editor", "--scope", "read")

    status, out, _ = _run(capsys, "role-update", "--tenant", "acme", "--name", "editor", "--new-name", "viewer")
    assert status == 0
    assert json.loads(out)["scopes"] == ["read"]

    status, out, _ = _run(capsys, "role-update", "--tenant", "acme", "--name", "viewer", "--clear-scopes")
    assert status == 0
    assert json.loads(out)["scopes"] == []
    assert fake_api.roles[("acme", "viewer")]["scopes"] == []


def test_clear_scopes_conflicts_with_scope(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["role-update", "--tenant", "acme", "--name", "editor", "--scope", "read", "--clear-scopes"])
    assert excinfo.value.code == 2
