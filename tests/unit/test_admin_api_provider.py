"""Unit tests for provider configuration."""
import pytest

from authproxy.config.settings import ProviderSettings
from authproxy.core.admin_api import SharedConfig, configure_provider
from authproxy.core.admin_api.exceptions import ConfigurationError


def test_configure_strips_trailing_slash(fake_api):
    config = configure_provider("https://authproxy.example.com/", "admin", "s3cret", session=fake_api)

    assert config.endpoint == "https://authproxy.example.com"
    assert config.client.base_url == "https://authproxy.example.com"
    assert config.client.session is fake_api


def test_password_is_hidden_from_repr(fake_api):
    config = configure_provider("http://authproxy.test", "admin", "s3cret", session=fake_api)
    assert "s3cret" not in repr(config)
    assert "admin" in repr(config)


def test_all_problems_reported_together():
    with pytest.raises(ConfigurationError) as excinfo:
        configure_provider("", "", "", timeout=0)

    message = str(excinfo.value)
    assert "endpoint is required" in message
    assert "username is required" in message
    assert "password is required" in message
    assert "request timeout must be positive" in message


@pytest.mark.parametrize(
    "endpoint, message",
    [
        ("ftp://authproxy.test", "http or https"),
        ("http://", "must include a host"),
        ("http://authproxy.test/?debug=1", "query or fragment"),
    ],
)
def test_bad_endpoint(endpoint, message):
    with pytest.raises(ConfigurationError, match=message):
        configure_provider(endpoint, "admin", "s3cret")


def test_config_is_immutable(config):
    with pytest.raises(AttributeError):
        config.endpoint = "http://elsewhere.test"


def test_from_settings_forwards_timeout(fake_api):
    settings = ProviderSettings(
        endpoint="http://authproxy.test",
        username="admin",
        password="s3cret",
        request_timeout=9,
    )

    config = SharedConfig.from_settings(settings, session=fake_api)

    assert config.client.timeout == 9
    assert config.username == "admin"


def test_from_incomplete_settings_fails():
    settings = ProviderSettings(endpoint="http://authproxy.test")
    assert not settings.is_complete
    with pytest.raises(ConfigurationError, match="username is required"):
        SharedConfig.from_settings(settings)
