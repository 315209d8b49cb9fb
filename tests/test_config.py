from __future__ import annotations

import inspect

import pytest

from authcore.bootstrap import build_auth_orchestrator, get_auth_orchestrator
from authcore.domain.exceptions import ConfigurationError
from authcore.infrastructure.clients.apple_identity_client import APPLE_KEYS_URL
from authcore.infrastructure.clients.google_identity_client import GOOGLE_CERTS_URL
from authcore.infrastructure.events.logging_event_sink import InMemoryEventSink
from authcore.infrastructure.memory.account_store import InMemoryAccountStore
from authcore.infrastructure.memory.refresh_token_store import InMemoryRefreshTokenStore
from authcore.shared import config
from authcore.shared.config import get_settings


_ENV_VARS = (
    "JWT_SECRET",
    "ACCESS_TOKEN_TTL_MINUTES",
    "REFRESH_TOKEN_TTL_DAYS",
    "PASSWORD_RESET_TTL_MINUTES",
    "GOOGLE_CLIENT_ID",
    "APPLE_CLIENT_ID",
    "BCRYPT_ROUNDS",
    "POSTGRES_DSN",
    "GOOGLE_CERTS_URL",
    "APPLE_KEYS_URL",
    "SIGNING_KEYS_CACHE_TTL_SECONDS",
    "HTTP_TIMEOUT_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_jwt_secret_is_a_configuration_error(clean_env):
    with pytest.raises(ConfigurationError):
        get_settings()


def test_defaults(clean_env):
    clean_env.setenv("JWT_SECRET", "s" * 40)

    settings = get_settings()

    assert settings.access_token_ttl_minutes == 15
    assert settings.refresh_token_ttl_days == 7
    assert settings.password_reset_ttl_minutes == 60
    assert settings.bcrypt_rounds == 12
    assert settings.google_client_id == ""
    assert settings.apple_client_id == ""
    assert settings.google_certs_url == GOOGLE_CERTS_URL
    assert settings.apple_keys_url == APPLE_KEYS_URL
    assert settings.signing_keys_cache_ttl_seconds == 86400
    assert settings.http_timeout_seconds == 10


def test_overrides(clean_env):
    clean_env.setenv("JWT_SECRET", "s" * 40)
    clean_env.setenv("ACCESS_TOKEN_TTL_MINUTES", "5")
    clean_env.setenv("BCRYPT_ROUNDS", "10")
    clean_env.setenv("GOOGLE_CLIENT_ID", "google-client")
    clean_env.setenv("HTTP_TIMEOUT_SECONDS", "2.5")

    settings = get_settings()

    assert settings.access_token_ttl_minutes == 5
    assert settings.bcrypt_rounds == 10
    assert settings.google_client_id == "google-client"
    assert settings.http_timeout_seconds == 2.5


def test_malformed_number_is_a_configuration_error(clean_env):
    clean_env.setenv("JWT_SECRET", "s" * 40)
    clean_env.setenv("REFRESH_TOKEN_TTL_DAYS", "seven")

    with pytest.raises(ConfigurationError):
        get_settings()


def test_build_auth_orchestrator_wires_configured_ttls(clean_env):
    clean_env.setenv("JWT_SECRET", "s" * 40)
    clean_env.setenv("ACCESS_TOKEN_TTL_MINUTES", "5")
    clean_env.setenv("BCRYPT_ROUNDS", "4")
    sink = InMemoryEventSink()

    auth = build_auth_orchestrator(
        get_settings(),
        account_store=InMemoryAccountStore(),
        refresh_token_store=InMemoryRefreshTokenStore(),
        event_sink=sink,
    )
    out = auth.register(email="a@x.com", name="A", password="Secret123")

    assert out.expires_in == 300
    assert auth.validate_token(access_token=out.access_token).valid
    assert len(sink.events) == 1


def test_get_auth_orchestrator_requires_dsn(clean_env):
    clean_env.setenv("JWT_SECRET", "s" * 40)
    get_auth_orchestrator.cache_clear()

    with pytest.raises(ConfigurationError):
        get_auth_orchestrator()


def test_config_does_not_depend_on_infrastructure_adapters():
    assert "authcore.infrastructure" not in inspect.getsource(config)
