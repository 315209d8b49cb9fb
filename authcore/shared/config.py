from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from authcore.domain.exceptions import ConfigurationError


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _int(name: str, default: int) -> int:
    value = _env(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer.") from exc


def _float(name: str, default: float) -> float:
    value = _env(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number.") from exc


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    access_token_ttl_minutes: int
    refresh_token_ttl_days: int
    password_reset_ttl_minutes: int
    google_client_id: str
    apple_client_id: str
    bcrypt_rounds: int
    postgres_dsn: str
    google_certs_url: str
    apple_keys_url: str
    signing_keys_cache_ttl_seconds: float
    http_timeout_seconds: float


def get_settings() -> Settings:
    jwt_secret = _env("JWT_SECRET", "")
    if not jwt_secret:
        raise ConfigurationError("JWT_SECRET environment variable must be configured.")

    return Settings(
        jwt_secret=jwt_secret,
        access_token_ttl_minutes=_int("ACCESS_TOKEN_TTL_MINUTES", 15),
        refresh_token_ttl_days=_int("REFRESH_TOKEN_TTL_DAYS", 7),
        password_reset_ttl_minutes=_int("PASSWORD_RESET_TTL_MINUTES", 60),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        apple_client_id=_env("APPLE_CLIENT_ID", ""),
        bcrypt_rounds=_int("BCRYPT_ROUNDS", 12),
        postgres_dsn=_env("POSTGRES_DSN", ""),
        google_certs_url=_env("GOOGLE_CERTS_URL", "https://www.googleapis.com/oauth2/v1/certs"),
        apple_keys_url=_env("APPLE_KEYS_URL", "https://appleid.apple.com/auth/keys"),
        signing_keys_cache_ttl_seconds=_float("SIGNING_KEYS_CACHE_TTL_SECONDS", 24 * 60 * 60),
        http_timeout_seconds=_float("HTTP_TIMEOUT_SECONDS", 10),
    )
