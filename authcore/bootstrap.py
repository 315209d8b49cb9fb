from __future__ import annotations

from functools import lru_cache
import logging

from authcore.application.auth_orchestrator import AuthOrchestrator
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.refresh_token_store_port import RefreshTokenStorePort
from authcore.domain.exceptions import ConfigurationError
from authcore.infrastructure.clients.apple_identity_client import AppleIdentityClient
from authcore.infrastructure.clients.google_identity_client import GoogleIdentityClient
from authcore.infrastructure.clients.signing_key_cache import get_signing_key_cache
from authcore.infrastructure.db.engine import get_engine
from authcore.infrastructure.db.repositories.accounts_repository import SqlAccountRepository
from authcore.infrastructure.db.repositories.refresh_token_repository import (
    SqlRefreshTokenRepository,
)
from authcore.infrastructure.events.logging_event_sink import LoggingEventSink
from authcore.infrastructure.security.password_hasher import PasswordHasher
from authcore.infrastructure.security.token_service import JwtTokenService
from authcore.shared.config import Settings, get_settings


logger = logging.getLogger(__name__)


def build_auth_orchestrator(
    settings: Settings,
    *,
    account_store: AccountStorePort,
    refresh_token_store: RefreshTokenStorePort,
    event_sink: EventSinkPort,
) -> AuthOrchestrator:
    token_service = JwtTokenService(
        jwt_secret=settings.jwt_secret,
        refresh_token_store=refresh_token_store,
        access_ttl_minutes=settings.access_token_ttl_minutes,
        refresh_ttl_days=settings.refresh_token_ttl_days,
    )
    verifiers = {
        "google": GoogleIdentityClient(
            client_id=settings.google_client_id,
            key_cache=get_signing_key_cache(
                settings.google_certs_url,
                settings.signing_keys_cache_ttl_seconds,
                settings.http_timeout_seconds,
            ),
        ),
        "apple": AppleIdentityClient(
            client_id=settings.apple_client_id,
            key_cache=get_signing_key_cache(
                settings.apple_keys_url,
                settings.signing_keys_cache_ttl_seconds,
                settings.http_timeout_seconds,
            ),
        ),
    }
    return AuthOrchestrator(
        account_store=account_store,
        password_hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        token_port=token_service,
        event_sink=event_sink,
        verifiers=verifiers,
        password_reset_ttl_minutes=settings.password_reset_ttl_minutes,
    )


@lru_cache(maxsize=1)
def get_auth_orchestrator() -> AuthOrchestrator:
    settings = get_settings()
    if not settings.postgres_dsn:
        raise ConfigurationError("POSTGRES_DSN is required.")
    engine = get_engine(settings.postgres_dsn)
    return build_auth_orchestrator(
        settings,
        account_store=SqlAccountRepository(engine),
        refresh_token_store=SqlRefreshTokenRepository(engine),
        event_sink=LoggingEventSink(),
    )


def purge_expired_refresh_tokens() -> int:
    """Entry point for the periodic sweep run outside the request path."""
    deleted = get_auth_orchestrator().purge_expired_refresh_tokens()
    logger.info("bootstrap: purge_expired_refresh_tokens deleted=%s", deleted)
    return deleted


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    purge_expired_refresh_tokens()
