from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets
from typing import Callable

import jwt

from authcore.application.dto.auth import TokenPair
from authcore.application.ports.refresh_token_store_port import RefreshTokenStorePort
from authcore.application.ports.token_port import TokenPort
from authcore.domain.entities.account import FEDERATED_PROVIDERS, AccessTokenClaims
from authcore.domain.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
JWT_ALGORITHM = "HS256"
CLOCK_SKEW_LEEWAY_SECONDS = 30
_KNOWN_PROVIDERS = ("password",) + FEDERATED_PROVIDERS


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JwtTokenService(TokenPort):
    """Stateless HS256 access tokens plus store-backed opaque refresh tokens.

    Refresh and reset tokens are handed out raw and persisted only as SHA-256
    digests.
    """

    def __init__(
        self,
        *,
        jwt_secret: str,
        refresh_token_store: RefreshTokenStorePort,
        access_ttl_minutes: int = 15,
        refresh_ttl_days: int = 7,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not jwt_secret:
            raise ConfigurationError("JWT secret must be configured.")
        self._jwt_secret = jwt_secret
        self._refresh_token_store = refresh_token_store
        self._access_ttl = timedelta(minutes=access_ttl_minutes)
        self._refresh_ttl = timedelta(days=refresh_ttl_days)
        self._clock = clock

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._access_ttl.total_seconds())

    def generate_token_pair(self, claims: AccessTokenClaims) -> TokenPair:
        logger.info("token_service: issuing_token_pair account_id=%s", claims.sub)
        now = self._clock()
        access_token = self._create_access_token(claims, now=now)

        refresh_token = secrets.token_urlsafe(48)
        self._refresh_token_store.create(
            token=self.hash_token(refresh_token),
            account_id=claims.sub,
            expires_at=now + self._refresh_ttl,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.access_ttl_seconds,
        )

    def _create_access_token(self, claims: AccessTokenClaims, *, now: datetime) -> str:
        exp = now + self._access_ttl
        payload = {
            "sub": claims.sub,
            "email": claims.email,
            "name": claims.name,
            "provider": claims.provider,
            "type": ACCESS_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self._jwt_secret, algorithm=JWT_ALGORITHM)

    def validate_access_token(self, token: str) -> AccessTokenClaims | None:
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat", "sub"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError:
            logger.warning("token_service: access_token_rejected reason=invalid")
            return None

        try:
            issued_at = int(payload["iat"])
            expires_at = int(payload["exp"])
        except (TypeError, ValueError):
            logger.warning("token_service: access_token_rejected reason=claims")
            return None

        # Both timestamps are checked against the injected clock rather than wall time.
        now = int(self._clock().timestamp())
        if expires_at <= now:
            logger.warning("token_service: access_token_rejected reason=expired")
            return None
        if issued_at > now + CLOCK_SKEW_LEEWAY_SECONDS:
            logger.warning("token_service: access_token_rejected reason=not_yet_valid")
            return None

        subject = payload.get("sub")
        provider = payload.get("provider")
        if (
            payload.get("type") != ACCESS_TOKEN_TYPE
            or not isinstance(subject, str)
            or not subject
            or provider not in _KNOWN_PROVIDERS
        ):
            logger.warning("token_service: access_token_rejected reason=claims")
            return None

        return AccessTokenClaims(
            sub=subject,
            email=str(payload.get("email", "")),
            name=str(payload.get("name", "")),
            provider=provider,
            iat=issued_at,
            exp=expires_at,
        )

    def validate_refresh_token(self, token: str) -> str | None:
        token_hash = self.hash_token(token)
        record = self._refresh_token_store.find_by_token(token_hash)
        if record is None:
            logger.warning("token_service: refresh_token_not_found")
            return None

        if record.is_expired(self._clock()):
            logger.warning("token_service: refresh_token_expired account_id=%s", record.account_id)
            self._refresh_token_store.delete(token_hash)
            return None

        if record.revoked:
            logger.warning("token_service: refresh_token_revoked account_id=%s", record.account_id)
            return None

        return record.account_id

    def consume_refresh_token(self, token: str) -> str | None:
        token_hash = self.hash_token(token)
        now = self._clock()
        record = self._refresh_token_store.consume(token_hash, now=now)
        if record is not None:
            logger.info("token_service: refresh_token_rotated account_id=%s", record.account_id)
            return record.account_id

        existing = self._refresh_token_store.find_by_token(token_hash)
        if existing is None:
            logger.warning("token_service: refresh_token_not_found")
        elif existing.is_expired(now):
            logger.warning("token_service: refresh_token_expired account_id=%s", existing.account_id)
            self._refresh_token_store.delete(token_hash)
        else:
            logger.warning("token_service: refresh_token_revoked account_id=%s", existing.account_id)
        return None

    def revoke_refresh_token(self, token: str) -> None:
        logger.info("token_service: revoking_refresh_token")
        self._refresh_token_store.revoke(self.hash_token(token))

    def revoke_all_user_tokens(self, account_id: str) -> None:
        revoked = self._refresh_token_store.revoke_all_for_user(account_id)
        logger.info("token_service: revoked_all_tokens account_id=%s count=%s", account_id, revoked)

    def generate_password_reset_token(self) -> str:
        return secrets.token_urlsafe(32)

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def purge_expired_refresh_tokens(self) -> int:
        deleted = self._refresh_token_store.delete_expired(now=self._clock())
        logger.info("token_service: purged_expired_refresh_tokens count=%s", deleted)
        return deleted
