from __future__ import annotations

import logging

import jwt

from authcore.application.dto.auth import FederatedIdentity
from authcore.application.ports.federated_identity_port import FederatedIdentityPort
from authcore.infrastructure.clients.signing_key_cache import SigningKeyCache


logger = logging.getLogger(__name__)

APPLE_KEYS_URL = "https://appleid.apple.com/auth/keys"
APPLE_ISSUER = "https://appleid.apple.com"
APPLE_ALGORITHM = "RS256"


class AppleIdentityClient(FederatedIdentityPort):
    """Verifies Sign in with Apple identity tokens against Apple's JWKS.

    Apple may omit the email (private relay); it is then reported as ``""``
    and the caller decides on a placeholder. Apple sends the user's name only
    to the client on first sign-in, never inside the token.
    """

    def __init__(self, *, client_id: str, key_cache: SigningKeyCache):
        self._client_id = client_id
        self._key_cache = key_cache
        if not client_id:
            logger.warning("apple_identity_client: client_id_not_configured")

    def verify(self, raw_token: str) -> FederatedIdentity | None:
        if not self._client_id or not raw_token:
            return None

        try:
            header = jwt.get_unverified_header(raw_token)
        except jwt.PyJWTError:
            logger.warning("apple_identity_client: token_rejected reason=malformed")
            return None

        kid = header.get("kid")
        if not kid:
            logger.warning("apple_identity_client: token_rejected reason=missing_kid")
            return None

        jwk = self._find_jwk(kid)
        if jwk is None:
            logger.warning("apple_identity_client: token_rejected reason=unknown_kid kid=%s", kid)
            return None

        try:
            signing_key = jwt.PyJWK(jwk, algorithm=APPLE_ALGORITHM).key
            payload = jwt.decode(
                raw_token,
                signing_key,
                algorithms=[APPLE_ALGORITHM],
                audience=self._client_id,
                issuer=APPLE_ISSUER,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as exc:
            logger.warning("apple_identity_client: token_rejected reason=%s", exc)
            return None

        email_verified = payload.get("email_verified")
        if isinstance(email_verified, str):
            email_verified = email_verified.lower() == "true"

        return FederatedIdentity(
            subject=str(payload["sub"]),
            email=str(payload.get("email") or ""),
            email_verified=bool(email_verified) if email_verified is not None else None,
        )

    def _find_jwk(self, kid: str) -> dict | None:
        keys = self._key_cache.document().get("keys")
        if not isinstance(keys, list):
            return None
        for key in keys:
            if isinstance(key, dict) and key.get("kid") == kid:
                return key
        return None
