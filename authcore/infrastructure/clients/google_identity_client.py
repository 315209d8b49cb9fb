from __future__ import annotations

import logging

from google.auth import exceptions as google_exceptions
from google.auth import jwt as google_jwt

from authcore.application.dto.auth import FederatedIdentity
from authcore.application.ports.federated_identity_port import FederatedIdentityPort
from authcore.infrastructure.clients.signing_key_cache import SigningKeyCache


logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v1/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def _parse_email_verified(value: object) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


class GoogleIdentityClient(FederatedIdentityPort):
    def __init__(self, *, client_id: str, key_cache: SigningKeyCache):
        self._client_id = client_id
        self._key_cache = key_cache
        if not client_id:
            logger.warning("google_identity_client: client_id_not_configured")

    def verify(self, raw_token: str) -> FederatedIdentity | None:
        if not self._client_id or not raw_token:
            return None

        # Key fetch failures propagate as IdentityProviderUnavailableError.
        certs = self._key_cache.document()
        try:
            payload = google_jwt.decode(raw_token, certs=dict(certs), audience=self._client_id)
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            logger.warning("google_identity_client: token_rejected reason=%s", exc)
            return None

        if payload.get("iss") not in GOOGLE_ISSUERS:
            logger.warning("google_identity_client: token_rejected reason=issuer")
            return None

        subject = payload.get("sub")
        if not subject:
            logger.warning("google_identity_client: token_rejected reason=missing_subject")
            return None

        name = payload.get("name")
        return FederatedIdentity(
            subject=str(subject),
            email=str(payload.get("email") or ""),
            email_verified=_parse_email_verified(payload.get("email_verified", False)),
            name=name if isinstance(name, str) else None,
        )
