from __future__ import annotations

from functools import lru_cache
import logging
from threading import Lock
import time
from typing import Any, Callable, Mapping

import httpx

from authcore.domain.exceptions import IdentityProviderUnavailableError


logger = logging.getLogger(__name__)

DEFAULT_KEYS_TTL_SECONDS = 24 * 60 * 60
DEFAULT_TIMEOUT_SECONDS = 10.0


class SigningKeyCache:
    """Lazily fetched, TTL-bound copy of an identity provider's public key document.

    The document is kept exactly as served (Google's ``{kid: pem}`` map or a
    JWKS ``{"keys": [...]}``). It is never invalidated early; a fetch failure
    raises ``IdentityProviderUnavailableError`` so callers fail closed.
    """

    def __init__(
        self,
        *,
        url: str,
        ttl_seconds: float = DEFAULT_KEYS_TTL_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        fetch_document: Callable[[], Mapping[str, Any]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout_seconds
        self._fetch_document = fetch_document or self._fetch_over_http
        self._clock = clock
        self._document: Mapping[str, Any] | None = None
        self._expires_at = 0.0
        self._lock = Lock()

    def document(self) -> Mapping[str, Any]:
        with self._lock:
            if self._document is not None and self._expires_at > self._clock():
                return self._document

            document = self._fetch_document()
            if not isinstance(document, Mapping):
                raise IdentityProviderUnavailableError(f"Unexpected key document from {self.url}")
            self._document = document
            self._expires_at = self._clock() + self.ttl_seconds
            logger.info("signing_key_cache: keys_refreshed url=%s entries=%s", self.url, len(document))
            return document

    def _fetch_over_http(self) -> Mapping[str, Any]:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.url)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("signing_key_cache: fetch_failed url=%s error=%s", self.url, exc)
            raise IdentityProviderUnavailableError(f"Could not fetch signing keys from {self.url}") from exc


@lru_cache(maxsize=None)
def get_signing_key_cache(
    url: str,
    ttl_seconds: float = DEFAULT_KEYS_TTL_SECONDS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> SigningKeyCache:
    return SigningKeyCache(url=url, ttl_seconds=ttl_seconds, timeout_seconds=timeout_seconds)
