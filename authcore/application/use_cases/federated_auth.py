from __future__ import annotations

import logging
from typing import Mapping

from authcore.application.dto.auth import AuthOutput, FederatedAuthInput, FederatedIdentity, NewAccount
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.federated_identity_port import FederatedIdentityPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain.entities.account import AccountIdentity, AuthProvider
from authcore.domain.exceptions import (
    AccountAlreadyExistsError,
    EmailNotVerifiedError,
    InvalidProviderTokenError,
    ProviderConflictError,
    UnsupportedProviderError,
)

from .auth_common import emit_logged_in, emit_registered, issue_tokens, normalize_email


logger = logging.getLogger(__name__)

APPLE_PRIVATE_RELAY_DOMAIN = "privaterelay.appleid.com"

_FALLBACK_NAMES = {
    "google": "Google User",
    "apple": "Apple User",
}


def build_display_name(
    *,
    provider: str,
    identity: FederatedIdentity,
    email: str,
    first_name: str | None,
    last_name: str | None,
) -> str:
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    if first and last:
        return f"{first} {last}"
    if identity.name and identity.name.strip():
        return identity.name.strip()
    if identity.email:
        local_part = identity.email.split("@")[0]
        if local_part:
            return local_part
    return _FALLBACK_NAMES.get(provider, email.split("@")[0])


class FederatedAuthUseCase:
    """Sign in (or sign up) with a token issued by an external identity provider.

    Accounts are matched on (provider, subject). An email already owned by
    another account is a conflict: accounts are never merged across providers.
    """

    def __init__(
        self,
        *,
        account_store: AccountStorePort,
        verifiers: Mapping[str, FederatedIdentityPort],
        token_port: TokenPort,
        event_sink: EventSinkPort,
    ):
        self._account_store = account_store
        self._verifiers = dict(verifiers)
        self._token_port = token_port
        self._event_sink = event_sink

    def execute(self, command: FederatedAuthInput) -> AuthOutput:
        provider = command.provider.strip().lower()
        verifier = self._verifiers.get(provider)
        if verifier is None:
            raise UnsupportedProviderError(command.provider)

        identity = verifier.verify(command.token)
        if identity is None:
            raise InvalidProviderTokenError(provider)
        # Only Apple may withhold the email; it gets a private relay placeholder.
        if not identity.email and provider != "apple":
            raise InvalidProviderTokenError(provider)
        if provider == "google" and not identity.email_verified:
            raise EmailNotVerifiedError()

        account = self._account_store.find_by_provider(provider, identity.subject)
        if account is None:
            account = self._register(provider, identity, command)

        emit_logged_in(self._event_sink, account)
        return issue_tokens(account=account, token_port=self._token_port)

    def _register(
        self,
        provider: AuthProvider,
        identity: FederatedIdentity,
        command: FederatedAuthInput,
    ) -> AccountIdentity:
        if identity.email:
            email = normalize_email(identity.email)
        else:
            email = f"{identity.subject}@{APPLE_PRIVATE_RELAY_DOMAIN}".lower()

        existing = self._account_store.find_by_email(email)
        if existing is not None:
            logger.warning(
                "federated_auth: provider_conflict provider=%s existing_provider=%s account_id=%s",
                provider,
                existing.provider,
                existing.id,
            )
            raise ProviderConflictError()

        name = build_display_name(
            provider=provider,
            identity=identity,
            email=email,
            first_name=command.first_name,
            last_name=command.last_name,
        )
        try:
            account = self._account_store.create(
                NewAccount(
                    email=email,
                    name=name,
                    provider=provider,
                    provider_id=identity.subject,
                )
            )
        except AccountAlreadyExistsError:
            # Lost a race on the store's unique constraints.
            account = self._account_store.find_by_provider(provider, identity.subject)
            if account is None:
                raise ProviderConflictError() from None
            return account

        emit_registered(self._event_sink, account)
        return account
