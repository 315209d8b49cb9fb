from __future__ import annotations

from datetime import datetime, timezone

from authcore.application.dto.auth import AuthOutput, UserInfo
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain import events
from authcore.domain.entities.account import AccessTokenClaims, AccountIdentity


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_user_info(account: AccountIdentity) -> UserInfo:
    return UserInfo(
        id=account.id,
        email=account.email,
        name=account.name,
        provider=account.provider,
        created_at=account.created_at.isoformat(),
    )


def issue_tokens(*, account: AccountIdentity, token_port: TokenPort) -> AuthOutput:
    pair = token_port.generate_token_pair(
        AccessTokenClaims(
            sub=account.id,
            email=account.email,
            name=account.name,
            provider=account.provider,
        )
    )
    return AuthOutput(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
        user=build_user_info(account),
    )


def emit_registered(event_sink: EventSinkPort, account: AccountIdentity) -> None:
    event_sink.emit(
        events.USER_REGISTERED,
        {
            "id": account.id,
            "email": account.email,
            "name": account.name,
            "provider": account.provider,
            "createdAt": account.created_at.isoformat(),
        },
    )


def emit_logged_in(event_sink: EventSinkPort, account: AccountIdentity) -> None:
    event_sink.emit(
        events.USER_LOGGED_IN,
        {
            "id": account.id,
            "email": account.email,
            "provider": account.provider,
            "loggedInAt": utcnow().isoformat(),
        },
    )
