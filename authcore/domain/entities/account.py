from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


AuthProvider = Literal["password", "google", "apple"]

FEDERATED_PROVIDERS: tuple[AuthProvider, ...] = ("google", "apple")


@dataclass(frozen=True)
class AccountIdentity:
    id: str
    email: str
    name: str
    password_hash: str | None
    provider: AuthProvider
    provider_id: str | None
    password_reset_token: str | None
    password_reset_expires_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def has_password(self) -> bool:
        return self.provider == "password" and bool(self.password_hash)


@dataclass(frozen=True)
class RefreshTokenRecord:
    token: str
    account_id: str
    expires_at: datetime
    revoked: bool
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        return not self.revoked and not self.is_expired(now)


@dataclass(frozen=True)
class AccessTokenClaims:
    sub: str
    email: str
    name: str
    provider: AuthProvider
    iat: int | None = None
    exp: int | None = None
