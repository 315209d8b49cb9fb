from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authcore.domain.entities.account import AuthProvider


@dataclass(frozen=True)
class UserInfo:
    id: str
    email: str
    name: str
    provider: AuthProvider
    created_at: str


@dataclass(frozen=True)
class RegisterInput:
    email: str
    name: str
    password: str


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


@dataclass(frozen=True)
class FederatedAuthInput:
    provider: str
    token: str
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class RefreshTokenInput:
    refresh_token: str


@dataclass(frozen=True)
class ValidateTokenInput:
    access_token: str


@dataclass(frozen=True)
class LogoutInput:
    refresh_token: str


@dataclass(frozen=True)
class ForgotPasswordInput:
    email: str


@dataclass(frozen=True)
class ResetPasswordInput:
    token: str
    new_password: str


@dataclass(frozen=True)
class ChangePasswordInput:
    account_id: str
    current_password: str
    new_password: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(frozen=True)
class AuthOutput:
    access_token: str
    refresh_token: str
    expires_in: int
    user: UserInfo


@dataclass(frozen=True)
class ValidateTokenOutput:
    valid: bool
    user: UserInfo | None = None


@dataclass(frozen=True)
class LogoutOutput:
    success: bool


@dataclass(frozen=True)
class MessageOutput:
    success: bool
    message: str


@dataclass(frozen=True)
class FederatedIdentity:
    subject: str
    email: str
    email_verified: bool | None
    name: str | None = None


@dataclass(frozen=True)
class NewAccount:
    email: str
    name: str
    provider: AuthProvider
    password_hash: str | None = None
    provider_id: str | None = None


@dataclass(frozen=True)
class AccountUpdate:
    """Whitelisted mutable fields; ``None`` leaves a field untouched.

    Reset-token fields are cleared through ``clear_password_reset``.
    """

    email: str | None = None
    name: str | None = None
    password_hash: str | None = None
    password_reset_token: str | None = None
    password_reset_expires_at: datetime | None = None
    clear_password_reset: bool = False
