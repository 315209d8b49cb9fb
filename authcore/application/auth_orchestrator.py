from __future__ import annotations

from typing import Mapping

from authcore.application.dto.auth import (
    AuthOutput,
    ChangePasswordInput,
    FederatedAuthInput,
    ForgotPasswordInput,
    LoginInput,
    LogoutInput,
    LogoutOutput,
    MessageOutput,
    RefreshTokenInput,
    RegisterInput,
    ResetPasswordInput,
    UserInfo,
    ValidateTokenInput,
    ValidateTokenOutput,
)
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.federated_identity_port import FederatedIdentityPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.application.ports.token_port import TokenPort
from authcore.application.use_cases.change_password import ChangePasswordUseCase
from authcore.application.use_cases.federated_auth import FederatedAuthUseCase
from authcore.application.use_cases.forgot_password import ForgotPasswordUseCase
from authcore.application.use_cases.get_profile import GetProfileUseCase
from authcore.application.use_cases.login_local import LoginLocalUseCase
from authcore.application.use_cases.logout_session import LogoutSessionUseCase
from authcore.application.use_cases.purge_expired_refresh_tokens import (
    PurgeExpiredRefreshTokensUseCase,
)
from authcore.application.use_cases.refresh_session import RefreshSessionUseCase
from authcore.application.use_cases.register_user import RegisterUserUseCase
from authcore.application.use_cases.reset_password import ResetPasswordUseCase
from authcore.application.use_cases.validate_access_token import ValidateAccessTokenUseCase


DEFAULT_PASSWORD_RESET_TTL_MINUTES = 60


class AuthOrchestrator:
    """Entry point for every authentication operation.

    Each method runs one use case. Domain failures raise ``AuthError``
    subclasses; store and provider outages raise ``InfrastructureError``
    subclasses and are never folded into a domain result.
    """

    def __init__(
        self,
        *,
        account_store: AccountStorePort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        event_sink: EventSinkPort,
        verifiers: Mapping[str, FederatedIdentityPort],
        password_reset_ttl_minutes: int = DEFAULT_PASSWORD_RESET_TTL_MINUTES,
    ):
        self._register = RegisterUserUseCase(
            account_store=account_store,
            password_hasher=password_hasher,
            token_port=token_port,
            event_sink=event_sink,
        )
        self._login = LoginLocalUseCase(
            account_store=account_store,
            password_hasher=password_hasher,
            token_port=token_port,
            event_sink=event_sink,
        )
        self._federated_auth = FederatedAuthUseCase(
            account_store=account_store,
            verifiers=verifiers,
            token_port=token_port,
            event_sink=event_sink,
        )
        self._refresh = RefreshSessionUseCase(account_store=account_store, token_port=token_port)
        self._validate = ValidateAccessTokenUseCase(account_store=account_store, token_port=token_port)
        self._logout = LogoutSessionUseCase(token_port=token_port)
        self._get_profile = GetProfileUseCase(account_store=account_store)
        self._forgot_password = ForgotPasswordUseCase(
            account_store=account_store,
            token_port=token_port,
            event_sink=event_sink,
            reset_ttl_minutes=password_reset_ttl_minutes,
        )
        self._reset_password = ResetPasswordUseCase(
            account_store=account_store,
            password_hasher=password_hasher,
            token_port=token_port,
            event_sink=event_sink,
        )
        self._change_password = ChangePasswordUseCase(
            account_store=account_store,
            password_hasher=password_hasher,
            event_sink=event_sink,
        )
        self._purge_expired = PurgeExpiredRefreshTokensUseCase(token_port=token_port)

    def register(self, *, email: str, name: str, password: str) -> AuthOutput:
        return self._register.execute(RegisterInput(email=email, name=name, password=password))

    def login(self, *, email: str, password: str) -> AuthOutput:
        return self._login.execute(LoginInput(email=email, password=password))

    def federated_auth(
        self,
        *,
        provider: str,
        token: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthOutput:
        return self._federated_auth.execute(
            FederatedAuthInput(
                provider=provider,
                token=token,
                first_name=first_name,
                last_name=last_name,
            )
        )

    def google_auth(self, *, id_token: str) -> AuthOutput:
        return self.federated_auth(provider="google", token=id_token)

    def apple_auth(
        self,
        *,
        identity_token: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthOutput:
        return self.federated_auth(
            provider="apple",
            token=identity_token,
            first_name=first_name,
            last_name=last_name,
        )

    def refresh_token(self, *, refresh_token: str) -> AuthOutput:
        return self._refresh.execute(RefreshTokenInput(refresh_token=refresh_token))

    def validate_token(self, *, access_token: str) -> ValidateTokenOutput:
        return self._validate.execute(ValidateTokenInput(access_token=access_token))

    def logout(self, *, refresh_token: str) -> LogoutOutput:
        return self._logout.execute(LogoutInput(refresh_token=refresh_token))

    def get_profile(self, *, account_id: str) -> UserInfo:
        return self._get_profile.execute(account_id=account_id)

    def forgot_password(self, *, email: str) -> MessageOutput:
        return self._forgot_password.execute(ForgotPasswordInput(email=email))

    def reset_password(self, *, token: str, new_password: str) -> MessageOutput:
        return self._reset_password.execute(ResetPasswordInput(token=token, new_password=new_password))

    def change_password(
        self,
        *,
        account_id: str,
        current_password: str,
        new_password: str,
    ) -> MessageOutput:
        return self._change_password.execute(
            ChangePasswordInput(
                account_id=account_id,
                current_password=current_password,
                new_password=new_password,
            )
        )

    def purge_expired_refresh_tokens(self) -> int:
        return self._purge_expired.execute()
