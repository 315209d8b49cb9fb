from __future__ import annotations

from authcore.application.dto.auth import AuthOutput, LoginInput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain.exceptions import InvalidCredentialsError, WrongProviderError

from .auth_common import emit_logged_in, issue_tokens, normalize_email


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        account_store: AccountStorePort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        event_sink: EventSinkPort,
    ):
        self._account_store = account_store
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._event_sink = event_sink

    def execute(self, command: LoginInput) -> AuthOutput:
        account = self._account_store.find_by_email(normalize_email(command.email))
        if account is None:
            self._password_hasher.dummy_verify()
            raise InvalidCredentialsError()

        if not account.has_password:
            raise WrongProviderError(account.provider)

        if not self._password_hasher.compare(command.password, account.password_hash):
            raise InvalidCredentialsError()

        output = issue_tokens(account=account, token_port=self._token_port)
        emit_logged_in(self._event_sink, account)
        return output
