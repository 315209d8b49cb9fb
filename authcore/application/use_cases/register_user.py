from __future__ import annotations

from authcore.application.dto.auth import AuthOutput, NewAccount, RegisterInput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain.exceptions import AccountAlreadyExistsError, WeakPasswordError

from .auth_common import emit_registered, issue_tokens, normalize_email


class RegisterUserUseCase:
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

    def execute(self, command: RegisterInput) -> AuthOutput:
        email = normalize_email(command.email)
        if self._account_store.find_by_email(email) is not None:
            raise AccountAlreadyExistsError()

        strength = self._password_hasher.validate_strength(command.password)
        if not strength.valid:
            raise WeakPasswordError(strength.reason)

        # A concurrent registration that slips past the lookup above is
        # rejected by the store's unique constraint as AccountAlreadyExistsError.
        account = self._account_store.create(
            NewAccount(
                email=email,
                name=command.name.strip(),
                provider="password",
                password_hash=self._password_hasher.hash(command.password),
            )
        )

        output = issue_tokens(account=account, token_port=self._token_port)
        emit_registered(self._event_sink, account)
        return output
