from __future__ import annotations

from authcore.application.dto.auth import AccountUpdate, ChangePasswordInput, MessageOutput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.domain import events
from authcore.domain.exceptions import (
    AccountNotFoundError,
    CurrentPasswordIncorrectError,
    PasswordNotAvailableForProviderError,
    WeakPasswordError,
)

from .auth_common import utcnow


class ChangePasswordUseCase:
    """Replace the password of a signed-in account.

    Unlike a reset, existing refresh tokens stay valid.
    """

    def __init__(
        self,
        *,
        account_store: AccountStorePort,
        password_hasher: PasswordHasherPort,
        event_sink: EventSinkPort,
    ):
        self._account_store = account_store
        self._password_hasher = password_hasher
        self._event_sink = event_sink

    def execute(self, command: ChangePasswordInput) -> MessageOutput:
        account = self._account_store.find_by_id(command.account_id)
        if account is None:
            raise AccountNotFoundError()
        if not account.has_password:
            raise PasswordNotAvailableForProviderError()

        if not self._password_hasher.compare(command.current_password, account.password_hash):
            raise CurrentPasswordIncorrectError()

        strength = self._password_hasher.validate_strength(command.new_password)
        if not strength.valid:
            raise WeakPasswordError(strength.reason)

        self._account_store.update(
            account.id,
            AccountUpdate(password_hash=self._password_hasher.hash(command.new_password)),
        )

        self._event_sink.emit(
            events.PASSWORD_CHANGED,
            {
                "userId": account.id,
                "email": account.email,
                "changedAt": utcnow().isoformat(),
            },
        )
        return MessageOutput(success=True, message="Password has been changed successfully")
