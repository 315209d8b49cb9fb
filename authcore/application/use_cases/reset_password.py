from __future__ import annotations

import logging

from authcore.application.dto.auth import AccountUpdate, MessageOutput, ResetPasswordInput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain import events
from authcore.domain.exceptions import InvalidOrExpiredResetTokenError, WeakPasswordError

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class ResetPasswordUseCase:
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

    def execute(self, command: ResetPasswordInput) -> MessageOutput:
        token = command.token.strip()
        account = None
        if token:
            account = self._account_store.find_by_reset_token(self._token_port.hash_token(token))
        if (
            account is None
            or account.password_reset_expires_at is None
            or account.password_reset_expires_at < utcnow()
        ):
            raise InvalidOrExpiredResetTokenError()

        strength = self._password_hasher.validate_strength(command.new_password)
        if not strength.valid:
            raise WeakPasswordError(strength.reason)

        self._account_store.update(
            account.id,
            AccountUpdate(
                password_hash=self._password_hasher.hash(command.new_password),
                clear_password_reset=True,
            ),
        )
        self._token_port.revoke_all_user_tokens(account.id)
        logger.info("reset_password: completed account_id=%s", account.id)

        self._event_sink.emit(
            events.PASSWORD_RESET_COMPLETED,
            {
                "userId": account.id,
                "email": account.email,
                "completedAt": utcnow().isoformat(),
            },
        )
        return MessageOutput(success=True, message="Password has been reset successfully")
