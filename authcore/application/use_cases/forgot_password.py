from __future__ import annotations

from datetime import timedelta
import logging

from authcore.application.dto.auth import AccountUpdate, ForgotPasswordInput, MessageOutput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.event_sink_port import EventSinkPort
from authcore.application.ports.token_port import TokenPort
from authcore.domain import events

from .auth_common import normalize_email, utcnow


logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link will be sent."


class ForgotPasswordUseCase:
    def __init__(
        self,
        *,
        account_store: AccountStorePort,
        token_port: TokenPort,
        event_sink: EventSinkPort,
        reset_ttl_minutes: int,
    ):
        self._account_store = account_store
        self._token_port = token_port
        self._event_sink = event_sink
        self._reset_ttl = timedelta(minutes=reset_ttl_minutes)

    def execute(self, command: ForgotPasswordInput) -> MessageOutput:
        response = MessageOutput(success=True, message=FORGOT_PASSWORD_MESSAGE)

        account = self._account_store.find_by_email(normalize_email(command.email))
        if account is None or not account.has_password:
            return response

        now = utcnow()
        expires_at = now + self._reset_ttl
        reset_token = self._token_port.generate_password_reset_token()
        self._account_store.update(
            account.id,
            AccountUpdate(
                password_reset_token=self._token_port.hash_token(reset_token),
                password_reset_expires_at=expires_at,
            ),
        )
        logger.info("forgot_password: reset_token_issued account_id=%s", account.id)

        self._event_sink.emit(
            events.PASSWORD_RESET_REQUESTED,
            {
                "userId": account.id,
                "email": account.email,
                "token": reset_token,
                "expiresAt": expires_at.isoformat(),
                "requestedAt": now.isoformat(),
            },
        )
        return response
