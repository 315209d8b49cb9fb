from __future__ import annotations

import logging

from authcore.application.dto.auth import AuthOutput, RefreshTokenInput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.token_port import TokenPort
from authcore.domain.exceptions import InvalidRefreshTokenError

from .auth_common import issue_tokens


logger = logging.getLogger(__name__)


class RefreshSessionUseCase:
    def __init__(self, *, account_store: AccountStorePort, token_port: TokenPort):
        self._account_store = account_store
        self._token_port = token_port

    def execute(self, command: RefreshTokenInput) -> AuthOutput:
        token = command.refresh_token.strip()
        if not token:
            raise InvalidRefreshTokenError()

        # Validation and revocation happen in one conditional update, so a
        # replayed or concurrently presented token can mint at most once.
        account_id = self._token_port.consume_refresh_token(token)
        if account_id is None:
            raise InvalidRefreshTokenError()

        account = self._account_store.find_by_id(account_id)
        if account is None:
            logger.warning("refresh_session: account_missing account_id=%s", account_id)
            raise InvalidRefreshTokenError()

        return issue_tokens(account=account, token_port=self._token_port)
