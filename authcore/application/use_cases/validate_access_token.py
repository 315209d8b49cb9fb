from __future__ import annotations

from authcore.application.dto.auth import ValidateTokenInput, ValidateTokenOutput
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.application.ports.token_port import TokenPort

from .auth_common import build_user_info


class ValidateAccessTokenUseCase:
    def __init__(self, *, account_store: AccountStorePort, token_port: TokenPort):
        self._account_store = account_store
        self._token_port = token_port

    def execute(self, command: ValidateTokenInput) -> ValidateTokenOutput:
        claims = self._token_port.validate_access_token(command.access_token)
        if claims is None:
            return ValidateTokenOutput(valid=False)

        account = self._account_store.find_by_id(claims.sub)
        if account is None:
            return ValidateTokenOutput(valid=False)

        return ValidateTokenOutput(valid=True, user=build_user_info(account))
