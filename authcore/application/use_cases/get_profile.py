from __future__ import annotations

from authcore.application.dto.auth import UserInfo
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.domain.exceptions import AccountNotFoundError

from .auth_common import build_user_info


class GetProfileUseCase:
    def __init__(self, *, account_store: AccountStorePort):
        self._account_store = account_store

    def execute(self, *, account_id: str) -> UserInfo:
        account = self._account_store.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return build_user_info(account)
