from __future__ import annotations

from typing import Protocol

from authcore.application.dto.auth import AccountUpdate, NewAccount
from authcore.domain.entities.account import AccountIdentity


class AccountStorePort(Protocol):
    def create(self, data: NewAccount) -> AccountIdentity:
        ...

    def find_by_id(self, account_id: str) -> AccountIdentity | None:
        ...

    def find_by_email(self, email: str) -> AccountIdentity | None:
        ...

    def find_by_provider(self, provider: str, provider_id: str) -> AccountIdentity | None:
        ...

    def find_by_reset_token(self, token_hash: str) -> AccountIdentity | None:
        ...

    def update(self, account_id: str, data: AccountUpdate) -> AccountIdentity | None:
        ...
