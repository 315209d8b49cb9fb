from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from uuid import uuid4

from authcore.application.dto.auth import AccountUpdate, NewAccount
from authcore.application.ports.account_store_port import AccountStorePort
from authcore.domain.entities.account import AccountIdentity
from authcore.domain.exceptions import AccountAlreadyExistsError


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class InMemoryAccountStore(AccountStorePort):
    """Dict-backed account store enforcing the same uniqueness rules as SQL."""

    def __init__(self):
        self._accounts: dict[str, AccountIdentity] = {}
        self._lock = Lock()

    def create(self, data: NewAccount) -> AccountIdentity:
        email = _normalize_email(data.email)
        now = datetime.now(timezone.utc)
        with self._lock:
            for account in self._accounts.values():
                if account.email == email:
                    raise AccountAlreadyExistsError()
                if data.provider_id is not None and (
                    account.provider == data.provider and account.provider_id == data.provider_id
                ):
                    raise AccountAlreadyExistsError()
            account = AccountIdentity(
                id=str(uuid4()),
                email=email,
                name=data.name,
                password_hash=data.password_hash,
                provider=data.provider,
                provider_id=data.provider_id,
                password_reset_token=None,
                password_reset_expires_at=None,
                created_at=now,
                updated_at=now,
            )
            self._accounts[account.id] = account
        return account

    def find_by_id(self, account_id: str) -> AccountIdentity | None:
        return self._accounts.get(account_id)

    def find_by_email(self, email: str) -> AccountIdentity | None:
        email = _normalize_email(email)
        return self._find(lambda account: account.email == email)

    def find_by_provider(self, provider: str, provider_id: str) -> AccountIdentity | None:
        return self._find(
            lambda account: account.provider == provider and account.provider_id == provider_id
        )

    def find_by_reset_token(self, token_hash: str) -> AccountIdentity | None:
        return self._find(lambda account: account.password_reset_token == token_hash)

    def update(self, account_id: str, data: AccountUpdate) -> AccountIdentity | None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None

            changes: dict = {"updated_at": datetime.now(timezone.utc)}
            if data.email is not None:
                email = _normalize_email(data.email)
                if any(other.email == email and other.id != account_id for other in self._accounts.values()):
                    raise AccountAlreadyExistsError()
                changes["email"] = email
            if data.name is not None:
                changes["name"] = data.name
            if data.password_hash is not None:
                changes["password_hash"] = data.password_hash
            if data.clear_password_reset:
                changes["password_reset_token"] = None
                changes["password_reset_expires_at"] = None
            else:
                if data.password_reset_token is not None:
                    changes["password_reset_token"] = data.password_reset_token
                if data.password_reset_expires_at is not None:
                    changes["password_reset_expires_at"] = data.password_reset_expires_at

            updated = replace(account, **changes)
            self._accounts[account_id] = updated
        return updated

    def _find(self, predicate) -> AccountIdentity | None:
        with self._lock:
            for account in self._accounts.values():
                if predicate(account):
                    return account
        return None
