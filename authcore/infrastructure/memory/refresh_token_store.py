from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock

from authcore.application.ports.refresh_token_store_port import RefreshTokenStorePort
from authcore.domain.entities.account import RefreshTokenRecord


class InMemoryRefreshTokenStore(RefreshTokenStorePort):
    def __init__(self):
        self._tokens: dict[str, RefreshTokenRecord] = {}
        self._lock = Lock()

    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        record = RefreshTokenRecord(
            token=token,
            account_id=account_id,
            expires_at=expires_at,
            revoked=False,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._tokens[token] = record
        return record

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        return self._tokens.get(token)

    def consume(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        with self._lock:
            record = self._tokens.get(token)
            if record is None or not record.is_usable(now):
                return None
            self._tokens[token] = replace(record, revoked=True)
        return record

    def delete(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def revoke(self, token: str) -> None:
        with self._lock:
            record = self._tokens.get(token)
            if record is not None and not record.revoked:
                self._tokens[token] = replace(record, revoked=True)

    def revoke_all_for_user(self, account_id: str) -> int:
        revoked = 0
        with self._lock:
            for token, record in self._tokens.items():
                if record.account_id == account_id and not record.revoked:
                    self._tokens[token] = replace(record, revoked=True)
                    revoked += 1
        return revoked

    def delete_expired(self, *, now: datetime) -> int:
        with self._lock:
            expired = [token for token, record in self._tokens.items() if record.expires_at < now]
            for token in expired:
                del self._tokens[token]
        return len(expired)
