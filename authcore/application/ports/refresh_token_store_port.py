from __future__ import annotations

from datetime import datetime
from typing import Protocol

from authcore.domain.entities.account import RefreshTokenRecord


class RefreshTokenStorePort(Protocol):
    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        ...

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        ...

    def consume(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        """Revoke ``token`` only if it is unrevoked and unexpired at ``now``.

        Returns the record as it was before revocation, or ``None`` when the
        conditional update matched nothing.
        """
        ...

    def delete(self, token: str) -> None:
        ...

    def revoke(self, token: str) -> None:
        ...

    def revoke_all_for_user(self, account_id: str) -> int:
        ...

    def delete_expired(self, *, now: datetime) -> int:
        ...
