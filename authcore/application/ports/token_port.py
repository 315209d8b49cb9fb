from __future__ import annotations

from typing import Protocol

from authcore.application.dto.auth import TokenPair
from authcore.domain.entities.account import AccessTokenClaims


class TokenPort(Protocol):
    def generate_token_pair(self, claims: AccessTokenClaims) -> TokenPair:
        ...

    def validate_access_token(self, token: str) -> AccessTokenClaims | None:
        ...

    def validate_refresh_token(self, token: str) -> str | None:
        ...

    def consume_refresh_token(self, token: str) -> str | None:
        ...

    def revoke_refresh_token(self, token: str) -> None:
        ...

    def revoke_all_user_tokens(self, account_id: str) -> None:
        ...

    def generate_password_reset_token(self) -> str:
        ...

    def hash_token(self, token: str) -> str:
        ...

    def purge_expired_refresh_tokens(self) -> int:
        ...
