from __future__ import annotations

from authcore.application.ports.token_port import TokenPort


class PurgeExpiredRefreshTokensUseCase:
    def __init__(self, *, token_port: TokenPort):
        self._token_port = token_port

    def execute(self) -> int:
        return self._token_port.purge_expired_refresh_tokens()
