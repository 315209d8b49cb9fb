from __future__ import annotations

from authcore.application.dto.auth import LogoutInput, LogoutOutput
from authcore.application.ports.token_port import TokenPort


class LogoutSessionUseCase:
    def __init__(self, *, token_port: TokenPort):
        self._token_port = token_port

    def execute(self, command: LogoutInput) -> LogoutOutput:
        token = command.refresh_token.strip()
        if token:
            self._token_port.revoke_refresh_token(token)
        return LogoutOutput(success=True)
