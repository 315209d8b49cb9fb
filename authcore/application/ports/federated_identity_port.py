from __future__ import annotations

from typing import Protocol

from authcore.application.dto.auth import FederatedIdentity


class FederatedIdentityPort(Protocol):
    def verify(self, raw_token: str) -> FederatedIdentity | None:
        ...
