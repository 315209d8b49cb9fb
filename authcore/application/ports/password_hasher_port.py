from __future__ import annotations

from typing import Protocol

from authcore.domain.services.password_policy import PasswordStrength


class PasswordHasherPort(Protocol):
    def hash(self, plain_password: str) -> str:
        ...

    def compare(self, plain_password: str, password_hash: str) -> bool:
        ...

    def dummy_verify(self) -> None:
        ...

    def validate_strength(self, plain_password: str) -> PasswordStrength:
        ...
