from __future__ import annotations

from passlib.context import CryptContext

from authcore.application.ports.password_hasher_port import PasswordHasherPort
from authcore.domain.services.password_policy import PasswordStrength, validate_password_strength


DEFAULT_BCRYPT_ROUNDS = 12


class PasswordHasher(PasswordHasherPort):
    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self._ctx = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain_password: str) -> str:
        return self._ctx.hash(plain_password)

    def compare(self, plain_password: str, password_hash: str) -> bool:
        try:
            return bool(self._ctx.verify(plain_password, password_hash))
        except (ValueError, TypeError):
            # Unrecognised hash: spend the same work as a real mismatch.
            self._ctx.dummy_verify()
            return False

    def dummy_verify(self) -> None:
        self._ctx.dummy_verify()

    def validate_strength(self, plain_password: str) -> PasswordStrength:
        return validate_password_strength(plain_password)
