from __future__ import annotations

from dataclasses import dataclass
import re


MIN_PASSWORD_LENGTH = 8
# bcrypt ignores everything past 72 bytes.
MAX_PASSWORD_BYTES = 72

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
)


@dataclass(frozen=True)
class PasswordStrength:
    valid: bool
    reason: str | None = None


def validate_password_strength(password: str) -> PasswordStrength:
    """Check ``password`` against the policy and report the first failing rule.

    Rules run in order: minimum length, maximum encoded size, uppercase,
    lowercase, digit. Only the first violation is reported.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return PasswordStrength(
            valid=False,
            reason=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return PasswordStrength(
            valid=False,
            reason=f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
        )
    for pattern, message in _RULES:
        if not pattern.search(password):
            return PasswordStrength(valid=False, reason=message)
    return PasswordStrength(valid=True)
