from __future__ import annotations

from enum import Enum


class DomainError(Exception):
    """Base for expected domain failures."""


class AuthErrorCode(str, Enum):
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    WRONG_PROVIDER = "WRONG_PROVIDER"
    INVALID_PROVIDER_TOKEN = "INVALID_PROVIDER_TOKEN"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    PROVIDER_CONFLICT = "PROVIDER_CONFLICT"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    NOT_AVAILABLE_FOR_PROVIDER = "NOT_AVAILABLE_FOR_PROVIDER"
    CURRENT_PASSWORD_INCORRECT = "CURRENT_PASSWORD_INCORRECT"
    UNSUPPORTED_PROVIDER = "UNSUPPORTED_PROVIDER"


class AuthError(DomainError):
    """Expected authentication failure; callers branch on ``code``."""

    code: AuthErrorCode
    default_message = "Authentication failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccountAlreadyExistsError(AuthError):
    code = AuthErrorCode.ALREADY_EXISTS
    default_message = "User with this email already exists"


class InvalidCredentialsError(AuthError):
    code = AuthErrorCode.INVALID_CREDENTIALS
    default_message = "Invalid email or password"


class WrongProviderError(AuthError):
    code = AuthErrorCode.WRONG_PROVIDER

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Please sign in with {provider}")


class InvalidProviderTokenError(AuthError):
    code = AuthErrorCode.INVALID_PROVIDER_TOKEN

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Invalid {provider.capitalize()} token")


class EmailNotVerifiedError(AuthError):
    code = AuthErrorCode.EMAIL_NOT_VERIFIED
    default_message = "Google email not verified"


class ProviderConflictError(AuthError):
    code = AuthErrorCode.PROVIDER_CONFLICT
    default_message = (
        "An account with this email already exists. Please sign in with your original method."
    )


class InvalidRefreshTokenError(AuthError):
    code = AuthErrorCode.INVALID_REFRESH_TOKEN
    default_message = "Invalid or expired refresh token"


class AccountNotFoundError(AuthError):
    code = AuthErrorCode.NOT_FOUND
    default_message = "User not found"


class InvalidOrExpiredResetTokenError(AuthError):
    code = AuthErrorCode.INVALID_OR_EXPIRED_TOKEN
    default_message = "Invalid or expired password reset token"


class WeakPasswordError(AuthError):
    code = AuthErrorCode.WEAK_PASSWORD
    default_message = "Invalid password"


class PasswordNotAvailableForProviderError(AuthError):
    code = AuthErrorCode.NOT_AVAILABLE_FOR_PROVIDER
    default_message = "Password change not available for OAuth users"


class CurrentPasswordIncorrectError(AuthError):
    code = AuthErrorCode.CURRENT_PASSWORD_INCORRECT
    default_message = "Current password is incorrect"


class UnsupportedProviderError(AuthError):
    code = AuthErrorCode.UNSUPPORTED_PROVIDER

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unsupported identity provider: {provider}")


class InfrastructureError(RuntimeError):
    """Base for failures of a collaborator (database, network)."""


class StoreUnavailableError(InfrastructureError):
    pass


class IdentityProviderUnavailableError(InfrastructureError):
    pass


class ConfigurationError(RuntimeError):
    pass
