"""
Error taxonomy for the session lifecycle.

Each error carries the HTTP status and a stable error code so the API layer
can map it without inspecting messages. Messages never include secret
material.
"""

from typing import Optional


class AuthError(Exception):
    """Base class for recoverable authentication errors."""

    status_code: int = 400
    error_code: str = "bad_request"
    default_message: str = "Authentication request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateAccount(AuthError):
    """An account with this email already exists."""

    status_code = 409
    error_code = "duplicate_account"
    default_message = "A user with the provided email already exists."


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    status_code = 401
    error_code = "invalid_credentials"
    default_message = "Invalid credentials."


class InvalidOrExpiredToken(AuthError):
    status_code = 401
    error_code = "invalid_or_expired_token"
    default_message = "Invalid or expired refresh token."


class InvalidToken(AuthError):
    status_code = 401
    error_code = "invalid_token"
    default_message = "Invalid refresh token."


class AccountNotFound(AuthError):
    status_code = 404
    error_code = "account_not_found"
    default_message = "User not found."


class ConfigurationMissing(Exception):
    """
    Required configuration is absent.

    Not an AuthError: this is raised while the process starts and is never
    mapped to an HTTP response.
    """


__all__ = [
    "AuthError",
    "DuplicateAccount",
    "InvalidCredentials",
    "InvalidOrExpiredToken",
    "InvalidToken",
    "AccountNotFound",
    "ConfigurationMissing",
]
