"""
Session lifecycle services.

`authhub.services.sessions.SessionManager` is the entry point; the error
taxonomy is re-exported here.
"""

from authhub.services.errors import (
    AccountNotFound,
    AuthError,
    ConfigurationMissing,
    DuplicateAccount,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidToken,
)

__all__ = [
    "AuthError",
    "AccountNotFound",
    "ConfigurationMissing",
    "DuplicateAccount",
    "InvalidCredentials",
    "InvalidOrExpiredToken",
    "InvalidToken",
]
