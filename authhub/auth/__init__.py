"""
Authentication primitives.

Provides:
- JWT access token signing and validation
- Secret hashing (Argon2id) for passwords and refresh tokens
- Refresh secret generation

FastAPI dependencies live in `authhub.auth.dependencies`.
"""

from authhub.auth.jwt import (
    TokenPayload,
    TokenSigner,
)
from authhub.auth.password import SecretHasher
from authhub.auth.refresh import generate_refresh_secret

__all__ = [
    # JWT
    "TokenPayload",
    "TokenSigner",
    # Hashing
    "SecretHasher",
    "generate_refresh_secret",
]
