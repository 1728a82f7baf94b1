"""
Pydantic request/response schemas.
"""

from authhub.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
)
from authhub.schemas.common import ErrorResponse, HealthResponse
from authhub.schemas.user import UserProfileResponse, UserResponse

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "ErrorResponse",
    "HealthResponse",
    "UserProfileResponse",
    "UserResponse",
]
