"""
Authentication-related schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class RegisterRequest(BaseModel):
    """Registration request."""

    first_name: str = Field(min_length=1, max_length=50, description="First name")
    last_name: str = Field(min_length=1, max_length=50, description="Last name")
    email: EmailStr = Field(description="Email address used to log in")
    password: str = Field(min_length=6, max_length=128, description="Account password")
    confirm_password: str = Field(max_length=128, description="Must equal password")
    phone_number: Optional[str] = Field(default=None, max_length=32)
    profile_image_url: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class LoginRequest(BaseModel):
    """Login request with email and password."""

    email: EmailStr = Field(description="User email address")
    password: str = Field(min_length=1, max_length=128, description="User password")


class RefreshTokenRequest(BaseModel):
    """Request carrying the current refresh token."""

    refresh_token: str = Field(min_length=1, max_length=512, description="Current refresh token")


class AuthResponse(BaseModel):
    """
    Issued session.

    `refresh_token` is the plaintext secret. It is returned exactly once and
    only its hash is stored.
    """

    token: str = Field(description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(description="Access token expiry (UTC)")
    refresh_token: str = Field(description="Opaque refresh secret")
    refresh_token_expiry: datetime = Field(description="Refresh token expiry (UTC)")

    # User info
    user_id: uuid.UUID
    email: str
    full_name: str
    role: str
    profile_image_url: Optional[str] = None
