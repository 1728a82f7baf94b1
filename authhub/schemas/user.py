"""
User-related schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from authhub.models.user import UserRole


class UserResponse(BaseModel):
    """Schema for user response (no sensitive data)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole


class UserProfileResponse(UserResponse):
    """Extended profile for self-view."""

    full_name: str
    phone_number: Optional[str] = None
    profile_image_url: Optional[str] = None
    email_verified: bool
    has_active_session: bool
    created_at: datetime
