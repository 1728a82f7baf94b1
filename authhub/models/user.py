"""
User (account) model.

Security considerations:
- Passwords are hashed with Argon2id; the plaintext never reaches this model
- At most one refresh token per account, stored only as a hash
- All timestamps use UTC
"""

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from authhub.core.database import Base


class UserRole(str, PyEnum):
    """Access levels."""
    USER = "user"
    ADMIN = "admin"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a stored timestamp to an aware UTC datetime.

    SQLite drops tzinfo on the way back, so naive values are read as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class User(Base):
    """
    Account record.

    `refresh_token_hash` and `refresh_token_expiry` are set together by
    `set_refresh_token` and cleared together by `clear_refresh_token`.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Profile
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    # Authentication
    email: Mapped[str] = mapped_column(String(150), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False, default=UserRole.USER)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Active refresh token (hashed)
    refresh_token_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    refresh_token_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<User {self.id}>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def has_active_session(self) -> bool:
        return self.refresh_token_hash is not None

    def set_refresh_token(self, token_hash: str, expires_at: datetime) -> None:
        """Replace the active refresh token (overwrite, never append)."""
        self.refresh_token_hash = token_hash
        self.refresh_token_expiry = expires_at

    def clear_refresh_token(self) -> None:
        self.refresh_token_hash = None
        self.refresh_token_expiry = None

    def refresh_token_expired(self, now: Optional[datetime] = None) -> bool:
        """True when there is no expiry or it is at/before `now`."""
        expiry = as_utc(self.refresh_token_expiry)
        if expiry is None:
            return True
        return expiry <= (now or datetime.now(timezone.utc))
