"""
AuthHub Database Models

This module exports all SQLAlchemy models for the application.
"""

from authhub.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
]
