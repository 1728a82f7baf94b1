"""
API Router configuration.

Aggregates all v1 API endpoints with proper tagging and prefixes.
"""

from fastapi import APIRouter

from authhub.api.v1.endpoints import auth, users

api_router = APIRouter()

# Authentication (no auth required for register/login/refresh)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

# User management (requires admin)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)
