"""
Authentication endpoints.

Provides:
- Registration (account + first session)
- Login (email/password -> token pair)
- Token refresh (rotates the refresh token)
- Logout (revokes the refresh token)
- Current user profile
"""

from fastapi import APIRouter, Depends, Response, status

from authhub.auth.dependencies import get_current_user, get_session_manager
from authhub.core.logging import get_logger
from authhub.models.user import User
from authhub.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
)
from authhub.schemas.user import UserProfileResponse
from authhub.services.errors import InvalidToken
from authhub.services.sessions import SessionManager

logger = get_logger(__name__)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Create an account and return its first session.

    ⚠️ The refresh token is only shown once! Only its hash is stored.
    """
    return await manager.register(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
        profile_image_url=data.profile_image_url,
        phone_number=data.phone_number,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Authenticate user and return a new token pair."""
    return await manager.login(data.email, data.password)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    data: RefreshTokenRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Exchange a refresh token for a new token pair.

    The presented refresh token stops working once this succeeds.
    """
    return await manager.refresh(data.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    data: RefreshTokenRequest,
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Revoke the refresh token.

    If the presented refresh token does not verify, the caller's own session
    is revoked instead, identified by the access token.
    """
    # Read before revoke(): a rollback expires every loaded instance
    account_id = current_user.id

    try:
        await manager.revoke(data.refresh_token)
    except InvalidToken:
        logger.info("logout_fallback_by_account", account_id=str(account_id))
        await manager.revoke_by_account_id(account_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Get current user's profile information."""
    return UserProfileResponse.model_validate(current_user)
