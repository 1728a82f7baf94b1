"""
FastAPI dependencies for authentication and authorization.

Provides:
- get_session_manager: SessionManager bound to the request's DB session
- get_current_user: Extract and validate user from JWT
- require_role: Restrict an endpoint to specific roles
"""

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from authhub.auth.jwt import TokenSigner
from authhub.auth.password import SecretHasher
from authhub.core.config import Settings
from authhub.core.database import get_db
from authhub.models.user import User, UserRole
from authhub.services.sessions import SessionManager

# HTTP Bearer token extractor
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_signer(request: Request) -> TokenSigner:
    return request.app.state.signer


def get_hasher(request: Request) -> SecretHasher:
    return request.app.state.hasher


def get_session_manager(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    hasher: SecretHasher = Depends(get_hasher),
    signer: TokenSigner = Depends(get_signer),
) -> SessionManager:
    return SessionManager(db, settings, hasher, signer)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_signer),
) -> User:
    """
    Extract and validate the current user from the access token.

    Looks for token in:
    1. Authorization: Bearer <token> header
    2. Cookie: access_token

    Raises:
        HTTPException 401: If token is missing or invalid, or the user is gone
    """
    token = credentials.credentials if credentials else request.cookies.get("access_token")
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = signer.verify(token)
        account_id = uuid.UUID(payload.sub)
    except (JWTError, ValueError) as e:
        raise _unauthorized(str(e))

    user = await db.get(User, account_id)
    if user is None:
        raise _unauthorized("User not found")

    return user


def require_role(*allowed_roles: UserRole):
    """
    Dependency to require specific role(s).

    Usage:
        @router.get("/admin-only")
        async def admin_endpoint(
            user: User = Depends(require_role(UserRole.ADMIN))
        ):
            ...
    """
    async def role_checker(
        current_user: User = Depends(get_current_user),
    ) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role.value}' not authorized for this action",
            )
        return current_user

    return role_checker
