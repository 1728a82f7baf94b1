"""
User management endpoints.

Admin only.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from authhub.auth.dependencies import require_role
from authhub.core.database import get_db
from authhub.models.user import User, UserRole
from authhub.schemas.user import UserResponse
from authhub.services.store import CredentialStore

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List accounts, oldest first."""
    accounts = await CredentialStore(db).list_accounts(limit=limit, offset=offset)
    return [UserResponse.model_validate(account) for account in accounts]
