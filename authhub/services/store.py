"""
Credential store.

Thin repository over an AsyncSession for the queries the session lifecycle
needs. Writes are staged on the session; the caller owns commit/rollback so
each lifecycle operation is a single transaction.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authhub.models.user import User


class CredentialStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_email(self, email: str, case_insensitive: bool = False) -> Optional[User]:
        if case_insensitive:
            condition = func.lower(User.email) == email.lower()
        else:
            condition = User.email == email
        result = await self.db.execute(select(User).where(condition))
        return result.scalars().first()

    async def get_by_id(self, account_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, account_id)

    async def email_exists(self, email: str, case_insensitive: bool = False) -> bool:
        return await self.get_by_email(email, case_insensitive) is not None

    async def accounts_with_refresh_token(self) -> list[User]:
        """
        Return every account holding a refresh-token hash.

        Refresh secrets are stored only as salted hashes, so an account cannot
        be looked up by secret. Callers verify the presented secret against
        each returned hash. This is linear in the number of active sessions.
        To scale, issue tokens as "<handle>.<secret>" with a random, non-secret
        handle column and replace this scan with a lookup by handle; the hash
        check stays the same.
        """
        result = await self.db.execute(
            select(User)
            .where(User.refresh_token_hash.is_not(None))
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def list_accounts(self, limit: int = 100, offset: int = 0) -> list[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    def add(self, account: User) -> None:
        self.db.add(account)

    async def flush(self) -> None:
        await self.db.flush()

    async def swap_refresh_token(
        self,
        account: User,
        expected_hash: str,
        new_hash: Optional[str],
        new_expiry: Optional[datetime],
    ) -> bool:
        """
        Conditionally replace (or clear) the account's refresh token.

        The UPDATE only matches while the stored hash is still
        `expected_hash`. Returns False when another writer got there first.
        On success the session refreshes the in-memory account to match.
        """
        if (new_hash is None) != (new_expiry is None):
            raise ValueError("refresh token hash and expiry must be set or cleared together")

        result = await self.db.execute(
            update(User)
            .where(User.id == account.id, User.refresh_token_hash == expected_hash)
            .values(refresh_token_hash=new_hash, refresh_token_expiry=new_expiry)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
