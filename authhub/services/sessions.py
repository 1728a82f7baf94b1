"""
Session lifecycle manager.

Registers accounts, authenticates credentials, issues access/refresh token
pairs, rotates refresh tokens and revokes them.

Every public operation runs as one transaction on the injected AsyncSession:
either all of its writes are committed or none are, and a session is only
returned after the commit succeeded.
"""

import contextlib
import uuid
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authhub.auth.jwt import TokenSigner
from authhub.auth.password import SecretHasher
from authhub.auth.refresh import generate_refresh_secret
from authhub.core.config import Settings
from authhub.core.logging import get_logger
from authhub.models.user import User, UserRole
from authhub.schemas.auth import AuthResponse
from authhub.services.errors import (
    AccountNotFound,
    DuplicateAccount,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidToken,
)
from authhub.services.store import CredentialStore

logger = get_logger(__name__)


class SessionManager:
    """
    Orchestrates the account session state machine.

    NoSession -> Active on register/login, Active -> Active on login/refresh
    (new token pair), Active -> NoSession on revoke. Expiry is detected
    lazily on the next refresh attempt.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        hasher: SecretHasher,
        signer: TokenSigner,
        secret_factory: Callable[[], str] = generate_refresh_secret,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = CredentialStore(db)
        self.settings = settings
        self.hasher = hasher
        self.signer = signer
        self._secret_factory = secret_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        return self._clock()

    @contextlib.asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[None]:
        """Commit on success; roll back and re-raise on any failure."""
        try:
            yield
            await self.store.commit()
        except Exception as exc:
            await self.store.rollback()
            logger.info("session_operation_failed", operation=operation, error_type=type(exc).__name__)
            raise

    def _lookup_email(self, email: str) -> str:
        if self.settings.email_case_insensitive:
            return email.strip().lower()
        return email

    # =========================================================================
    # Operations
    # =========================================================================

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        profile_image_url: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> AuthResponse:
        """
        Create an account with role `user` and open its first session.

        Raises:
            DuplicateAccount: the email is already registered
        """
        email = self._lookup_email(email)
        ci = self.settings.email_case_insensitive

        async with self._transaction("register"):
            if await self.store.email_exists(email, case_insensitive=ci):
                raise DuplicateAccount()

            account = User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=self.hasher.hash(password),
                role=UserRole.USER,
                email_verified=False,
                profile_image_url=profile_image_url,
                phone_number=phone_number,
            )
            self.store.add(account)
            try:
                await self.store.flush()
            except IntegrityError:
                # Lost a race with a concurrent registration for the same email
                raise DuplicateAccount() from None

            session = self._issue(account)
            account.set_refresh_token(
                self.hasher.hash(session.refresh_token), session.refresh_token_expiry
            )

        logger.info("account_registered", account_id=str(account.id))
        return session

    async def login(self, email: str, password: str) -> AuthResponse:
        """
        Authenticate by email and password and rotate the refresh token.

        Unknown email and wrong password raise the same error after the same
        amount of hashing work.

        Raises:
            InvalidCredentials: no such account, or the password is wrong
        """
        async with self._transaction("login"):
            account = await self.store.get_by_email(
                self._lookup_email(email),
                case_insensitive=self.settings.email_case_insensitive,
            )
            if account is None:
                self.hasher.burn(password)
                raise InvalidCredentials()
            if not self.hasher.verify(password, account.password_hash):
                raise InvalidCredentials()

            # Upgrade hashes made with older cost parameters
            if self.hasher.needs_rehash(account.password_hash):
                account.password_hash = self.hasher.hash(password)
                logger.info("password_rehashed", account_id=str(account.id))

            session = self._issue(account)
            account.set_refresh_token(
                self.hasher.hash(session.refresh_token), session.refresh_token_expiry
            )

        logger.info("login_succeeded", account_id=str(account.id))
        return session

    async def refresh(self, presented_secret: str) -> AuthResponse:
        """
        Exchange a refresh secret for a new access token and refresh secret.

        The presented secret is single-use: once rotation commits it no
        longer verifies against the stored hash.

        Raises:
            InvalidOrExpiredToken: nothing matches, the match has expired, or
                a concurrent rotation replaced the token first
        """
        async with self._transaction("refresh"):
            now = self._now()
            account = await self._find_by_refresh_secret(presented_secret)
            if account is None or account.refresh_token_expired(now):
                raise InvalidOrExpiredToken()

            session = self._issue(account, now)
            rotated = await self.store.swap_refresh_token(
                account,
                expected_hash=account.refresh_token_hash,
                new_hash=self.hasher.hash(session.refresh_token),
                new_expiry=session.refresh_token_expiry,
            )
            if not rotated:
                logger.warning("refresh_token_conflict", account_id=str(account.id))
                raise InvalidOrExpiredToken()

        logger.info("refresh_token_rotated", account_id=str(account.id))
        return session

    async def revoke(self, presented_secret: str) -> None:
        """
        Log out the session holding `presented_secret`.

        Raises:
            InvalidToken: no account's refresh hash verifies
        """
        async with self._transaction("revoke"):
            account = await self._find_by_refresh_secret(presented_secret)
            if account is None:
                raise InvalidToken()

            cleared = await self.store.swap_refresh_token(
                account,
                expected_hash=account.refresh_token_hash,
                new_hash=None,
                new_expiry=None,
            )
            if not cleared:
                raise InvalidToken()

        logger.info("refresh_token_revoked", account_id=str(account.id))

    async def revoke_by_account_id(self, account_id: Union[uuid.UUID, str]) -> None:
        """
        Clear the account's refresh token without checking a secret.

        Only for callers that already authenticated the account by other
        means (a valid access token).

        Raises:
            AccountNotFound: no account with this id
        """
        try:
            key = account_id if isinstance(account_id, uuid.UUID) else uuid.UUID(str(account_id))
        except ValueError:
            raise AccountNotFound() from None

        async with self._transaction("revoke_by_account_id"):
            account = await self.store.get_by_id(key)
            if account is None:
                raise AccountNotFound()
            account.clear_refresh_token()

        logger.info("refresh_token_revoked_by_account", account_id=str(key))

    # =========================================================================
    # Internals
    # =========================================================================

    async def _find_by_refresh_secret(self, presented_secret: str) -> Optional[User]:
        """Scan accounts with an active refresh hash until one verifies."""
        if not presented_secret:
            return None
        for account in await self.store.accounts_with_refresh_token():
            if self.hasher.verify(presented_secret, account.refresh_token_hash):
                return account
        return None

    def _issue(self, account: User, now: Optional[datetime] = None) -> AuthResponse:
        """
        Build a new session for `account`.

        Returns the plaintext refresh secret; hashing and persisting it is
        the caller's job.
        """
        now = now or self._now()
        role = UserRole(account.role).value
        token, expires_at = self.signer.sign(
            {
                "sub": str(account.id),
                "email": account.email,
                "name": account.full_name,
                "role": role,
            },
            now=now,
        )

        return AuthResponse(
            token=token,
            expires_at=expires_at,
            refresh_token=self._secret_factory(),
            refresh_token_expiry=now + self.settings.refresh_token_lifetime,
            user_id=account.id,
            email=account.email,
            full_name=account.full_name,
            role=role,
            profile_image_url=account.profile_image_url,
        )
