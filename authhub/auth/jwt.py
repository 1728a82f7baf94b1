"""
JWT access-token signing and verification.

Security measures:
- Short-lived access tokens (60 min default)
- Symmetric HS256 key held by the server, validated at startup
- Issuer, audience and token type validation
- Unique `jti` per token
"""

import secrets
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from authhub.core.config import MIN_SIGNING_KEY_LENGTH, Settings
from authhub.core.logging import get_logger
from authhub.services.errors import ConfigurationMissing

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


class TokenPayload(BaseModel):
    """JWT token payload structure."""
    sub: str                          # Account ID (subject)
    email: str                        # Account email
    name: str                         # Display name
    role: str                         # Account role
    type: str                         # Always "access"
    iat: datetime                     # Issued at
    exp: datetime                     # Expiration
    iss: str                          # Issuer
    aud: str                          # Audience
    jti: Optional[str] = None         # JWT ID


class TokenSigner:
    """
    Issues and verifies signed, time-bounded access tokens.

    Construction fails with ConfigurationMissing when no usable signing key
    is configured, unless the environment allows an ephemeral key.
    """

    def __init__(self, settings: Settings) -> None:
        key = settings.jwt_secret_key
        if not key:
            if not settings.allows_ephemeral_signing_key:
                raise ConfigurationMissing(
                    "JWT_SECRET_KEY is not configured. Set it, or set "
                    "AUTHHUB_ENV=development for an ephemeral key."
                )
            key = secrets.token_urlsafe(32)
            logger.warning("jwt_ephemeral_key_generated", environment=settings.environment)
        elif len(key) < MIN_SIGNING_KEY_LENGTH and not settings.allows_ephemeral_signing_key:
            raise ConfigurationMissing(
                f"JWT_SECRET_KEY must be at least {MIN_SIGNING_KEY_LENGTH} characters"
            )

        self._key = key
        self.algorithm = settings.jwt_algorithm
        self.issuer = settings.jwt_issuer
        self.audience = settings.jwt_audience
        self.lifetime = settings.access_token_lifetime

    def sign(self, claims: dict[str, Any], now: Optional[datetime] = None) -> Tuple[str, datetime]:
        """
        Create an access token carrying `claims`.

        Args:
            claims: Identity claims (sub, email, name, role)
            now: Issue time; defaults to the current UTC time

        Returns:
            (encoded JWT string, expiry datetime)
        """
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self.lifetime

        payload = dict(claims)
        payload.update({
            "type": ACCESS_TOKEN_TYPE,
            "iat": issued_at,
            "exp": expires_at,
            "iss": self.issuer,
            "aud": self.audience,
            "jti": secrets.token_urlsafe(16),
        })

        token = jwt.encode(payload, self._key, algorithm=self.algorithm)
        # JWT timestamps have second precision; report what the token carries
        return token, expires_at.replace(microsecond=0)

    def verify(self, token: str) -> TokenPayload:
        """
        Verify and decode an access token.

        Raises:
            JWTError: If the token is invalid, expired, or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            raise JWTError("Token has expired")

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise JWTError(f"Invalid token type. Expected {ACCESS_TOKEN_TYPE}, got {payload.get('type')}")

        try:
            return TokenPayload(
                sub=payload["sub"],
                email=payload["email"],
                name=payload["name"],
                role=payload["role"],
                type=payload["type"],
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iss=payload["iss"],
                aud=payload["aud"],
                jti=payload.get("jti"),
            )
        except KeyError as e:
            raise JWTError(f"Token is missing claim {e.args[0]}")
