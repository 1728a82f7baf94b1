"""
Password and secret hashing with Argon2id.

Argon2id is the recommended password hashing algorithm because:
- Memory-hard (resists GPU/ASIC attacks)
- Side-channel resistant (id variant)
- No input length cap, so 88-character refresh secrets hash in full

The same hasher is used for account passwords and for refresh-token
secrets. Every call salts independently, so the two never share a hash.
"""

from typing import Optional

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

from authhub.core.config import Settings


class SecretHasher:
    """One-way, salted, adaptive-cost hashing of plaintext secrets."""

    def __init__(
        self,
        time_cost: int = 3,         # Number of iterations
        memory_cost: int = 65536,   # 64 MB memory usage
        parallelism: int = 4,       # Number of parallel threads
    ) -> None:
        self._ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
            type=Type.ID,
        )
        self._dummy_hash: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecretHasher":
        return cls(
            time_cost=settings.hash_time_cost,
            memory_cost=settings.hash_memory_cost,
            parallelism=settings.hash_parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """
        Hash a secret.

        Returns:
            The encoded hash string (includes algorithm, params, salt, and hash)
        """
        return self._ph.hash(plaintext)

    def verify(self, plaintext: str, hashed: Optional[str]) -> bool:
        """
        Verify a secret against its hash.

        Never raises: a mismatch, a malformed hash or a non-string input all
        return False.
        """
        if not isinstance(plaintext, str) or not isinstance(hashed, str) or not hashed:
            return False
        try:
            return self._ph.verify(hashed, plaintext)
        except (VerificationError, InvalidHashError, UnicodeError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """
        Check if a hash was produced with outdated parameters.

        After a successful login, check this and rehash if needed.
        """
        try:
            return self._ph.check_needs_rehash(hashed)
        except (InvalidHashError, UnicodeError):
            return True

    def burn(self, plaintext: str) -> None:
        """
        Spend one verification's worth of work against a throwaway hash.

        Used when there is no stored hash to check so the caller's latency
        does not reveal whether an account exists.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self._ph.hash("authhub-dummy-password")
        self.verify(plaintext, self._dummy_hash)
