"""
Refresh secret generation.

A refresh secret is an opaque bearer value: random bytes, URL-safe base64,
no embedded structure or metadata.
"""

import secrets

REFRESH_SECRET_BYTES = 64


def generate_refresh_secret(num_bytes: int = REFRESH_SECRET_BYTES) -> str:
    """Return `num_bytes` of CSPRNG output as an unpadded URL-safe string."""
    if num_bytes < 32:
        raise ValueError("Refresh secrets need at least 256 bits of entropy")
    return secrets.token_urlsafe(num_bytes)
