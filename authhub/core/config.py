"""
Application configuration.

Settings are read once from the environment (after loading `.env`) into an
explicit `Settings` object that is passed to the components that need it.
Nothing below reads the environment per request.
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Base directory of the project (parent of 'authhub')
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Database Directory
DB_DIR = BASE_DIR / "db"

# Refresh tokens are valid for a fixed window; not configurable
REFRESH_TOKEN_LIFETIME = timedelta(days=7)

# Environments in which a missing signing key is replaced by an ephemeral one
EPHEMERAL_KEY_ENVIRONMENTS = {"development", "test"}

MIN_SIGNING_KEY_LENGTH = 32


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime configuration for the auth service."""

    environment: str = Field(default="production", description="production, development or test")

    # Token signing
    jwt_secret_key: Optional[str] = Field(default=None, repr=False)
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "authhub"
    jwt_audience: str = "authhub-client"
    access_token_expire_minutes: int = Field(default=60, ge=1)

    # Persistence
    database_url: str = f"sqlite+aiosqlite:///{DB_DIR / 'authhub.db'}"
    sql_debug: bool = False

    # Argon2id cost parameters
    hash_time_cost: int = Field(default=3, ge=1)
    hash_memory_cost: int = Field(default=65536, ge=8)
    hash_parallelism: int = Field(default=4, ge=1)

    # Accounts
    email_case_insensitive: bool = False
    admin_email: Optional[str] = None
    admin_password: Optional[str] = Field(default=None, repr=False)

    # HTTP
    enable_docs: bool = True
    enable_hsts: bool = False
    trusted_hosts: List[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def allows_ephemeral_signing_key(self) -> bool:
        return self.environment in EPHEMERAL_KEY_ENVIRONMENTS

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.access_token_expire_minutes)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return REFRESH_TOKEN_LIFETIME

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and `.env` if present)."""
        load_dotenv()

        values = {
            "environment": os.getenv("AUTHHUB_ENV", "production"),
            "jwt_secret_key": os.getenv("JWT_SECRET_KEY") or None,
            "jwt_issuer": os.getenv("JWT_ISSUER", "authhub"),
            "jwt_audience": os.getenv("JWT_AUDIENCE", "authhub-client"),
            "access_token_expire_minutes": int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            "sql_debug": _env_bool("SQL_DEBUG"),
            "hash_time_cost": int(os.getenv("HASH_TIME_COST", "3")),
            "hash_memory_cost": int(os.getenv("HASH_MEMORY_COST", "65536")),
            "hash_parallelism": int(os.getenv("HASH_PARALLELISM", "4")),
            "email_case_insensitive": _env_bool("EMAIL_CASE_INSENSITIVE"),
            "admin_email": os.getenv("ADMIN_EMAIL") or None,
            "admin_password": os.getenv("ADMIN_PASSWORD") or None,
            "enable_docs": _env_bool("ENABLE_DOCS", "true"),
            "enable_hsts": _env_bool("ENABLE_HSTS"),
            "trusted_hosts": _env_list("TRUSTED_HOSTS", "localhost,127.0.0.1"),
            "cors_allow_origins": _env_list("CORS_ALLOW_ORIGINS", "http://localhost:3000"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "log_json": _env_bool("LOG_JSON", "true"),
        }
        if database_url := os.getenv("DATABASE_URL"):
            values["database_url"] = database_url

        return cls(**values)
