"""Tests for configuration loading and refresh secret generation."""

import base64
from datetime import timedelta

import pytest

from authhub.auth.refresh import generate_refresh_secret
from authhub.core.config import Settings


class TestSettingsFromEnv:

    def test_reads_signing_configuration(self, monkeypatch):
        monkeypatch.setenv("AUTHHUB_ENV", "Development")
        monkeypatch.setenv("JWT_SECRET_KEY", "k" * 40)
        monkeypatch.setenv("JWT_ISSUER", "issuer-x")
        monkeypatch.setenv("JWT_AUDIENCE", "audience-y")
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")

        settings = Settings.from_env()

        assert settings.environment == "development"
        assert settings.jwt_secret_key == "k" * 40
        assert settings.jwt_issuer == "issuer-x"
        assert settings.jwt_audience == "audience-y"
        assert settings.access_token_lifetime == timedelta(minutes=15)

    def test_defaults(self, monkeypatch):
        for name in ("AUTHHUB_ENV", "JWT_SECRET_KEY", "ACCESS_TOKEN_EXPIRE_MINUTES", "EMAIL_CASE_INSENSITIVE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.environment == "production"
        assert settings.jwt_secret_key is None
        assert settings.access_token_expire_minutes == 60
        assert settings.email_case_insensitive is False
        assert settings.allows_ephemeral_signing_key is False

    def test_list_values_are_split(self, monkeypatch):
        monkeypatch.setenv("TRUSTED_HOSTS", "api.example.com, localhost ,")

        settings = Settings.from_env()

        assert settings.trusted_hosts == ["api.example.com", "localhost"]

    def test_refresh_lifetime_is_fixed_at_seven_days(self, settings):
        assert settings.refresh_token_lifetime == timedelta(days=7)

    def test_signing_key_is_not_in_repr(self, settings):
        assert settings.jwt_secret_key not in repr(settings)


class TestRefreshSecret:

    def test_secret_is_64_random_bytes_url_safe(self):
        secret = generate_refresh_secret()

        raw = base64.urlsafe_b64decode(secret + "=" * (-len(secret) % 4))
        assert len(raw) == 64
        assert "+" not in secret and "/" not in secret and "=" not in secret

    def test_secrets_do_not_repeat(self):
        assert len({generate_refresh_secret() for _ in range(50)}) == 50

    def test_rejects_low_entropy(self):
        with pytest.raises(ValueError):
            generate_refresh_secret(16)
