"""Tests for InspectPilot runtime settings."""
from pathlib import Path

from inspectpilot.config import DEFAULT_PACKS_DIR, Settings
from inspectpilot.engine.photo_signing import DEFAULT_TTL_SECONDS
from inspectpilot.packs import DEFAULT_RULES_FILE


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.packs_dir == DEFAULT_PACKS_DIR
        assert settings.rules_file == DEFAULT_RULES_FILE
        assert settings.photo_signing_secret is None
        assert settings.photo_url_ttl_seconds == DEFAULT_TTL_SECONDS
        assert settings.log_level == "INFO"
        assert settings.cors_origins == ("*",)

    def test_environment_values(self):
        settings = Settings.from_env({
            "IP_PACKS_DIR": "/srv/packs",
            "IP_PUBLIC_BASE_URL": "https://reports.example.com",
            "IP_PHOTO_SIGNING_SECRET": "s3cret",
            "IP_PHOTO_URL_TTL_SECONDS": "600",
            "IP_LOG_LEVEL": "debug",
            "IP_CORS_ORIGINS": "https://a.example.com, https://b.example.com,",
        })
        assert settings.packs_dir == Path("/srv/packs")
        assert settings.photo_url_ttl_seconds == 600
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ("https://a.example.com", "https://b.example.com")

    def test_blank_secret_disables_signing(self):
        settings = Settings.from_env({"IP_PHOTO_SIGNING_SECRET": ""})
        assert settings.photo_signer().signing_enabled is False

    def test_photo_signer(self):
        settings = Settings(public_base_url="https://r.example.com", photo_signing_secret="k", photo_url_ttl_seconds=60)
        signer = settings.photo_signer()
        assert signer.signing_enabled is True
        assert "expires=160" in signer.sign("INS-1", "P01", now=100)

    def test_shipped_packs_dir(self):
        assert (DEFAULT_PACKS_DIR / DEFAULT_RULES_FILE).exists()
