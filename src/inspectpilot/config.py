"""
InspectPilot Configuration

Runtime settings read from IP_* environment variables.

    IP_PACKS_DIR              Directory holding rules/, profiles/, responses/
    IP_RULES_FILE             Rule document, relative to the packs dir
    IP_PROFILES_FILE          Profile document, relative to the packs dir
    IP_RESPONSES_FILE         Response document, relative to the packs dir
    IP_PUBLIC_BASE_URL        Base URL used in photo view links
    IP_PHOTO_SIGNING_SECRET   HMAC secret; unset disables link signing
    IP_PHOTO_URL_TTL_SECONDS  Photo link lifetime (default 7 days)
    IP_LOG_LEVEL              Log level (default INFO)
    IP_CORS_ORIGINS           Comma-separated allowed origins (default *)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .engine.photo_signing import DEFAULT_TTL_SECONDS, PhotoUrlSigner
from .packs import DEFAULT_PROFILES_FILE, DEFAULT_RESPONSES_FILE, DEFAULT_RULES_FILE

# Repository root: src/inspectpilot/config.py -> ../..
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_PACKS_DIR = PROJECT_ROOT / "packs"
DEFAULT_PUBLIC_BASE_URL = "http://localhost:8000"


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""
    packs_dir: Path = DEFAULT_PACKS_DIR
    rules_file: str = DEFAULT_RULES_FILE
    profiles_file: str = DEFAULT_PROFILES_FILE
    responses_file: str = DEFAULT_RESPONSES_FILE
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    photo_signing_secret: Optional[str] = None
    photo_url_ttl_seconds: int = DEFAULT_TTL_SECONDS
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from the environment (or a given mapping)."""
        env = os.environ if environ is None else environ
        origins = env.get("IP_CORS_ORIGINS", "*")
        return cls(
            packs_dir=Path(env.get("IP_PACKS_DIR", str(DEFAULT_PACKS_DIR))),
            rules_file=env.get("IP_RULES_FILE", DEFAULT_RULES_FILE),
            profiles_file=env.get("IP_PROFILES_FILE", DEFAULT_PROFILES_FILE),
            responses_file=env.get("IP_RESPONSES_FILE", DEFAULT_RESPONSES_FILE),
            public_base_url=env.get("IP_PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL),
            photo_signing_secret=env.get("IP_PHOTO_SIGNING_SECRET") or None,
            photo_url_ttl_seconds=int(env.get("IP_PHOTO_URL_TTL_SECONDS", str(DEFAULT_TTL_SECONDS))),
            log_level=env.get("IP_LOG_LEVEL", "INFO").upper(),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        )

    def photo_signer(self) -> PhotoUrlSigner:
        return PhotoUrlSigner(
            base_url=self.public_base_url,
            secret=self.photo_signing_secret,
            ttl_seconds=self.photo_url_ttl_seconds,
        )
