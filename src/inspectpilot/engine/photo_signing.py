"""
InspectPilot Photo URL Signing

Time-limited view links for inspection photos.

Token: hex HMAC-SHA256(secret, "<inspection_id>|<photo_id>|<expires>")
URL:   <base>/api/inspectionPhoto?inspection_id=..&photo_id=..&expires=..&token=..

Without a secret, links are plain (no expiry or token). Verification
rejects on length mismatch before a constant-time comparison.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from cryptography.hazmat.primitives import constant_time, hashes, hmac

from ..exceptions import PhotoTokenError


PHOTO_PATH = "/api/inspectionPhoto"

DEFAULT_TTL_SECONDS = 7 * 86400


# =============================================================================
# Token
# =============================================================================

def compute_photo_token(secret: str, inspection_id: str, photo_id: str, expires: int) -> str:
    """HMAC-SHA256 over ``inspection_id|photo_id|expires``, hex encoded."""
    mac = hmac.HMAC(secret.encode("utf-8"), hashes.SHA256())
    mac.update(f"{inspection_id}|{photo_id}|{expires}".encode("utf-8"))
    return mac.finalize().hex()


def sign_photo_url(
    inspection_id: str,
    photo_id: str,
    base_url: str,
    secret: Optional[str],
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    now: Optional[float] = None,
) -> str:
    """
    Build a view link for a photo.

    Args:
        inspection_id: Inspection the photo belongs to
        photo_id: Photo reference (e.g. "P01")
        base_url: Public base URL of the service
        secret: Signing secret; falsy disables signing
        ttl_seconds: Link lifetime
        now: Current epoch seconds (defaults to the wall clock)

    Returns:
        Absolute URL, signed when a secret is given
    """
    params: dict[str, str] = {"inspection_id": inspection_id, "photo_id": photo_id}
    if secret:
        issued = int(now if now is not None else time.time())
        expires = issued + int(ttl_seconds)
        params["expires"] = str(expires)
        params["token"] = compute_photo_token(secret, inspection_id, photo_id, expires)
    return f"{base_url.rstrip('/')}{PHOTO_PATH}?{urlencode(params)}"


# =============================================================================
# Verification
# =============================================================================

def _check(
    secret: Optional[str],
    inspection_id: str,
    photo_id: str,
    expires: int,
    token: Optional[str],
    now: Optional[float],
) -> Optional[str]:
    """Return the failure reason, or None when the token is valid."""
    if not secret:
        return "signing disabled"
    if not token:
        return "missing token"
    expected = compute_photo_token(secret, inspection_id, photo_id, expires).encode("utf-8")
    supplied = token.encode("utf-8")
    if len(expected) != len(supplied):
        return "token length mismatch"
    if not constant_time.bytes_eq(expected, supplied):
        return "token mismatch"
    current = now if now is not None else time.time()
    if int(expires) < current:
        return "link expired"
    return None


def verify_photo_token(
    secret: Optional[str],
    inspection_id: str,
    photo_id: str,
    expires: int,
    token: Optional[str],
    now: Optional[float] = None,
) -> bool:
    """True when ``token`` was issued for these ids and has not expired."""
    return _check(secret, inspection_id, photo_id, expires, token, now) is None


def require_photo_token(
    secret: Optional[str],
    inspection_id: str,
    photo_id: str,
    expires: int,
    token: Optional[str],
    now: Optional[float] = None,
) -> None:
    """
    Verify a photo token.

    Raises:
        PhotoTokenError: If the token does not verify or has expired
    """
    reason = _check(secret, inspection_id, photo_id, expires, token, now)
    if reason is not None:
        raise PhotoTokenError(
            message=f"Photo link rejected: {reason}",
            details={"inspection_id": inspection_id, "photo_id": photo_id, "reason": reason},
        )


# =============================================================================
# Signer
# =============================================================================

@dataclass(frozen=True)
class PhotoUrlSigner:
    """
    Link builder bound to a base URL and optional secret.

    Usage:
        signer = PhotoUrlSigner(base_url="https://reports.example.com", secret=key)
        url = signer.sign("INS-1", "P01")
    """
    base_url: str
    secret: Optional[str] = None
    ttl_seconds: int = DEFAULT_TTL_SECONDS

    @property
    def signing_enabled(self) -> bool:
        return bool(self.secret)

    def sign(self, inspection_id: str, photo_id: str, now: Optional[float] = None) -> str:
        return sign_photo_url(
            inspection_id, photo_id, self.base_url, self.secret, self.ttl_seconds, now=now,
        )
