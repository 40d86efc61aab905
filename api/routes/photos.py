"""Signed photo link verification."""

from fastapi import APIRouter, Query

from api.schemas.responses import ErrorResponse, PhotoVerifyResponse
from inspectpilot.config import Settings
from inspectpilot.engine import require_photo_token

router = APIRouter(prefix="/api", tags=["Photos"])

# Shared settings (set by main.py)
settings: Settings = Settings()


def set_settings(cfg: Settings):
    global settings
    settings = cfg


@router.get(
    "/inspectionPhoto",
    response_model=PhotoVerifyResponse,
    responses={403: {"model": ErrorResponse}},
)
async def inspection_photo(
    inspection_id: str = Query(..., description="Inspection the photo belongs to"),
    photo_id: str = Query(..., description="Photo reference, e.g. P01"),
    expires: int = Query(0, description="Link expiry, epoch seconds"),
    token: str = Query("", description="Hex HMAC-SHA256 token"),
):
    """
    Verify a signed photo link.

    Image bytes are served by the photo store; this endpoint only answers
    whether the link is genuine and unexpired (403 otherwise).
    """
    require_photo_token(
        settings.photo_signing_secret, inspection_id, photo_id, expires, token,
    )
    return PhotoVerifyResponse(
        inspection_id=inspection_id,
        photo_id=photo_id,
        verified=True,
        expires=expires,
    )
