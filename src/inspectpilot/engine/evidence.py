"""
InspectPilot Evidence Resolution

Resolves the Evidence block of a finding page. This is the only step in
narrative assembly that may suspend: photo captions come from an external
metadata store.

Waterfall:
1. The finding's own photo ids
2. Photo ids at known nested paths of the raw answers
3. The finding's raw facts text
4. A fixed "no photographic evidence" sentence

At most two photos are ever referenced. A failed caption lookup affects
only that photo, which falls back to its textual reference.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..models import EvidenceBlock, EvidenceItem, Finding
from .field_resolver import first_value, is_present
from .narrative_validator import MAX_EVIDENCE_PHOTOS
from .photo_signing import PhotoUrlSigner

logger = logging.getLogger(__name__)


EVIDENCE_DEFAULT = "No photographic evidence captured at time of assessment."
DEFAULT_CAPTION = "Photo evidence captured"

# Shared exception lists captured by the RCD and GPO test sections.
SHARED_PHOTO_PATHS = (
    "rcd_tests.exceptions.photo_ids",
    "gpo_tests.exceptions.photo_ids",
)


# =============================================================================
# Photo Metadata
# =============================================================================

class PhotoMetadataStore(Protocol):
    """External store of photo metadata."""

    async def get_caption(self, inspection_id: str, photo_id: str) -> Optional[str]:
        """Caption for a photo, or None when it has none."""
        ...


@dataclass
class InMemoryPhotoStore:
    """Photo metadata held in memory, keyed by (inspection_id, photo_id)."""
    captions: dict[tuple[str, str], str] = field(default_factory=dict)

    def add(self, inspection_id: str, photo_id: str, caption: str) -> None:
        self.captions[(inspection_id, photo_id)] = caption

    async def get_caption(self, inspection_id: str, photo_id: str) -> Optional[str]:
        return self.captions.get((inspection_id, photo_id))


# =============================================================================
# Photo Id Resolution
# =============================================================================

def candidate_photo_paths(finding_id: str) -> tuple[str, ...]:
    """Nested raw-answer paths that may hold photo ids for a finding."""
    key = finding_id.lower()
    return (f"{key}.photo_ids", f"exceptions.{key}.photo_ids") + SHARED_PHOTO_PATHS


def resolve_photo_ids(finding: Finding, sources: Sequence[Mapping[str, Any]] = ()) -> list[str]:
    """
    Photo ids for a finding, capped at MAX_EVIDENCE_PHOTOS.

    Args:
        finding: The finding
        sources: Raw answer trees searched in order (e.g. raw answers,
            then canonical test data)
    """
    if finding.photo_ids:
        return list(finding.photo_ids[:MAX_EVIDENCE_PHOTOS])
    for path in candidate_photo_paths(finding.id):
        value, found = first_value(sources, path)
        if found and isinstance(value, list) and value:
            return [str(item) for item in value[:MAX_EVIDENCE_PHOTOS]]
    return []


# =============================================================================
# Evidence Block
# =============================================================================

async def _photo_item(
    inspection_id: str,
    photo_id: str,
    store: PhotoMetadataStore,
    signer: Optional[PhotoUrlSigner],
) -> EvidenceItem:
    try:
        caption = await store.get_caption(inspection_id, photo_id)
    except Exception:
        logger.warning(
            "Photo metadata lookup failed for %s/%s; using textual reference",
            inspection_id, photo_id, exc_info=True,
        )
        caption = None
    url = signer.sign(inspection_id, photo_id) if signer is not None else None
    text = caption.strip() if isinstance(caption, str) else ""
    return EvidenceItem(photo_id=photo_id, caption=text or DEFAULT_CAPTION, url=url)


async def resolve_evidence(
    finding: Finding,
    sources: Sequence[Mapping[str, Any]] = (),
    inspection_id: Optional[str] = None,
    store: Optional[PhotoMetadataStore] = None,
    signer: Optional[PhotoUrlSigner] = None,
) -> EvidenceBlock:
    """
    Resolve the Evidence block of a finding.

    With an inspection id and a metadata store, photos become captioned
    items with optional view links; captions are looked up concurrently.
    Without them, photo ids are listed as text.
    """
    photo_ids = resolve_photo_ids(finding, sources)

    if photo_ids and inspection_id and store is not None:
        items = await asyncio.gather(
            *(_photo_item(inspection_id, photo_id, store, signer) for photo_id in photo_ids)
        )
        return EvidenceBlock(items=tuple(items))

    if photo_ids:
        return EvidenceBlock(text=f"Photo evidence provided: {', '.join(photo_ids)}.")

    if is_present(finding.facts):
        return EvidenceBlock(text=finding.facts.strip())

    return EvidenceBlock(text=EVIDENCE_DEFAULT)
