"""Finding page and inspection report endpoints."""

from typing import Optional

from fastapi import APIRouter

from api.schemas.requests import FindingPagesRequest, InspectionReportRequest
from api.schemas.responses import ErrorResponse, FindingPagesResponse, InspectionReportResponse
from inspectpilot.config import Settings
from inspectpilot.engine import InMemoryPhotoStore, NarrativeAssembler
from inspectpilot.engine.pipeline import InspectionPipeline
from inspectpilot.packs import PackSnapshot
from inspectpilot.render import render_fields

router = APIRouter(prefix="/reports", tags=["Reports"])

# Shared snapshot (set by main.py)
snapshot: PackSnapshot = PackSnapshot()
settings: Settings = Settings()


def set_snapshot(s: PackSnapshot, cfg: Settings):
    global snapshot, settings
    snapshot = s
    settings = cfg


def _photo_store(inspection_id: Optional[str], captions: dict[str, str]) -> Optional[InMemoryPhotoStore]:
    """In-memory caption store for one request, or None without captions."""
    if not inspection_id or not captions:
        return None
    store = InMemoryPhotoStore()
    for photo_id, caption in captions.items():
        store.add(inspection_id, photo_id, caption)
    return store


@router.post(
    "/finding-pages",
    response_model=FindingPagesResponse,
    responses={422: {"model": ErrorResponse}},
)
async def finding_pages(request: FindingPagesRequest):
    """
    Assemble the six narrative blocks for every finding and validate them.

    The whole batch is validated before failing: a 422 response lists every
    violation across all findings, not just the first.
    """
    assembler = NarrativeAssembler(
        profiles=snapshot.profiles,
        responses=snapshot.responses,
        signer=settings.photo_signer(),
        photo_store=_photo_store(request.inspection_id, request.photo_captions),
    )
    result = await assembler.assemble_async(
        [f.to_finding() for f in request.findings],
        raw=request.raw,
        canonical=request.canonical,
        inspection_id=request.inspection_id,
    )
    return {
        "pages": [page.to_dict() for page in result.pages],
        "fields": render_fields(result.pages),
    }


@router.post(
    "/inspection",
    response_model=InspectionReportResponse,
    responses={422: {"model": ErrorResponse}},
)
async def inspection_report(request: InspectionReportRequest):
    """Run the full pipeline: derive, prioritize, normalize, signal, assemble, render."""
    pipeline = InspectionPipeline(snapshot, settings)
    report = await pipeline.run_async(
        request.raw,
        existing=[f.to_finding() for f in request.existing],
        inspection_id=request.inspection_id,
        photo_store=_photo_store(request.inspection_id, request.photo_captions),
        canonical=request.canonical,
    )
    return report.to_dict()
