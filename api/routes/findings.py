"""Finding derivation and profile endpoints."""

from fastapi import APIRouter

from api.schemas.requests import DeriveRequest
from api.schemas.responses import ClassificationOut, DerivedFindingOut, DeriveResponse, ProfileResponse
from inspectpilot.config import Settings
from inspectpilot.engine import classify_finding, derive_and_merge
from inspectpilot.packs import PackSnapshot

router = APIRouter(prefix="/findings", tags=["Findings"])

# Shared snapshot (set by main.py)
snapshot: PackSnapshot = PackSnapshot()
settings: Settings = Settings()


def set_snapshot(s: PackSnapshot, cfg: Settings):
    global snapshot, settings
    snapshot = s
    settings = cfg


@router.post("/derive", response_model=DeriveResponse)
async def derive(request: DeriveRequest):
    """
    Derive findings from raw inspection answers.

    Returns only findings not already listed in `existing`. Rules that do
    not match, or that reference unanswered questions, emit nothing.
    """
    derived = derive_and_merge(request.raw, snapshot.rules, request.existing)
    return DeriveResponse(
        findings=[
            DerivedFindingOut(id=d.id, priority=d.priority.value, title=d.title)
            for d in derived
        ],
        rules_version=snapshot.rules.version,
        rule_count=len(snapshot.rules),
    )


@router.get("/{finding_id}/profile", response_model=ProfileResponse)
async def get_profile(finding_id: str):
    """Get the authored profile for a finding id."""
    profile = snapshot.require_profile(finding_id)
    classification = classify_finding(finding_id)
    return ProfileResponse(
        finding_id=profile.finding_id,
        category=profile.category,
        asset_component=profile.asset_component,
        title=profile.messaging.title,
        priority=profile.priority.value if profile.priority else None,
        budget_band=profile.budget_band.value if profile.budget_band else None,
        budget_range=profile.budget_range,
        timeline=profile.timeline,
        evidence_requirements=list(profile.evidence_requirements),
        classification=ClassificationOut(
            system_group=classification.system_group,
            space_group=classification.space_group,
            tags=list(classification.tags),
        ),
    )
