"""Finding and property signal endpoints."""

from fastapi import APIRouter

from api.schemas.requests import SignalsRequest
from api.schemas.responses import SignalsResponse
from inspectpilot.config import Settings
from inspectpilot.engine import (
    DimensionNormalizer,
    derive_finding_signals,
    derive_property_signals,
    overall_health_to_risk_label,
)
from inspectpilot.packs import PackSnapshot

router = APIRouter(prefix="/signals", tags=["Signals"])

# Shared snapshot (set by main.py)
snapshot: PackSnapshot = PackSnapshot()
settings: Settings = Settings()


def set_snapshot(s: PackSnapshot, cfg: Settings):
    global snapshot, settings
    snapshot = s
    settings = cfg


@router.post("", response_model=SignalsResponse)
async def compute_signals(request: SignalsRequest):
    """
    Compute per-finding signals and the property-level verdict.

    Findings without explicit `dimensions` are normalized from their
    authoring record, falling back to profile and global defaults.
    """
    normalizer = DimensionNormalizer(snapshot.profiles)

    findings = []
    for item in request.findings:
        finding = item.to_finding()
        if finding.dimensions is None:
            finding = finding.with_updates(
                dimensions=normalizer.normalize(finding.id, finding.authoring),
            )
        findings.append(finding)

    signals = derive_property_signals(findings)
    return {
        "dimensions": {f.id: f.dimensions.to_dict() for f in findings},
        "finding_signals": {f.id: derive_finding_signals(f.dimensions).to_dict() for f in findings},
        "property_signals": signals.to_dict(),
        "risk_label": overall_health_to_risk_label(signals.overall_health),
    }
