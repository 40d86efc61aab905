"""Response schemas for the API."""

from pydantic import BaseModel
from typing import Any, Optional


class HealthResponse(BaseModel):
    """Liveness probe response."""
    status: str
    timestamp: str
    version: str
    rules_loaded: int
    rules_version: str
    profiles_loaded: int
    responses_loaded: int
    photo_signing_enabled: bool


class DerivedFindingOut(BaseModel):
    """A finding emitted by a matching rule."""
    id: str
    priority: str
    title: Optional[str] = None


class DeriveResponse(BaseModel):
    """Newly derived findings."""
    findings: list[DerivedFindingOut]
    rules_version: str
    rule_count: int


class FindingSignalsOut(BaseModel):
    """Boolean signals for one finding."""
    has_immediate_safety_risk: bool
    has_sudden_failure_risk: bool
    causes_tenant_disruption: bool
    deferrable: bool
    benefits_from_planning: bool


class SignalCountsOut(BaseModel):
    findings_total: int
    immediate: int
    non_deferrable: int
    planning_benefit: int


class PropertySignalsOut(BaseModel):
    """Property-level verdict."""
    overall_health: str  # GOOD|STABLE|ATTENTION|HIGH_RISK
    immediate_safety_risk: str  # NONE|PRESENT
    sudden_failure_risk: str  # LOW|MEDIUM|HIGH
    tenant_disruption_risk: str
    can_this_wait: str  # YES|CONDITIONALLY|NO
    planning_value: str
    counts: SignalCountsOut


class SignalsResponse(BaseModel):
    """Finding and property signals."""
    dimensions: dict[str, dict[str, str]]
    finding_signals: dict[str, FindingSignalsOut]
    property_signals: PropertySignalsOut
    risk_label: str  # Low|Moderate|Elevated


class EvidenceItemOut(BaseModel):
    photo_id: str
    caption: str
    url: Optional[str] = None


class EvidenceOut(BaseModel):
    items: list[EvidenceItemOut]
    text: Optional[str] = None


class FindingPageOut(BaseModel):
    """The six resolved blocks for one finding."""
    finding_id: str
    priority: str
    asset_component: str
    observed_condition: str
    evidence: EvidenceOut
    risk_interpretation: str
    priority_classification: str
    budgetary_planning_range: str


class FindingPagesResponse(BaseModel):
    """Validated pages plus rendered output fields."""
    pages: list[FindingPageOut]
    fields: dict[str, str]


class ViolationOut(BaseModel):
    finding_id: str
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Structured error response."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    finding_id: Optional[str] = None
    finding_ids: Optional[list[str]] = None
    violations: Optional[list[ViolationOut]] = None
    request_id: Optional[str] = None


class ClassificationOut(BaseModel):
    system_group: str
    space_group: str
    tags: list[str]


class InspectionReportResponse(BaseModel):
    """Full pipeline output."""
    inspection_id: Optional[str] = None
    findings: list[dict[str, Any]]
    derived_ids: list[str]
    finding_signals: dict[str, FindingSignalsOut]
    property_signals: PropertySignalsOut
    risk_label: str
    pages: list[FindingPageOut]
    limitations: list[str]
    classifications: dict[str, ClassificationOut]
    fields: dict[str, str]


class PhotoVerifyResponse(BaseModel):
    """Result of a signed photo link check."""
    inspection_id: str
    photo_id: str
    verified: bool
    expires: int


class ProfileResponse(BaseModel):
    """Authored profile for one finding, with its classification."""
    finding_id: str
    category: str
    asset_component: Optional[str] = None
    title: Optional[str] = None
    priority: Optional[str] = None
    budget_band: Optional[str] = None
    budget_range: Optional[str] = None
    timeline: Optional[str] = None
    evidence_requirements: list[str] = []
    classification: ClassificationOut
