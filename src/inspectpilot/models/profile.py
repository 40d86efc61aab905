"""
InspectPilot Profile and Response Models

External authored content per finding id:

- FindingProfile: component identity, canned messaging, budget band or
  range, category, optional priority override and timeline. Authoritative
  over authored and raw text when present.
- FindingResponse: human-authored narrative and budget fields.
  Authoritative over raw inspection text but subordinate to the profile.

Both are read-only snapshots held in catalogs built by the pack loader.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from .enums import BudgetBand, EscalationRating, LiabilityRating, PriorityTier, SafetyRating


# =============================================================================
# Default Texts
# =============================================================================

DEFAULT_WHY_IT_MATTERS = (
    "This condition may affect electrical safety, reliability, or compliance "
    "depending on severity and location."
)

FALLBACK_CATEGORY = "OTHER"


# =============================================================================
# Profile
# =============================================================================

@dataclass(frozen=True)
class ProfileMessaging:
    """Canned messaging authored on a profile."""
    title: Optional[str] = None
    why_it_matters: Optional[str] = None
    if_not_addressed: Optional[str] = None
    planning_guidance: Optional[str] = None


@dataclass(frozen=True)
class ProfileRisk:
    """Qualitative risk ratings authored on a profile."""
    safety: Optional[SafetyRating] = None
    compliance: Optional[LiabilityRating] = None
    escalation: Optional[EscalationRating] = None


@dataclass(frozen=True)
class CategoryDefaults:
    """Defaults applied to every profile in a category."""
    risk_severity: int = 2
    likelihood: int = 2
    priority: PriorityTier = PriorityTier.PLAN_MONITOR
    budget_band: BudgetBand = BudgetBand.LOW
    timeline: str = "6–18 months"
    evidence_requirements: tuple[str, ...] = ("Visual inspection",)


@dataclass(frozen=True)
class FindingProfile:
    """
    Authored metadata for one finding id.

    Fields are kept exactly as authored (no pre-filling from category
    defaults) so the narrative waterfalls can tell authored values from
    fallbacks.

    Attributes:
        finding_id: Finding id this profile belongs to
        category: Category key into the category defaults
        asset_component: Display name of the affected component
        messaging: Canned narrative fragments
        budget_range: Explicit budget range text (e.g. "AUD $350–$450")
        budget_band: Qualitative budget band
        priority: Priority override
        timeline: Remediation timeline text (e.g. "0–3 months")
        risk: Qualitative risk ratings
        risk_severity: 1-5
        likelihood: 1-5
        evidence_requirements: Evidence the inspector is expected to capture
    """
    finding_id: str
    category: str = FALLBACK_CATEGORY
    asset_component: Optional[str] = None
    messaging: ProfileMessaging = field(default_factory=ProfileMessaging)
    budget_range: Optional[str] = None
    budget_band: Optional[BudgetBand] = None
    priority: Optional[PriorityTier] = None
    timeline: Optional[str] = None
    risk: ProfileRisk = field(default_factory=ProfileRisk)
    risk_severity: Optional[int] = None
    likelihood: Optional[int] = None
    evidence_requirements: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProfileCatalog:
    """
    Read-only lookup of profiles and category defaults.

    Attributes:
        profiles: Finding id -> profile
        category_defaults: Category -> defaults
        version: Document version string
    """
    profiles: Mapping[str, FindingProfile] = field(default_factory=dict)
    category_defaults: Mapping[str, CategoryDefaults] = field(default_factory=dict)
    version: str = "1.0"

    def get(self, finding_id: str) -> Optional[FindingProfile]:
        return self.profiles.get(finding_id)

    def __contains__(self, finding_id: object) -> bool:
        return finding_id in self.profiles

    def __len__(self) -> int:
        return len(self.profiles)

    def defaults_for(self, category: Optional[str]) -> CategoryDefaults:
        """Category defaults, falling back to OTHER and then the built-in defaults."""
        if category and category in self.category_defaults:
            return self.category_defaults[category]
        if FALLBACK_CATEGORY in self.category_defaults:
            return self.category_defaults[FALLBACK_CATEGORY]
        return CategoryDefaults()


# =============================================================================
# Response
# =============================================================================

@dataclass(frozen=True)
class BudgetaryRange:
    """Legacy structured budget range on a response."""
    low: Optional[float] = None
    high: Optional[float] = None
    currency: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class FindingResponse:
    """Human-authored narrative for one finding id."""
    title: Optional[str] = None
    observed_condition: Union[str, tuple[str, ...], None] = None
    why_it_matters: Optional[str] = None
    risk_interpretation: Optional[str] = None
    budget_range_text: Optional[str] = None
    budget_range_low: Optional[float] = None
    budget_range_high: Optional[float] = None
    budget_range_currency: Optional[str] = None
    budget_range_note: Optional[str] = None
    budgetary_range: Optional[BudgetaryRange] = None


EMPTY_RESPONSE = FindingResponse()


@dataclass(frozen=True)
class ResponseCatalog:
    """Read-only lookup of authored responses."""
    responses: Mapping[str, FindingResponse] = field(default_factory=dict)

    def get(self, finding_id: str) -> FindingResponse:
        """Response for a finding; an empty response when none is authored."""
        return self.responses.get(finding_id, EMPTY_RESPONSE)

    def __len__(self) -> int:
        return len(self.responses)
