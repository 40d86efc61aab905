"""
InspectPilot Dimension Normalizer

Maps a finding's authored risk record, or its profile defaults, onto the
canonical nine-axis model (D1-D9).

Fallback is per axis and always total:
1. Explicit authoring (canonical axis values first, then mapped ratings)
2. Profile ratings, with category defaults for severity, likelihood,
   timeline and priority
3. GLOBAL_DEFAULTS

Bucket thresholds live in THRESHOLDS and are versioned by
THRESHOLD_TABLE_VERSION. Changing any bucket means bumping the version.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..models import (
    AXES,
    AuthoringRecord,
    BudgetBand,
    CategoryDefaults,
    CostVolatility,
    DecisionComplexity,
    DegradationTrend,
    Detectability,
    EscalationRating,
    FindingProfile,
    Level,
    LiabilityRating,
    NineAxisDimensions,
    PriorityTier,
    ProfileCatalog,
    SafetyRating,
    Urgency,
    UrgencyRating,
)

logger = logging.getLogger(__name__)


THRESHOLD_TABLE_VERSION = "2025.1"

# Bucket thresholds for 1-5 scores. A score >= "high" is high, >= "medium"
# is medium, anything lower is low.
THRESHOLDS: dict[str, Any] = {
    "likelihood_to_failure": {"high": 4, "medium": 3},
    "severity_to_tenant_disruption": {"high": 4, "medium": 3},
    "judgement_score": 4,
    "uncertain_budget_high": 5000,
    "uncertain_budget_bands": (BudgetBand.HIGH,),
}

GLOBAL_DEFAULTS: dict[str, Any] = {
    "safety_impact": Level.MEDIUM,
    "compliance_exposure": Level.LOW,
    "failure_likelihood": Level.MEDIUM,
    "urgency": Urgency.MONITOR,
    "degradation_trend": DegradationTrend.UNKNOWN,
    "tenant_disruption_risk": Level.LOW,
    "cost_volatility": CostVolatility.KNOWN,
    "detectability": Detectability.VISIBLE,
    "decision_complexity": DecisionComplexity.SIMPLE,
}

_SAFETY_TO_LEVEL = {
    SafetyRating.HIGH: Level.HIGH,
    SafetyRating.MODERATE: Level.MEDIUM,
    SafetyRating.LOW: Level.LOW,
}

_LIABILITY_TO_LEVEL = {
    LiabilityRating.HIGH: Level.HIGH,
    LiabilityRating.MEDIUM: Level.MEDIUM,
    LiabilityRating.LOW: Level.LOW,
}

_URGENCY_RATING_TO_URGENCY = {
    UrgencyRating.IMMEDIATE: Urgency.NOW,
    UrgencyRating.SHORT_TERM: Urgency.ZERO_TO_THREE_MONTHS,
    UrgencyRating.LONG_TERM: Urgency.SIX_TO_EIGHTEEN_MONTHS,
}

_TIER_TO_URGENCY = {
    PriorityTier.IMMEDIATE: Urgency.NOW,
    PriorityTier.RECOMMENDED_0_3_MONTHS: Urgency.ZERO_TO_THREE_MONTHS,
    PriorityTier.PLAN_MONITOR: Urgency.SIX_TO_EIGHTEEN_MONTHS,
}

# Timeline phrases, checked in order. Numbers only match whole numbers.
_RANGE = r"\s*(?:–|-|to)\s*"
_TIMELINE_PATTERNS: tuple[tuple[re.Pattern[str], Urgency], ...] = (
    (re.compile(r"\b(?:immediate(?:ly)?|now|urgent(?:ly)?|asap)\b"), Urgency.NOW),
    (re.compile(rf"(?<!\d)0{_RANGE}3(?!\d)"), Urgency.ZERO_TO_THREE_MONTHS),
    (re.compile(rf"(?<!\d)6{_RANGE}18(?!\d)|(?<!\d)12\s*months?\b"), Urgency.SIX_TO_EIGHTEEN_MONTHS),
    (re.compile(r"\brenovation\b"), Urgency.NEXT_RENOVATION),
    (re.compile(r"\bmonitor"), Urgency.MONITOR),
)

# "not urgent", "non-urgent", "not yet immediate"
_NEGATION = re.compile(r"\b(?:not|no|non)[\s-]+(?:\w+\s+)?$")


# =============================================================================
# Normalizer Inputs
# =============================================================================

@dataclass(frozen=True)
class RiskInputs:
    """One tier of qualitative inputs the axis mappers read from."""
    safety: Optional[SafetyRating] = None
    liability: Optional[LiabilityRating] = None
    urgency: Optional[UrgencyRating] = None
    tier: Optional[PriorityTier] = None
    timeline: Optional[str] = None
    severity: Optional[int] = None
    likelihood: Optional[int] = None
    escalation: Optional[EscalationRating] = None
    budget_high: Optional[float] = None
    budget_band: Optional[BudgetBand] = None

    @classmethod
    def from_record(cls, record: AuthoringRecord) -> RiskInputs:
        return cls(
            safety=record.safety,
            liability=record.liability,
            urgency=record.urgency,
            tier=record.priority,
            severity=record.severity,
            likelihood=record.likelihood,
            escalation=record.escalation,
            budget_high=record.budget_high,
        )

    @classmethod
    def from_profile(
        cls,
        profile: Optional[FindingProfile],
        defaults: CategoryDefaults,
    ) -> RiskInputs:
        if profile is None:
            return cls(
                tier=defaults.priority,
                timeline=defaults.timeline,
                severity=defaults.risk_severity,
                likelihood=defaults.likelihood,
                budget_band=defaults.budget_band,
            )
        return cls(
            safety=profile.risk.safety,
            liability=profile.risk.compliance,
            tier=profile.priority,
            timeline=profile.timeline or defaults.timeline,
            severity=profile.risk_severity if profile.risk_severity is not None else defaults.risk_severity,
            likelihood=profile.likelihood if profile.likelihood is not None else defaults.likelihood,
            escalation=profile.risk.escalation,
            budget_band=profile.budget_band or defaults.budget_band,
        )


# =============================================================================
# Axis Mappers
# =============================================================================

def _bucket(score: Optional[int], thresholds: dict[str, int]) -> Optional[Level]:
    if score is None:
        return None
    if score >= thresholds["high"]:
        return Level.HIGH
    if score >= thresholds["medium"]:
        return Level.MEDIUM
    return Level.LOW


def _safety_impact(inputs: RiskInputs) -> Optional[Level]:
    return _SAFETY_TO_LEVEL.get(inputs.safety) if inputs.safety else None


def _compliance_exposure(inputs: RiskInputs) -> Optional[Level]:
    return _LIABILITY_TO_LEVEL.get(inputs.liability) if inputs.liability else None


def _failure_likelihood(inputs: RiskInputs) -> Optional[Level]:
    if inputs.escalation == EscalationRating.HIGH:
        return Level.HIGH
    return _bucket(inputs.likelihood, THRESHOLDS["likelihood_to_failure"])


def timeline_to_urgency(timeline: Optional[str]) -> Optional[Urgency]:
    """Map free-text timeline (e.g. "0–3 months") to D4."""
    if not timeline:
        return None
    text = timeline.strip().lower()
    for pattern, urgency in _TIMELINE_PATTERNS:
        for match in pattern.finditer(text):
            if urgency is Urgency.NOW and _NEGATION.search(text[:match.start()]):
                continue
            return urgency
    return None


def _urgency(inputs: RiskInputs) -> Optional[Urgency]:
    if inputs.urgency:
        return _URGENCY_RATING_TO_URGENCY[inputs.urgency]
    from_timeline = timeline_to_urgency(inputs.timeline)
    if from_timeline:
        return from_timeline
    if inputs.tier:
        return _TIER_TO_URGENCY[inputs.tier]
    return None


def _degradation_trend(inputs: RiskInputs) -> Optional[DegradationTrend]:
    if inputs.escalation is None:
        return None
    if inputs.escalation == EscalationRating.HIGH:
        return DegradationTrend.WORSENING
    return DegradationTrend.STABLE


def _tenant_disruption(inputs: RiskInputs) -> Optional[Level]:
    return _bucket(inputs.severity, THRESHOLDS["severity_to_tenant_disruption"])


def _cost_volatility(inputs: RiskInputs) -> Optional[CostVolatility]:
    if inputs.budget_high is not None:
        if inputs.budget_high > THRESHOLDS["uncertain_budget_high"]:
            return CostVolatility.UNCERTAIN
        return CostVolatility.KNOWN
    if inputs.budget_band is not None:
        if inputs.budget_band in THRESHOLDS["uncertain_budget_bands"]:
            return CostVolatility.UNCERTAIN
        return CostVolatility.KNOWN
    return None


def _detectability(inputs: RiskInputs) -> Optional[Detectability]:
    if inputs.escalation is None:
        return None
    if inputs.escalation == EscalationRating.HIGH:
        return Detectability.HIDDEN
    return Detectability.VISIBLE


def _decision_complexity(inputs: RiskInputs) -> Optional[DecisionComplexity]:
    if inputs.severity is None and inputs.likelihood is None:
        return None
    limit = THRESHOLDS["judgement_score"]
    if (inputs.severity or 0) >= limit or (inputs.likelihood or 0) >= limit:
        return DecisionComplexity.REQUIRES_JUDGEMENT
    return DecisionComplexity.SIMPLE


AXIS_MAPPERS: dict[str, Callable[[RiskInputs], Any]] = {
    "safety_impact": _safety_impact,
    "compliance_exposure": _compliance_exposure,
    "failure_likelihood": _failure_likelihood,
    "urgency": _urgency,
    "degradation_trend": _degradation_trend,
    "tenant_disruption_risk": _tenant_disruption,
    "cost_volatility": _cost_volatility,
    "detectability": _detectability,
    "decision_complexity": _decision_complexity,
}


# =============================================================================
# Normalization
# =============================================================================

def normalize(
    finding_id: str,
    record: Optional[AuthoringRecord] = None,
    profile: Optional[FindingProfile] = None,
    category_defaults: Optional[CategoryDefaults] = None,
) -> NineAxisDimensions:
    """
    Normalize a finding's risk attributes to D1-D9.

    Never fails: every axis resolves to a valid member, falling back
    from the authoring record to the profile (and its category defaults)
    and finally to GLOBAL_DEFAULTS.

    Args:
        finding_id: Finding being normalized (used for logging)
        record: Authored risk record, if any
        profile: Finding profile, if any
        category_defaults: Defaults for the profile's category

    Returns:
        Fully populated dimensions
    """
    defaults = category_defaults or CategoryDefaults()
    authored = RiskInputs.from_record(record) if record is not None else None
    profiled = RiskInputs.from_profile(profile, defaults)

    values: dict[str, Any] = {}
    defaulted: list[str] = []
    for axis in AXES:
        value = None
        if record is not None:
            value = record.axes.get(axis)
            if value is None and authored is not None:
                value = AXIS_MAPPERS[axis](authored)
        if value is None:
            value = AXIS_MAPPERS[axis](profiled)
        if value is None:
            value = GLOBAL_DEFAULTS[axis]
            defaulted.append(axis)
        values[axis] = value

    if defaulted:
        logger.debug(
            "Finding %s used global defaults for %s (table %s)",
            finding_id, ", ".join(defaulted), THRESHOLD_TABLE_VERSION,
        )
    return NineAxisDimensions(**values)


@dataclass(frozen=True)
class DimensionNormalizer:
    """
    Normalizer bound to a loaded profile catalog.

    Usage:
        normalizer = DimensionNormalizer(snapshot.profiles)
        dims = normalizer.normalize("PARTIAL_RCD_COVERAGE", record)
    """
    profiles: ProfileCatalog

    def normalize(
        self,
        finding_id: str,
        record: Optional[AuthoringRecord] = None,
    ) -> NineAxisDimensions:
        profile = self.profiles.get(finding_id)
        category = profile.category if profile is not None else None
        return normalize(
            finding_id,
            record=record,
            profile=profile,
            category_defaults=self.profiles.defaults_for(category),
        )
