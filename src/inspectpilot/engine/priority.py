"""
InspectPilot Priority Resolution

Turns authored risk ratings into a canonical priority tier and resolves
the final tier when an inspector has overridden the calculated one.

Calculation (deterministic):
1. Hard overrides: listed finding ids are always IMMEDIATE
2. Base matrix on safety x urgency
3. Liability adjustment (skipped when urgency is IMMEDIATE):
   HIGH lifts PLAN_MONITOR to RECOMMENDED_0_3_MONTHS,
   LOW drops RECOMMENDED_0_3_MONTHS to PLAN_MONITOR unless safety is HIGH
4. Upgrade: PLAN_MONITOR with severity x likelihood >= 12 or escalation
   HIGH becomes RECOMMENDED_0_3_MONTHS

Resolution: an already-final tier wins; otherwise the calculated tier
wins unless the selected tier differs and an override reason is given;
otherwise the legacy priority, defaulting to PLAN_MONITOR.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from ..models import (
    AuthoringRecord,
    EscalationRating,
    Finding,
    LiabilityRating,
    PriorityTier,
    SafetyRating,
    UrgencyRating,
)


# severity x likelihood at or above this upgrades PLAN_MONITOR.
SEVERITY_LIKELIHOOD_UPGRADE_THRESHOLD = 12

DEFAULT_PRIORITY = PriorityTier.PLAN_MONITOR

# Missing ratings take these values before the matrix is applied.
DEFAULT_SAFETY = SafetyRating.MODERATE
DEFAULT_URGENCY = UrgencyRating.SHORT_TERM
DEFAULT_LIABILITY = LiabilityRating.MEDIUM


# =============================================================================
# Normalization
# =============================================================================

def normalize_priority(value: Any, default: PriorityTier = DEFAULT_PRIORITY) -> PriorityTier:
    """
    Normalize any priority label or synonym to a canonical tier.

    IMMEDIATE/URGENT -> IMMEDIATE; RECOMMENDED/RECOMMENDED_0_3_MONTHS ->
    RECOMMENDED_0_3_MONTHS; anything else non-empty -> PLAN_MONITOR;
    empty -> ``default``.
    """
    return PriorityTier.parse(value) or default


def priority_rank(value: Any) -> int:
    """Sort key, most urgent first."""
    return normalize_priority(value).rank


# =============================================================================
# Calculation
# =============================================================================

def _base_bucket(safety: SafetyRating, urgency: UrgencyRating) -> PriorityTier:
    if safety == SafetyRating.HIGH:
        return PriorityTier.IMMEDIATE
    if safety == SafetyRating.MODERATE:
        if urgency == UrgencyRating.IMMEDIATE:
            return PriorityTier.IMMEDIATE
        if urgency == UrgencyRating.SHORT_TERM:
            return PriorityTier.RECOMMENDED_0_3_MONTHS
        return PriorityTier.PLAN_MONITOR
    return PriorityTier.PLAN_MONITOR


def _adjust_for_liability(
    bucket: PriorityTier,
    safety: SafetyRating,
    urgency: UrgencyRating,
    liability: LiabilityRating,
) -> PriorityTier:
    if urgency == UrgencyRating.IMMEDIATE:
        return bucket
    if liability == LiabilityRating.HIGH and bucket == PriorityTier.PLAN_MONITOR:
        return PriorityTier.RECOMMENDED_0_3_MONTHS
    if (
        liability == LiabilityRating.LOW
        and bucket == PriorityTier.RECOMMENDED_0_3_MONTHS
        and safety != SafetyRating.HIGH
    ):
        return PriorityTier.PLAN_MONITOR
    return bucket


def calculate_priority(
    finding_id: str,
    record: AuthoringRecord,
    hard_overrides: Iterable[str] = (),
) -> PriorityTier:
    """
    Calculate a finding's tier from its authoring record.

    Args:
        finding_id: Finding id, checked against ``hard_overrides``
        record: Authored ratings; missing ones default to MODERATE /
            SHORT_TERM / MEDIUM
        hard_overrides: Finding ids that are always IMMEDIATE

    Returns:
        Calculated tier
    """
    if finding_id in set(hard_overrides):
        return PriorityTier.IMMEDIATE

    safety = record.safety or DEFAULT_SAFETY
    urgency = record.urgency or DEFAULT_URGENCY
    liability = record.liability or DEFAULT_LIABILITY

    bucket = _base_bucket(safety, urgency)
    bucket = _adjust_for_liability(bucket, safety, urgency, liability)

    if bucket != PriorityTier.PLAN_MONITOR:
        return bucket

    score = (record.severity or 0) * (record.likelihood or 0)
    if score >= SEVERITY_LIKELIHOOD_UPGRADE_THRESHOLD or record.escalation == EscalationRating.HIGH:
        return PriorityTier.RECOMMENDED_0_3_MONTHS
    return bucket


# =============================================================================
# Override Resolution
# =============================================================================

def _selected(finding: Finding) -> Optional[PriorityTier]:
    return finding.priority_selected or finding.priority


def resolve_priority_final(finding: Finding) -> PriorityTier:
    """
    Resolve the effective tier of a finding.

    The selected tier is used only for an explicit, auditable override:
    it must differ from the calculated tier and carry an override reason.
    """
    if finding.priority_final is not None:
        return finding.priority_final

    calculated = finding.priority_calculated
    if calculated is not None:
        selected = _selected(finding)
        if selected is not None and selected != calculated and _has_reason(finding):
            return selected
        return calculated

    return finding.priority or DEFAULT_PRIORITY


def is_override_valid(finding: Finding) -> bool:
    """True when no override is needed or the override carries a reason."""
    calculated = finding.priority_calculated
    if calculated is None or _selected(finding) == calculated:
        return True
    return _has_reason(finding)


def _has_reason(finding: Finding) -> bool:
    return bool(finding.override_reason and finding.override_reason.strip())
