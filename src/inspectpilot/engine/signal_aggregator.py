"""
InspectPilot Signal Aggregator

Pure functions from nine-axis dimensions to per-finding signals and a
single property-level verdict. No state is kept between calls; property
signals are recomputed from the finding list every time.

The LOW/HIGH and LOW/MEDIUM outputs for sudden failure and tenant
disruption are deliberately binary. ``max_risk`` is provided over the
full three-level scale for composing with other risk categories.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..models import (
    CanThisWait,
    CostVolatility,
    DecisionComplexity,
    DegradationTrend,
    Detectability,
    FindingSignals,
    ImmediateSafetyRisk,
    Level,
    NineAxisDimensions,
    OverallHealth,
    PropertySignals,
    RiskLevel,
    SignalCounts,
    Urgency,
)

_ELEVATED = (Level.MEDIUM, Level.HIGH)

# Finding objects, (id, dims) pairs, {"id", "dimensions"} mappings or bare dims.
DimensionedFinding = Any


# =============================================================================
# Risk Scale
# =============================================================================

def max_risk(a: RiskLevel, b: RiskLevel) -> RiskLevel:
    """Higher of two levels on LOW < MEDIUM < HIGH; ties return ``a``."""
    return b if b > a else a


# =============================================================================
# Finding Signals
# =============================================================================

def derive_finding_signals(dims: NineAxisDimensions) -> FindingSignals:
    """Derive the five boolean signals for one finding."""
    return FindingSignals(
        has_immediate_safety_risk=(
            dims.safety_impact == Level.HIGH and dims.urgency == Urgency.NOW
        ),
        has_sudden_failure_risk=(
            dims.failure_likelihood == Level.HIGH
            and dims.detectability == Detectability.HIDDEN
        ),
        causes_tenant_disruption=(
            dims.tenant_disruption_risk in _ELEVATED
            and dims.failure_likelihood in _ELEVATED
        ),
        deferrable=(
            dims.urgency != Urgency.NOW
            and dims.degradation_trend != DegradationTrend.WORSENING
        ),
        benefits_from_planning=(
            dims.degradation_trend == DegradationTrend.WORSENING
            or dims.cost_volatility == CostVolatility.UNCERTAIN
            or dims.decision_complexity == DecisionComplexity.REQUIRES_JUDGEMENT
        ),
    )


# =============================================================================
# Property Signals
# =============================================================================

def _dimensions_of(finding: DimensionedFinding) -> NineAxisDimensions:
    if isinstance(finding, NineAxisDimensions):
        return finding
    if isinstance(finding, tuple):
        return finding[1]
    if isinstance(finding, Mapping):
        dims = finding["dimensions"]
        return dims if isinstance(dims, NineAxisDimensions) else NineAxisDimensions.from_dict(dims)
    dims = getattr(finding, "dimensions", None)
    if dims is None:
        raise ValueError(f"Finding {getattr(finding, 'id', '?')} has no dimensions")
    return dims


def derive_property_signals(findings: Iterable[DimensionedFinding]) -> PropertySignals:
    """
    Aggregate per-finding signals into a property verdict.

    Args:
        findings: Items carrying dimensions: Finding objects,
            ``(id, dims)`` pairs, ``{"id", "dimensions"}`` mappings or bare
            dimensions

    Returns:
        Property signals computed from this list only
    """
    signals = [derive_finding_signals(_dimensions_of(f)) for f in findings]

    immediate = sum(1 for s in signals if s.has_immediate_safety_risk)
    non_deferrable = sum(1 for s in signals if not s.deferrable)
    planning_benefit = sum(1 for s in signals if s.benefits_from_planning)

    immediate_risk = ImmediateSafetyRisk.PRESENT if immediate else ImmediateSafetyRisk.NONE
    sudden_failure = (
        RiskLevel.HIGH if any(s.has_sudden_failure_risk for s in signals) else RiskLevel.LOW
    )
    tenant_disruption = (
        RiskLevel.MEDIUM if any(s.causes_tenant_disruption for s in signals) else RiskLevel.LOW
    )

    if immediate_risk == ImmediateSafetyRisk.PRESENT:
        can_wait = CanThisWait.NO
    elif non_deferrable > 0:
        can_wait = CanThisWait.CONDITIONALLY
    else:
        can_wait = CanThisWait.YES

    if planning_benefit >= 2:
        planning_value = RiskLevel.HIGH
    elif planning_benefit == 1:
        planning_value = RiskLevel.MEDIUM
    else:
        planning_value = RiskLevel.LOW

    if immediate_risk == ImmediateSafetyRisk.PRESENT:
        health = OverallHealth.HIGH_RISK
    elif sudden_failure == RiskLevel.HIGH or tenant_disruption == RiskLevel.HIGH:
        health = OverallHealth.ATTENTION
    elif planning_value in (RiskLevel.HIGH, RiskLevel.MEDIUM):
        health = OverallHealth.STABLE
    else:
        health = OverallHealth.GOOD

    return PropertySignals(
        overall_health=health,
        immediate_safety_risk=immediate_risk,
        sudden_failure_risk=sudden_failure,
        tenant_disruption_risk=tenant_disruption,
        can_this_wait=can_wait,
        planning_value=planning_value,
        counts=SignalCounts(
            findings_total=len(signals),
            immediate=immediate,
            non_deferrable=non_deferrable,
            planning_benefit=planning_benefit,
        ),
    )


# =============================================================================
# Report Labels
# =============================================================================

_HEALTH_LABELS = {
    OverallHealth.HIGH_RISK: "Elevated",
    OverallHealth.ATTENTION: "Moderate",
    OverallHealth.STABLE: "Moderate",
    OverallHealth.GOOD: "Low",
}


def overall_health_to_risk_label(health: OverallHealth) -> str:
    """Map the verdict to the Low / Moderate / Elevated report label."""
    return _HEALTH_LABELS.get(health, "Moderate")
