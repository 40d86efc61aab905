"""
InspectPilot Signal Models

Signals are derived facts computed purely from nine-axis dimensions:
booleans per finding and a single property-level verdict. Property
signals are rebuilt from the current finding list on every call.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .enums import CanThisWait, ImmediateSafetyRisk, OverallHealth, RiskLevel


@dataclass(frozen=True)
class FindingSignals:
    """Boolean signals for one finding."""
    has_immediate_safety_risk: bool
    has_sudden_failure_risk: bool
    causes_tenant_disruption: bool
    deferrable: bool
    benefits_from_planning: bool

    def to_dict(self) -> dict[str, bool]:
        return {
            "has_immediate_safety_risk": self.has_immediate_safety_risk,
            "has_sudden_failure_risk": self.has_sudden_failure_risk,
            "causes_tenant_disruption": self.causes_tenant_disruption,
            "deferrable": self.deferrable,
            "benefits_from_planning": self.benefits_from_planning,
        }


@dataclass(frozen=True)
class SignalCounts:
    """Counts backing the property verdict."""
    findings_total: int = 0
    immediate: int = 0
    non_deferrable: int = 0
    planning_benefit: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "findings_total": self.findings_total,
            "immediate": self.immediate,
            "non_deferrable": self.non_deferrable,
            "planning_benefit": self.planning_benefit,
        }


@dataclass(frozen=True)
class PropertySignals:
    """
    Aggregate verdict for a property.

    Attributes:
        overall_health: GOOD | STABLE | ATTENTION | HIGH_RISK
        immediate_safety_risk: NONE | PRESENT
        sudden_failure_risk: LOW or HIGH (MEDIUM is never produced by aggregation)
        tenant_disruption_risk: LOW or MEDIUM
        can_this_wait: YES | CONDITIONALLY | NO
        planning_value: LOW | MEDIUM | HIGH
        counts: Counts backing the verdict
    """
    overall_health: OverallHealth
    immediate_safety_risk: ImmediateSafetyRisk
    sudden_failure_risk: RiskLevel
    tenant_disruption_risk: RiskLevel
    can_this_wait: CanThisWait
    planning_value: RiskLevel
    counts: SignalCounts

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_health": self.overall_health.value,
            "immediate_safety_risk": self.immediate_safety_risk.value,
            "sudden_failure_risk": self.sudden_failure_risk.value,
            "tenant_disruption_risk": self.tenant_disruption_risk.value,
            "can_this_wait": self.can_this_wait.value,
            "planning_value": self.planning_value.value,
            "counts": self.counts.to_dict(),
        }
