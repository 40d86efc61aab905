"""
InspectPilot Dimension Models

Two representations of a finding's risk:

- NineAxisDimensions: the canonical D1-D9 decision model consumed by the
  signal aggregator. Every axis is always populated.
- AuthoringRecord: the simpler hand-maintained record (safety, urgency,
  liability, budget, severity, likelihood, escalation). The dimension
  normalizer is the only place that maps it onto D1-D9.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, TypeVar

from .enums import (
    CostVolatility,
    DecisionComplexity,
    DegradationTrend,
    Detectability,
    EscalationRating,
    Level,
    LiabilityRating,
    PriorityTier,
    SafetyRating,
    Urgency,
    UrgencyRating,
)


# Axis name -> enum type, in D1..D9 order.
AXES: dict[str, type] = {
    "safety_impact": Level,
    "compliance_exposure": Level,
    "failure_likelihood": Level,
    "urgency": Urgency,
    "degradation_trend": DegradationTrend,
    "tenant_disruption_risk": Level,
    "cost_volatility": CostVolatility,
    "detectability": Detectability,
    "decision_complexity": DecisionComplexity,
}

E = TypeVar("E")


def _parse_enum(enum_type: type[E], value: Any) -> Optional[E]:
    """Parse a member by value or name, case-insensitively. None when unknown."""
    if value is None:
        return None
    if isinstance(value, enum_type):
        return value
    text = str(value).strip()
    if not text:
        return None
    for member in enum_type:  # type: ignore[attr-defined]
        if text.lower() == member.value.lower() or text.upper() == member.name:
            return member
    return None


def _parse_scale(value: Any) -> Optional[int]:
    """Parse a 1-5 score, clamping out-of-range numbers. None when not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return None
    return max(1, min(5, number))


def _parse_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_axes(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Parse the canonical D1-D9 values present in ``data``.

    Absent or blank axes are left out for the normalizer to fill.

    Raises:
        ValueError: If a supplied value is not a member of its axis enum
    """
    axes: dict[str, Any] = {}
    for axis, enum_type in AXES.items():
        raw = data.get(axis)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        parsed = _parse_enum(enum_type, raw)
        if parsed is None:
            allowed = ", ".join(m.value for m in enum_type)  # type: ignore[attr-defined]
            raise ValueError(f"Dimension '{axis}' has invalid value {raw!r} (expected one of: {allowed})")
        axes[axis] = parsed
    return axes


# =============================================================================
# Canonical Nine-Axis Model
# =============================================================================

@dataclass(frozen=True)
class NineAxisDimensions:
    """
    The D1-D9 risk dimensions of a single finding.

    Attributes:
        safety_impact: D1
        compliance_exposure: D2
        failure_likelihood: D3
        urgency: D4
        degradation_trend: D5
        tenant_disruption_risk: D6
        cost_volatility: D7
        detectability: D8
        decision_complexity: D9
    """
    safety_impact: Level
    compliance_exposure: Level
    failure_likelihood: Level
    urgency: Urgency
    degradation_trend: DegradationTrend
    tenant_disruption_risk: Level
    cost_volatility: CostVolatility
    detectability: Detectability
    decision_complexity: DecisionComplexity

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NineAxisDimensions:
        """
        Build from canonical values.

        Raises:
            ValueError: If any axis is missing or not a member of its enum
        """
        values = parse_axes(data)
        for axis in AXES:
            if axis not in values:
                raise ValueError(f"Dimension '{axis}' is missing")
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        return {axis: getattr(self, axis).value for axis in AXES}


# =============================================================================
# Authoring Representation
# =============================================================================

@dataclass
class AuthoringRecord:
    """
    Hand-maintained risk record for a finding.

    Every field is optional; the normalizer falls back per axis to the
    profile/category default and then to a global default.

    Attributes:
        safety: HIGH | MODERATE | LOW
        urgency: IMMEDIATE | SHORT_TERM | LONG_TERM
        liability: HIGH | MEDIUM | LOW
        budget_low: Lower cost estimate
        budget_high: Upper cost estimate
        priority: Authored priority tier
        severity: 1-5
        likelihood: 1-5
        escalation: HIGH | MODERATE | LOW
        axes: Explicit canonical D1-D9 values, which win over mapped ones
    """
    safety: Optional[SafetyRating] = None
    urgency: Optional[UrgencyRating] = None
    liability: Optional[LiabilityRating] = None
    budget_low: Optional[float] = None
    budget_high: Optional[float] = None
    priority: Optional[PriorityTier] = None
    severity: Optional[int] = None
    likelihood: Optional[int] = None
    escalation: Optional[EscalationRating] = None
    axes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AuthoringRecord:
        """
        Leniently parse an authored record.

        Unknown labels and non-numeric scores become None so the
        normalizer's fallback applies instead of an error.
        """
        # Canonical values may sit at the top level or under "dimensions".
        canonical = dict(data)
        nested = data.get("dimensions")
        if isinstance(nested, Mapping):
            canonical.update(nested)
        axes = {}
        for axis, enum_type in AXES.items():
            parsed = _parse_enum(enum_type, canonical.get(axis))
            if parsed is not None:
                axes[axis] = parsed
        return cls(
            safety=_parse_enum(SafetyRating, data.get("safety")),
            urgency=_parse_enum(UrgencyRating, data.get("urgency")),
            liability=_parse_enum(LiabilityRating, data.get("liability")),
            budget_low=_parse_amount(data.get("budget_low")),
            budget_high=_parse_amount(data.get("budget_high")),
            priority=PriorityTier.parse(data.get("priority")),
            severity=_parse_scale(data.get("severity")),
            likelihood=_parse_scale(data.get("likelihood")),
            escalation=_parse_enum(EscalationRating, data.get("escalation")),
            axes=axes,
        )

    @property
    def has_budget(self) -> bool:
        return self.budget_low is not None and self.budget_high is not None

    @property
    def has_ratings(self) -> bool:
        """True when anything besides explicit axes was authored."""
        return any(
            getattr(self, name) is not None
            for name in (
                "safety", "urgency", "liability", "budget_low", "budget_high",
                "priority", "severity", "likelihood", "escalation",
            )
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name in ("safety", "urgency", "liability", "priority", "escalation"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value.value
        for name in ("budget_low", "budget_high", "severity", "likelihood"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.axes:
            result["axes"] = {k: v.value for k, v in self.axes.items()}
        return result
