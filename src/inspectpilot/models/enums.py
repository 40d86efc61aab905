"""
InspectPilot Enumerations

All enumeration types used throughout the InspectPilot system.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


# =============================================================================
# Rule Conditions
# =============================================================================

class ConditionOperator(str, Enum):
    """Operators available to finding rule conditions."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    EXISTS = "exists"
    CONTAINS = "contains"


# =============================================================================
# Priority Tiers
# =============================================================================

class PriorityTier(str, Enum):
    """
    Canonical urgency classes for a finding.

    Synonyms (URGENT, RECOMMENDED, PLAN, ...) are normalized into one of
    these by ``inspectpilot.engine.priority.normalize_priority``.
    """
    IMMEDIATE = "IMMEDIATE"
    RECOMMENDED_0_3_MONTHS = "RECOMMENDED_0_3_MONTHS"
    PLAN_MONITOR = "PLAN_MONITOR"

    @property
    def rank(self) -> int:
        """Sort key, most urgent first."""
        return _TIER_RANK[self]

    @property
    def is_top_tier(self) -> bool:
        return self is PriorityTier.IMMEDIATE

    @classmethod
    def parse(cls, value: object) -> Optional[PriorityTier]:
        """
        Map a priority label or synonym onto a tier.

        Returns None for empty input so callers can fall through to the
        next source. Unrecognised non-empty labels map to PLAN_MONITOR.
        """
        if isinstance(value, PriorityTier):
            return value
        if value is None:
            return None
        label = str(value).strip().upper().replace("-", "_").replace(" ", "_")
        if not label:
            return None
        return _TIER_SYNONYMS.get(label, cls.PLAN_MONITOR)


_TIER_SYNONYMS = {
    "IMMEDIATE": PriorityTier.IMMEDIATE,
    "URGENT": PriorityTier.IMMEDIATE,
    "RECOMMENDED": PriorityTier.RECOMMENDED_0_3_MONTHS,
    "RECOMMENDED_0_3_MONTHS": PriorityTier.RECOMMENDED_0_3_MONTHS,
    "PLAN": PriorityTier.PLAN_MONITOR,
    "PLAN_MONITOR": PriorityTier.PLAN_MONITOR,
    "MONITOR": PriorityTier.PLAN_MONITOR,
}

_TIER_RANK = {
    PriorityTier.IMMEDIATE: 0,
    PriorityTier.RECOMMENDED_0_3_MONTHS: 1,
    PriorityTier.PLAN_MONITOR: 2,
}


# =============================================================================
# Risk Scale
# =============================================================================

class RiskLevel(str, Enum):
    """Ordered risk scale LOW < MEDIUM < HIGH."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def order(self) -> int:
        return _RISK_ORDER[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.order >= other.order


_RISK_ORDER = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
}


# =============================================================================
# Nine-Axis Dimensions (D1-D9)
# =============================================================================

class Level(str, Enum):
    """Qualitative level used by D1, D2, D3 and D6."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Urgency(str, Enum):
    """D4: how soon the condition should be acted on."""
    NOW = "now"
    ZERO_TO_THREE_MONTHS = "0_3m"
    SIX_TO_EIGHTEEN_MONTHS = "6_18m"
    NEXT_RENOVATION = "next_renovation"
    MONITOR = "monitor"


class DegradationTrend(str, Enum):
    """D5: direction the condition is heading."""
    STABLE = "stable"
    WORSENING = "worsening"
    UNKNOWN = "unknown"


class CostVolatility(str, Enum):
    """D7: confidence in the remediation cost."""
    KNOWN = "known"
    UNCERTAIN = "uncertain"


class Detectability(str, Enum):
    """D8: whether deterioration would be noticed before failure."""
    VISIBLE = "visible"
    HIDDEN = "hidden"


class DecisionComplexity(str, Enum):
    """D9: whether remediation needs professional judgement."""
    SIMPLE = "simple"
    REQUIRES_JUDGEMENT = "requires_judgement"


# =============================================================================
# Authoring Representation
# =============================================================================

class SafetyRating(str, Enum):
    """Authored safety rating."""
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"


class UrgencyRating(str, Enum):
    """Authored urgency rating."""
    IMMEDIATE = "IMMEDIATE"
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"


class LiabilityRating(str, Enum):
    """Authored liability rating."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class EscalationRating(str, Enum):
    """Authored escalation rating."""
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"


class BudgetBand(str, Enum):
    """Qualitative budget band authored on a profile."""
    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"


# =============================================================================
# Property Signals
# =============================================================================

class OverallHealth(str, Enum):
    """Property-level verdict."""
    GOOD = "GOOD"
    STABLE = "STABLE"
    ATTENTION = "ATTENTION"
    HIGH_RISK = "HIGH_RISK"


class ImmediateSafetyRisk(str, Enum):
    NONE = "NONE"
    PRESENT = "PRESENT"


class CanThisWait(str, Enum):
    YES = "YES"
    CONDITIONALLY = "CONDITIONALLY"
    NO = "NO"


# =============================================================================
# Answer Envelopes
# =============================================================================

class AnswerStatus(str, Enum):
    """Status tag carried by an answer envelope."""
    ANSWERED = "answered"
    SKIPPED = "skipped"
