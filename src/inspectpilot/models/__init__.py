"""
InspectPilot Models

All domain models for the InspectPilot finding engine.

Exports all models organized by category for convenient imports:

    from inspectpilot.models import (
        # Enums
        ConditionOperator, PriorityTier, RiskLevel,
        # Rules
        ConditionRule, FindingRule, RuleSet, DerivedFinding,
        # Dimensions
        NineAxisDimensions, AuthoringRecord,
        # Signals
        FindingSignals, PropertySignals,
        # Profiles / responses
        FindingProfile, ProfileCatalog, FindingResponse, ResponseCatalog,
        # Narrative
        FindingPage, Violation,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    AnswerStatus,
    BudgetBand,
    CanThisWait,
    ConditionOperator,
    CostVolatility,
    DecisionComplexity,
    DegradationTrend,
    Detectability,
    EscalationRating,
    ImmediateSafetyRisk,
    Level,
    LiabilityRating,
    OverallHealth,
    PriorityTier,
    RiskLevel,
    SafetyRating,
    Urgency,
    UrgencyRating,
)

# =============================================================================
# Rules
# =============================================================================
from .rules import (
    DEFAULT_RULE_PRIORITY,
    ConditionRule,
    DerivedFinding,
    FindingRule,
    RuleSet,
)

# =============================================================================
# Dimensions
# =============================================================================
from .dimensions import (
    AXES,
    AuthoringRecord,
    NineAxisDimensions,
    parse_axes,
)

# =============================================================================
# Signals
# =============================================================================
from .signals import (
    FindingSignals,
    PropertySignals,
    SignalCounts,
)

# =============================================================================
# Profiles and Responses
# =============================================================================
from .profile import (
    DEFAULT_WHY_IT_MATTERS,
    BudgetaryRange,
    CategoryDefaults,
    FindingProfile,
    FindingResponse,
    ProfileCatalog,
    ProfileMessaging,
    ProfileRisk,
    ResponseCatalog,
)

# =============================================================================
# Findings
# =============================================================================
from .findings import (
    Finding,
    FindingClassification,
)

# =============================================================================
# Narrative
# =============================================================================
from .narrative import (
    PAGE_FIELDS,
    EvidenceBlock,
    EvidenceItem,
    FindingPage,
    FindingPagesResult,
    PriorityLabel,
    Violation,
)


__all__ = [
    # Enums
    "AnswerStatus",
    "BudgetBand",
    "CanThisWait",
    "ConditionOperator",
    "CostVolatility",
    "DecisionComplexity",
    "DegradationTrend",
    "Detectability",
    "EscalationRating",
    "ImmediateSafetyRisk",
    "Level",
    "LiabilityRating",
    "OverallHealth",
    "PriorityTier",
    "RiskLevel",
    "SafetyRating",
    "Urgency",
    "UrgencyRating",
    # Rules
    "DEFAULT_RULE_PRIORITY",
    "ConditionRule",
    "DerivedFinding",
    "FindingRule",
    "RuleSet",
    # Dimensions
    "AXES",
    "AuthoringRecord",
    "NineAxisDimensions",
    "parse_axes",
    # Signals
    "FindingSignals",
    "PropertySignals",
    "SignalCounts",
    # Profiles and responses
    "DEFAULT_WHY_IT_MATTERS",
    "BudgetaryRange",
    "CategoryDefaults",
    "FindingProfile",
    "FindingResponse",
    "ProfileCatalog",
    "ProfileMessaging",
    "ProfileRisk",
    "ResponseCatalog",
    # Findings
    "Finding",
    "FindingClassification",
    # Narrative
    "PAGE_FIELDS",
    "EvidenceBlock",
    "EvidenceItem",
    "FindingPage",
    "FindingPagesResult",
    "PriorityLabel",
    "Violation",
]
