"""
Pytest configuration and fixtures for InspectPilot tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
from pathlib import Path

import pytest

from inspectpilot.models import (
    AuthoringRecord,
    BudgetBand,
    CategoryDefaults,
    ConditionOperator,
    ConditionRule,
    Finding,
    FindingProfile,
    FindingResponse,
    FindingRule,
    NineAxisDimensions,
    PriorityTier,
    ProfileCatalog,
    ProfileMessaging,
    ResponseCatalog,
    RuleSet,
)
from inspectpilot.packs import PackLoader, PackSnapshot


PACKS_DIR = Path(__file__).parent.parent / "packs"


# =============================================================================
# Factory Helpers
# =============================================================================

def answered(value):
    """Wrap a value in an answered envelope."""
    return {"value": value, "status": "answered"}


def skipped(reason: str, note: str = None) -> dict:
    """A skipped answer envelope."""
    envelope = {"status": "skipped", "skip_reason": reason}
    if note:
        envelope["skip_note"] = note
    return envelope


def make_condition(field: str, operator: str = "equals", value=None) -> ConditionRule:
    """Create a ConditionRule."""
    return ConditionRule(field=field, operator=ConditionOperator(operator), value=value)


def make_rule(
    id: str,
    conditions: list = None,
    priority: PriorityTier = None,
    title: str = None,
) -> FindingRule:
    """Create a FindingRule."""
    return FindingRule(
        id=id,
        conditions=tuple(conditions or []),
        priority=priority,
        title=title,
    )


def make_rule_set(rules: list = None, hard_overrides: list = None, version: str = "test") -> RuleSet:
    """Create a RuleSet."""
    return RuleSet(
        rules=tuple(rules or []),
        hard_overrides=frozenset(hard_overrides or []),
        version=version,
    )


def make_finding(
    id: str = "PARTIAL_RCD_COVERAGE",
    priority: PriorityTier = PriorityTier.RECOMMENDED_0_3_MONTHS,
    **kwargs,
) -> Finding:
    """Create a Finding with sensible defaults."""
    return Finding(id=id, priority=priority, **kwargs)


def make_record(**kwargs) -> AuthoringRecord:
    """Create an AuthoringRecord from raw labels."""
    return AuthoringRecord.from_dict(kwargs)


def make_dimensions(**overrides) -> NineAxisDimensions:
    """Create dimensions with benign defaults; override any axis by name."""
    values = {
        "safety_impact": "low",
        "compliance_exposure": "low",
        "failure_likelihood": "low",
        "urgency": "monitor",
        "degradation_trend": "stable",
        "tenant_disruption_risk": "low",
        "cost_volatility": "known",
        "detectability": "visible",
        "decision_complexity": "simple",
    }
    values.update(overrides)
    return NineAxisDimensions.from_dict(values)


def make_profile(
    finding_id: str = "PARTIAL_RCD_COVERAGE",
    category: str = "SAFETY",
    asset_component: str = None,
    title: str = None,
    why_it_matters: str = None,
    if_not_addressed: str = None,
    planning_guidance: str = None,
    **kwargs,
) -> FindingProfile:
    """Create a FindingProfile."""
    return FindingProfile(
        finding_id=finding_id,
        category=category,
        asset_component=asset_component,
        messaging=ProfileMessaging(
            title=title,
            why_it_matters=why_it_matters,
            if_not_addressed=if_not_addressed,
            planning_guidance=planning_guidance,
        ),
        **kwargs,
    )


def make_catalog(profiles: list = None, category_defaults: dict = None) -> ProfileCatalog:
    """Create a ProfileCatalog keyed by finding id."""
    return ProfileCatalog(
        profiles={p.finding_id: p for p in profiles or []},
        category_defaults=category_defaults or {},
    )


def make_responses(**responses: FindingResponse) -> ResponseCatalog:
    """Create a ResponseCatalog from keyword arguments."""
    return ResponseCatalog(responses=responses)


def make_snapshot(
    rules: RuleSet = None,
    profiles: ProfileCatalog = None,
    responses: ResponseCatalog = None,
) -> PackSnapshot:
    """Create a PackSnapshot."""
    return PackSnapshot(
        rules=rules or make_rule_set(),
        profiles=profiles or make_catalog(),
        responses=responses or ResponseCatalog(),
        source="test",
    )


# =============================================================================
# Common Fixtures
# =============================================================================

@pytest.fixture
def category_defaults():
    """Category defaults for SAFETY and OTHER."""
    return {
        "SAFETY": CategoryDefaults(
            risk_severity=4,
            likelihood=3,
            priority=PriorityTier.RECOMMENDED_0_3_MONTHS,
            budget_band=BudgetBand.MED,
            timeline="0–3 months",
        ),
        "OTHER": CategoryDefaults(),
    }


@pytest.fixture
def pack_snapshot():
    """Snapshot of the shipped packs."""
    return PackLoader(strict=True).load_snapshot(PACKS_DIR)


@pytest.fixture
def raw_answers():
    """Raw answers with partial RCD coverage, a legacy fuse and one skipped question."""
    return {
        "created_at": "2025-03-01T09:00:00Z",
        "switchboard": {
            "rcd_present": answered(True),
            "rcd_coverage": answered("partial"),
            "supply_fuse_type": answered("ceramic"),
            "labelling_complete": answered(True),
        },
        "earthing": {
            "men_link_verified": answered(True),
        },
        "roof_space": {
            "accessible": skipped("no_access", "Hatch sealed"),
        },
        "rcd_tests": {
            "exceptions": {
                "photo_ids": answered(["P07", "P08", "P09"]),
            },
        },
    }
