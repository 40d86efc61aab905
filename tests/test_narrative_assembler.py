"""
Tests for InspectPilot Narrative Assembler

Tests cover:
- Block waterfalls (asset, observed, risk, priority, budget)
- Profile priority override
- Batch assembly, tier ordering and aggregate failure
"""
import asyncio

import pytest

from inspectpilot.engine.narrative_assembler import (
    BUDGET_TO_BE_CONFIRMED,
    UNKNOWN_BAND_RANGE,
    NarrativeAssembler,
    budget_range_from_band,
    effective_priority,
    priority_label,
    resolve_asset_component,
    resolve_budget_range,
    resolve_observed_condition,
    resolve_risk_interpretation,
    sort_by_tier,
    synthesize_risk_interpretation,
)
from inspectpilot.engine.narrative_validator import validate_risk_interpretation
from inspectpilot.exceptions import FindingPagesValidationError
from inspectpilot.models import (
    BudgetaryRange,
    BudgetBand,
    CategoryDefaults,
    FindingResponse,
    PriorityTier,
    ResponseCatalog,
)

from tests.conftest import make_catalog, make_finding, make_profile, make_responses

IMMEDIATE = PriorityTier.IMMEDIATE
RECOMMENDED = PriorityTier.RECOMMENDED_0_3_MONTHS
PLAN = PriorityTier.PLAN_MONITOR

EMPTY = FindingResponse()


# =============================================================================
# Waterfall Tests
# =============================================================================

class TestAssetComponent:
    """Tests for resolve_asset_component."""

    def test_profile_component_wins(self):
        profile = make_profile(asset_component="Main switchboard", title="Profile title")
        finding = make_finding(title="Finding title")
        assert resolve_asset_component(finding, profile, EMPTY) == "Main switchboard"

    def test_falls_through_titles(self):
        finding = make_finding(title="Finding title")
        assert resolve_asset_component(finding, make_profile(title="Profile"), EMPTY) == "Profile"
        assert resolve_asset_component(finding, make_profile(), FindingResponse(title="Authored")) == "Authored"
        assert resolve_asset_component(finding, make_profile(), EMPTY) == "Finding title"

    def test_humanized_id_last(self):
        assert resolve_asset_component(make_finding("LABELING_POOR"), make_profile(), EMPTY) == "LABELING POOR"


class TestObservedCondition:
    """Tests for resolve_observed_condition."""

    def test_authored_list_joined(self):
        response = FindingResponse(observed_condition=("RCD on power only", " ", "Lights unprotected"))
        assert resolve_observed_condition(make_finding(), response, "x") == (
            "RCD on power only. Lights unprotected."
        )

    def test_authored_string(self):
        response = FindingResponse(observed_condition="  Fuse is ceramic.  ")
        assert resolve_observed_condition(make_finding(observed="raw"), response, "x") == "Fuse is ceramic."

    def test_raw_text_then_facts(self):
        assert resolve_observed_condition(make_finding(observed="Raw note"), EMPTY, "x") == "Raw note"
        assert resolve_observed_condition(make_finding(facts="Facts"), EMPTY, "x") == "Facts"

    def test_synthesized(self):
        assert resolve_observed_condition(make_finding(), EMPTY, "Circuit labelling") == (
            "Circuit labelling was observed during the visual inspection."
        )


class TestRiskInterpretation:
    """Tests for synthesize_risk_interpretation and resolve_risk_interpretation."""

    @pytest.mark.parametrize("tier", list(PriorityTier))
    def test_synthesized_text_always_validates(self, tier):
        text = resolve_risk_interpretation(make_profile(), EMPTY, tier)
        assert validate_risk_interpretation(text, tier) == []

    def test_consequence_is_rephrased(self):
        profile = make_profile(
            why_it_matters="Labels help isolate circuits quickly.",
            if_not_addressed="Isolation during faults will take longer.",
        )
        text = synthesize_risk_interpretation(profile, EMPTY, PLAN)
        assert "If this condition is not addressed, isolation during faults will take longer." in text

    def test_planning_guidance_without_clause_gets_prefix(self):
        profile = make_profile(planning_guidance="Budget for it next year.")
        text = synthesize_risk_interpretation(profile, EMPTY, PLAN)
        assert text.endswith("This condition does not present an immediate hazard. Budget for it next year.")

    def test_top_tier_uses_immediate_justification(self):
        profile = make_profile(planning_guidance="Can be planned.")
        text = synthesize_risk_interpretation(profile, EMPTY, IMMEDIATE)
        assert "Can be planned" not in text
        assert "requires urgent attention" in text

    def test_authored_text_is_repaired(self):
        response = FindingResponse(risk_interpretation="Corrosion raises earth resistance.")
        text = resolve_risk_interpretation(make_profile(), response, RECOMMENDED)
        assert text.startswith("Corrosion raises earth resistance.")
        assert validate_risk_interpretation(text, RECOMMENDED) == []


class TestPriority:
    """Tests for effective_priority and priority_label."""

    def test_profile_override_wins(self):
        profile = make_profile(priority=IMMEDIATE)
        assert effective_priority(make_finding(priority=PLAN), profile) == IMMEDIATE

    def test_finding_tier_without_override(self):
        assert effective_priority(make_finding(priority=PLAN), make_profile()) == PLAN

    def test_labels(self):
        assert str(priority_label(IMMEDIATE)) == "🔴 Urgent Liability Risk"
        assert str(priority_label(RECOMMENDED)) == "🟡 Budgetary Provision Recommended"
        assert str(priority_label(PLAN)) == "🟢 Acceptable"


class TestBudgetRange:
    """Tests for resolve_budget_range."""

    defaults = CategoryDefaults(budget_band=BudgetBand.MED)

    def test_profile_range_text_wins(self):
        profile = make_profile(budget_range="AUD $350–$450", budget_band=BudgetBand.HIGH)
        response = FindingResponse(budget_range_text="ignored", budget_range_low=1, budget_range_high=2)
        assert resolve_budget_range(profile, response, self.defaults) == "AUD $350–$450"

    def test_authored_range_text(self):
        response = FindingResponse(budget_range_text="AUD $300–$600")
        assert resolve_budget_range(make_profile(), response, self.defaults) == "AUD $300–$600"

    def test_authored_low_high(self):
        response = FindingResponse(budget_range_low=120, budget_range_high=240.5)
        assert resolve_budget_range(make_profile(), response, self.defaults) == "AUD $120 – $240.5"

    def test_authored_low_high_with_currency_and_note(self):
        response = FindingResponse(
            budget_range_low=350.0,
            budget_range_high=450.0,
            budget_range_currency="NZD",
            budget_range_note="Two RCBOs",
        )
        assert resolve_budget_range(make_profile(), response, self.defaults) == "NZD $350 – $450. Two RCBOs"

    def test_low_without_high_falls_through(self):
        response = FindingResponse(budget_range_low=120)
        assert resolve_budget_range(make_profile(), response, self.defaults) == "AUD $500–$2,000"

    def test_legacy_range(self):
        response = FindingResponse(budgetary_range=BudgetaryRange(low=200, high=350))
        assert resolve_budget_range(make_profile(), response, self.defaults) == "AUD $200 – $350"

    def test_profile_band_then_category_band(self):
        profile = make_profile(budget_band=BudgetBand.HIGH)
        assert resolve_budget_range(profile, EMPTY, self.defaults) == "AUD $2,000–$10,000"
        assert resolve_budget_range(make_profile(), EMPTY, CategoryDefaults(budget_band=BudgetBand.LOW)) == (
            "AUD $100–$500"
        )

    def test_to_be_confirmed(self):
        assert resolve_budget_range(make_profile(), EMPTY, CategoryDefaults(budget_band=None)) == (
            BUDGET_TO_BE_CONFIRMED
        )

    def test_unknown_band(self):
        assert budget_range_from_band(None) == UNKNOWN_BAND_RANGE


# =============================================================================
# Assembler Tests
# =============================================================================

class TestSortByTier:
    """Tests for sort_by_tier."""

    def test_stable_tier_order(self):
        findings = [
            make_finding("A", PLAN),
            make_finding("B", IMMEDIATE),
            make_finding("C", RECOMMENDED),
            make_finding("D", IMMEDIATE),
        ]
        assert [f.id for f in sort_by_tier(findings)] == ["B", "D", "C", "A"]


class TestNarrativeAssembler:
    """Tests for NarrativeAssembler."""

    @pytest.fixture
    def assembler(self):
        profiles = make_catalog([
            make_profile("PARTIAL_RCD_COVERAGE", asset_component="RCD protection", budget_range="AUD $350–$450"),
            make_profile("MEN_NOT_VERIFIED", asset_component="MEN link", priority=IMMEDIATE),
            make_profile("LABELING_POOR", category="MAINTENANCE", budget_band=BudgetBand.LOW),
        ])
        responses = make_responses(
            LABELING_POOR=FindingResponse(observed_condition="Several circuits are unlabelled."),
        )
        return NarrativeAssembler(profiles=profiles, responses=responses)

    def test_pages_in_tier_order(self, assembler):
        result = assembler.assemble([
            make_finding("LABELING_POOR", PLAN),
            make_finding("PARTIAL_RCD_COVERAGE", RECOMMENDED),
            make_finding("MEN_NOT_VERIFIED", IMMEDIATE),
        ])
        assert result.finding_ids == ["MEN_NOT_VERIFIED", "PARTIAL_RCD_COVERAGE", "LABELING_POOR"]

    def test_order_follows_finding_tier(self, assembler):
        result = assembler.assemble([
            make_finding("PARTIAL_RCD_COVERAGE", PLAN),
            make_finding("MEN_NOT_VERIFIED", PLAN),
        ])
        assert result.finding_ids == ["PARTIAL_RCD_COVERAGE", "MEN_NOT_VERIFIED"]

    def test_page_blocks(self, assembler):
        page = assembler.assemble([make_finding("LABELING_POOR", PLAN)]).pages[0]
        assert page.asset_component == "LABELING POOR"
        assert page.observed_condition == "Several circuits are unlabelled."
        assert page.evidence.text == "No photographic evidence captured at time of assessment."
        assert page.budgetary_planning_range == "AUD $100–$500"
        assert str(page.priority_classification) == "🟢 Acceptable"

    def test_profile_priority_applies_to_page(self, assembler):
        page = assembler.assemble([make_finding("MEN_NOT_VERIFIED", PLAN)]).pages[0]
        assert page.priority == IMMEDIATE
        assert str(page.priority_classification) == "🔴 Urgent Liability Risk"

    def test_missing_profiles_fail_batch_once(self, assembler):
        with pytest.raises(FindingPagesValidationError) as exc_info:
            assembler.assemble([
                make_finding("UNKNOWN_A"),
                make_finding("PARTIAL_RCD_COVERAGE"),
                make_finding("UNKNOWN_B"),
            ])
        error = exc_info.value
        assert error.finding_ids == ["UNKNOWN_A", "UNKNOWN_B"]
        assert error.details == {"error_count": 2}
        assert "Finding ID(s): UNKNOWN_A, UNKNOWN_B" in error.message
        assert "First error: Finding UNKNOWN_A - profile: Finding profile not found for UNKNOWN_A" in error.message
        assert error.code == "IP_FINDING_PAGES_INVALID"

    def test_empty_batch(self, assembler):
        assert assembler.assemble([]).pages == []

    def test_resolve_page_reports_violations(self):
        assembler = NarrativeAssembler(profiles=make_catalog(), responses=ResponseCatalog())
        page, violations = asyncio.run(assembler.resolve_page(make_finding("X")))
        assert page is None
        assert violations[0].field == "profile"

    def test_shipped_packs(self, pack_snapshot):
        assembler = NarrativeAssembler(pack_snapshot.profiles, pack_snapshot.responses)
        result = assembler.assemble([
            make_finding("GPO_MECHANICAL_LOOSE", RECOMMENDED),
            make_finding("PARTIAL_RCD_COVERAGE", RECOMMENDED),
        ])
        pages = {p.finding_id: p for p in result.pages}
        assert pages["PARTIAL_RCD_COVERAGE"].observed_condition == (
            "RCD protection is installed on power circuits only. "
            "Lighting circuits are protected by circuit breakers without RCD protection."
        )
        assert pages["PARTIAL_RCD_COVERAGE"].budgetary_planning_range == "AUD $350–$450"
        assert pages["GPO_MECHANICAL_LOOSE"].budgetary_planning_range == "AUD $120 – $240.5"
