"""Tests for InspectPilot finding classification."""
import pytest

from inspectpilot.engine.classification import (
    DEFAULT_SPACE_GROUP,
    DEFAULT_SYSTEM_GROUP,
    classify_finding,
    normalize_finding_id,
)


class TestClassifyFinding:
    """Tests for classify_finding."""

    @pytest.mark.parametrize("finding_id,system_group", [
        ("RCD_TEST_FAIL_KITCHEN", "rcd"),
        ("MEN_NOT_VERIFIED", "earthing"),
        ("BOARD_AT_CAPACITY", "switchboard"),
        ("GPO_MECHANICAL_LOOSE", "power"),
        ("SMOKE_ALARM_FAILURE", "smoke_alarm"),
        ("THERMAL_STRESS_ACTIVE", "thermal"),
        ("ASBESTOS_RISK", "other"),
    ])
    def test_system_group(self, finding_id, system_group):
        assert classify_finding(finding_id).system_group == system_group

    def test_space_group(self):
        assert classify_finding("GPO_BATHROOM_NO_RCD").space_group == "bathroom"
        assert classify_finding("COOKTOP_ISOLATION").space_group == "kitchen"

    def test_defaults(self):
        classification = classify_finding("UNMAPPED")
        assert classification.system_group == DEFAULT_SYSTEM_GROUP
        assert classification.space_group == DEFAULT_SPACE_GROUP
        assert classification.tags == ()

    def test_every_matching_tag_contributes_once(self):
        tags = classify_finding("RCD_BATHROOM_WATER_DAMAGE").tags
        assert tags == ("safety", "moisture", "rcd")

    def test_id_is_normalized(self):
        assert normalize_finding_id("  men-not-verified ") == "MEN_NOT_VERIFIED"
        assert classify_finding("men-not-verified").system_group == "earthing"

    def test_to_dict(self):
        data = classify_finding("ASBESTOS_RISK").to_dict()
        assert data["tags"] == ["safety", "hazard"]
