"""
Tests for InspectPilot Models

Tests cover:
- Finding construction from loosely typed input
- Full and partial canonical dimension maps
- Axis parsing
"""
import pytest

from inspectpilot.engine import normalize
from inspectpilot.models import (
    Finding,
    Level,
    NineAxisDimensions,
    PriorityTier,
    SafetyRating,
    Urgency,
    parse_axes,
)

from tests.conftest import make_dimensions


# =============================================================================
# Axis Parsing
# =============================================================================

class TestParseAxes:
    """Tests for parse_axes and NineAxisDimensions.from_dict."""

    def test_only_present_axes_returned(self):
        axes = parse_axes({"safety_impact": "HIGH", "urgency": "0_3m", "detectability": ""})
        assert axes == {"safety_impact": Level.HIGH, "urgency": Urgency.ZERO_TO_THREE_MONTHS}

    def test_invalid_value_rejected(self):
        with pytest.raises(ValueError, match="safety_impact"):
            parse_axes({"safety_impact": "extreme"})

    def test_full_map_requires_every_axis(self):
        values = make_dimensions().to_dict()
        del values["compliance_exposure"]
        with pytest.raises(ValueError, match="compliance_exposure"):
            NineAxisDimensions.from_dict(values)


# =============================================================================
# Finding.from_dict
# =============================================================================

class TestFindingFromDict:
    """Tests for building findings from mappings."""

    def test_complete_dimensions(self):
        dims = make_dimensions(safety_impact="high").to_dict()
        finding = Finding.from_dict({"id": "X", "dimensions": dims})
        assert finding.dimensions == make_dimensions(safety_impact="high")
        assert finding.authoring is None

    def test_partial_dimensions_kept_as_explicit_axes(self):
        dims = make_dimensions().to_dict()
        del dims["compliance_exposure"]
        finding = Finding.from_dict({"id": "X", "dimensions": dims})
        assert finding.dimensions is None
        assert len(finding.authoring.axes) == 8
        assert not finding.authoring.has_ratings

    def test_partial_dimensions_completed_by_normalizer(self):
        finding = Finding.from_dict({
            "id": "X",
            "dimensions": {"safety_impact": "high", "urgency": "now"},
            "authoring": {"safety": "LOW", "liability": "HIGH"},
        })
        dims = normalize(finding.id, finding.authoring)
        assert dims.safety_impact == Level.HIGH
        assert dims.urgency == Urgency.NOW
        assert dims.compliance_exposure == Level.HIGH
        assert finding.authoring.safety == SafetyRating.LOW

    def test_invalid_dimension_value(self):
        with pytest.raises(ValueError):
            Finding.from_dict({"id": "X", "dimensions": {"urgency": "yesterday"}})

    def test_scalar_photo_id(self):
        assert Finding.from_dict({"id": "X", "photo_ids": "P01"}).photo_ids == ("P01",)

    def test_photo_id_list(self):
        assert Finding.from_dict({"id": "X", "photo_ids": ["P01", 2]}).photo_ids == ("P01", "2")

    def test_priority_synonym(self):
        finding = Finding.from_dict({"id": "X", "priority": "urgent"})
        assert finding.priority == PriorityTier.IMMEDIATE
