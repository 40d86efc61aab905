"""
Tests for InspectPilot Field Resolver

Tests cover:
- Envelope unwrapping (nested, skipped, depth bound)
- Dotted path resolution through envelopes and lists
- Presence checks
- Skipped-answer limitations
"""
import pytest

from inspectpilot.engine.field_resolver import (
    MAX_ENVELOPE_DEPTH,
    collect_limitations,
    first_value,
    get_value,
    is_envelope,
    is_present,
    resolve_field,
    unwrap_envelope,
)

from tests.conftest import answered, skipped


# =============================================================================
# Envelope Tests
# =============================================================================

class TestEnvelopes:
    """Tests for is_envelope and unwrap_envelope."""

    def test_value_key_marks_envelope(self):
        assert is_envelope({"value": 1}) is True

    def test_status_tag_marks_envelope(self):
        assert is_envelope({"status": "skipped", "skip_reason": "no_access"}) is True

    def test_plain_mapping_is_not_envelope(self):
        assert is_envelope({"rcd_present": True}) is False
        assert is_envelope({"status": "installed"}) is False

    def test_unwrap_nested_envelopes(self):
        node = {"value": {"value": {"value": "partial", "status": "answered"}}}
        assert unwrap_envelope(node) == "partial"

    def test_skipped_envelope_unwraps_to_none(self):
        assert unwrap_envelope(skipped("no_access")) is None

    def test_depth_bound_returns_node_reached(self):
        node = "deep"
        for _ in range(MAX_ENVELOPE_DEPTH + 2):
            node = {"value": node}
        result = unwrap_envelope(node)
        assert result == {"value": {"value": "deep"}}

    def test_primitive_passes_through(self):
        assert unwrap_envelope(42) == 42
        assert unwrap_envelope([1, 2]) == [1, 2]


# =============================================================================
# Path Resolution Tests
# =============================================================================

class TestResolveField:
    """Tests for resolve_field and helpers."""

    def test_plain_path(self):
        tree = {"switchboard": {"rcd_present": True}}
        assert resolve_field(tree, "switchboard.rcd_present") == (True, True)

    def test_envelope_at_every_level(self):
        tree = {"switchboard": answered({"rcd_coverage": answered("partial")})}
        assert resolve_field(tree, "switchboard.rcd_coverage") == ("partial", True)

    def test_false_is_found(self):
        tree = {"switchboard": {"rcd_present": answered(False)}}
        assert resolve_field(tree, "switchboard.rcd_present") == (False, True)

    def test_missing_key_not_found(self):
        assert resolve_field({"switchboard": {}}, "switchboard.rcd_present") == (None, False)

    def test_skipped_answer_not_found(self):
        tree = {"roof_space": {"accessible": skipped("no_access")}}
        assert resolve_field(tree, "roof_space.accessible") == (None, False)

    def test_null_value_not_found(self):
        assert resolve_field({"a": None}, "a") == (None, False)

    def test_list_index(self):
        tree = {"circuits": [{"rating": 16}, {"rating": answered(20)}]}
        assert resolve_field(tree, "circuits.1.rating") == (20, True)

    def test_list_index_out_of_range(self):
        assert resolve_field({"circuits": [1]}, "circuits.3") == (None, False)

    def test_descend_into_primitive_fails(self):
        assert resolve_field({"a": "text"}, "a.b") == (None, False)

    def test_empty_path(self):
        assert resolve_field({"a": 1}, "") == (None, False)

    def test_get_value_default(self):
        assert get_value({}, "missing", default="n/a") == "n/a"
        assert get_value({"a": 0}, "a", default="n/a") == 0

    def test_first_value_searches_in_order(self):
        raw = {"a": None}
        canonical = {"a": "from canonical"}
        assert first_value([raw, canonical], "a") == ("from canonical", True)
        assert first_value([], "a") == (None, False)


class TestIsPresent:
    """Tests for is_present."""

    @pytest.mark.parametrize("value", [None, "", "   ", [], {}, ()])
    def test_absent_values(self, value):
        assert is_present(value) is False

    @pytest.mark.parametrize("value", [0, False, "x", [0], {"a": 1}])
    def test_present_values(self, value):
        assert is_present(value) is True


# =============================================================================
# Limitations Tests
# =============================================================================

class TestCollectLimitations:
    """Tests for collect_limitations."""

    def test_collects_skipped_with_reason_and_note(self, raw_answers):
        assert collect_limitations(raw_answers) == [
            "roof_space.accessible: skipped (no_access) - Hatch sealed",
        ]

    def test_skip_without_reason_is_ignored(self):
        tree = {"a": {"status": "skipped"}}
        assert collect_limitations(tree) == []

    def test_answered_envelopes_are_not_descended(self):
        tree = {"a": {"status": "answered", "value": {"b": skipped("unsafe")}}}
        assert collect_limitations(tree) == []

    def test_nested_order_follows_keys(self):
        tree = {
            "switchboard": {"cover": skipped("locked")},
            "created_at": skipped("ignored"),
            "gpo_tests": {"kitchen": {"earth": skipped("furniture", "Fridge blocking")}},
        }
        assert collect_limitations(tree) == [
            "switchboard.cover: skipped (locked)",
            "gpo_tests.kitchen.earth: skipped (furniture) - Fridge blocking",
        ]

    def test_non_mapping_root(self):
        assert collect_limitations(["a"]) == []
        assert collect_limitations(None) == []
