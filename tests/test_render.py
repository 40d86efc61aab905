"""
Tests for InspectPilot rendering

Tests cover:
- Finding page fragment structure and escaping
- Output field map
- Structural checks on rendered HTML
"""
import pytest

from inspectpilot.exceptions import RenderValidationError
from inspectpilot.engine.narrative_assembler import priority_label
from inspectpilot.models import EvidenceBlock, EvidenceItem, FindingPage, PriorityTier
from inspectpilot.render import (
    FIELD_FINDING_COUNT,
    FIELD_FINDING_PAGES,
    FIELD_LIMITATIONS,
    NO_FINDINGS_TEXT,
    NO_LIMITATIONS_TEXT,
    SECTION_HEADINGS,
    SENTINEL,
    render_fields,
    render_finding_pages,
    render_limitations,
    validate_rendered_html,
)


def make_page(finding_id="PARTIAL_RCD_COVERAGE", **overrides) -> FindingPage:
    tier = overrides.pop("priority", PriorityTier.RECOMMENDED_0_3_MONTHS)
    values = {
        "finding_id": finding_id,
        "priority": tier,
        "asset_component": "Switchboard residual current protection",
        "observed_condition": "RCD protection is installed on power circuits only.",
        "evidence": EvidenceBlock(text="Photo evidence provided: P01."),
        "risk_interpretation": "Line one.\nLine two.",
        "priority_classification": priority_label(tier),
        "budgetary_planning_range": "AUD $350–$450",
    }
    values.update(overrides)
    return FindingPage(**values)


class TestRenderFindingPages:
    """Tests for render_finding_pages."""

    def test_sentinel_and_headings(self):
        html = render_finding_pages([make_page(), make_page("LEGACY_SUPPLY_FUSE")])
        assert html.startswith(f"<!-- {SENTINEL} -->")
        for heading in SECTION_HEADINGS:
            assert html.count(heading) == 2
        assert 'data-finding-index="1" data-finding-id="LEGACY_SUPPLY_FUSE"' in html

    def test_page_order_preserved(self):
        html = render_finding_pages([make_page("B"), make_page("A")])
        assert html.index('data-finding-id="B"') < html.index('data-finding-id="A"')

    def test_newlines_become_breaks(self):
        html = render_finding_pages([make_page()])
        assert "<p>Line one.<br/>Line two.</p>" in html

    def test_text_is_escaped(self):
        html = render_finding_pages([make_page(observed_condition="<script>x</script> & more")])
        assert "<script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt; &amp; more" in html

    def test_priority_label(self):
        html = render_finding_pages([make_page(priority=PriorityTier.IMMEDIATE)])
        assert "<p>🔴 Urgent Liability Risk</p>" in html

    def test_evidence_items(self):
        items = (
            EvidenceItem(photo_id="P01", caption="Board interior", url="https://r.example.com/p?a=1&b=2"),
            EvidenceItem(photo_id="P02", caption="Meter panel"),
        )
        html = render_finding_pages([make_page(evidence=EvidenceBlock(items=items))])
        assert '<a href="https://r.example.com/p?a=1&amp;b=2">View photo</a>' in html
        assert "Photo P02 — Meter panel</li>" in html

    def test_no_findings(self):
        html = render_finding_pages([])
        assert SENTINEL in html
        assert f"<p>{NO_FINDINGS_TEXT}</p>" in html


class TestRenderFields:
    """Tests for render_fields and render_limitations."""

    def test_field_map(self):
        fields = render_fields([make_page()])
        assert set(fields) == {FIELD_FINDING_PAGES, FIELD_FINDING_COUNT}
        assert fields[FIELD_FINDING_COUNT] == "1"

    def test_limitations_included_when_given(self):
        fields = render_fields([], limitations=["roof_space.accessible: no_access"])
        assert fields[FIELD_FINDING_COUNT] == "0"
        assert "<li>roof_space.accessible: no_access</li>" in fields[FIELD_LIMITATIONS]

    def test_empty_limitations(self):
        assert render_limitations([]) == f"<p>{NO_LIMITATIONS_TEXT}</p>"

    def test_failed_checks_raise(self):
        with pytest.raises(RenderValidationError) as exc_info:
            render_fields([make_page(observed_condition="### Observed\nundefined")])
        errors = exc_info.value.details["errors"]
        assert "contains markdown heading leakage" in errors
        assert "contains forbidden token: undefined/None" in errors
        assert exc_info.value.code == "IP_RENDER_INVALID"


class TestValidateRenderedHtml:
    """Tests for validate_rendered_html."""

    def test_rendered_pages_pass(self):
        html = render_finding_pages([make_page(), make_page("B")])
        assert validate_rendered_html(html, 2) == []

    def test_missing_sentinel_and_headings(self):
        errors = validate_rendered_html("<p>nothing</p>", 1)
        assert errors[0] == f"missing {SENTINEL}"
        assert len(errors) == 1 + len(SECTION_HEADINGS)

    @pytest.mark.parametrize("fragment,error", [
        ("<p>None</p>", "contains forbidden token: undefined/None"),
        ("<p>undefined</p>", "contains forbidden token: undefined/None"),
        ("|---|---|", "contains markdown table separator leakage"),
        ("### Heading", "contains markdown heading leakage"),
        ("<H2>Title</H2>", "contains forbidden <h2> in finding block html"),
    ])
    def test_leakage(self, fragment, error):
        html = render_finding_pages([]) + fragment
        assert validate_rendered_html(html, 0) == [error]
