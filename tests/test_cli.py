"""
Tests for the InspectPilot CLI

Each command is run through ``main`` against temporary input files and
the shipped packs.
"""
import json

import pytest
import yaml

from inspectpilot.cli import build_parser, main

from tests.conftest import PACKS_DIR


def run_cli(capsys, *argv):
    code = main(["--packs-dir", str(PACKS_DIR), "--log-level", "WARNING", *argv])
    captured = capsys.readouterr()
    return code, captured.out, captured.err


@pytest.fixture
def answers_file(tmp_path, raw_answers):
    path = tmp_path / "answers.json"
    path.write_text(json.dumps(raw_answers), encoding="utf-8")
    return path


@pytest.fixture
def findings_file(tmp_path):
    path = tmp_path / "findings.yaml"
    path.write_text(yaml.safe_dump({"findings": [
        {"id": "PARTIAL_RCD_COVERAGE", "priority": "RECOMMENDED", "photo_ids": ["P01"]},
        {"id": "MEN_NOT_VERIFIED"},
    ]}), encoding="utf-8")
    return path


class TestDerive:
    """Tests for the derive command."""

    def test_derive(self, capsys, answers_file):
        code, out, _ = run_cli(capsys, "derive", str(answers_file))
        assert code == 0
        assert json.loads(out) == {"findings": [
            {"id": "LEGACY_SUPPLY_FUSE", "priority": "RECOMMENDED_0_3_MONTHS", "title": "Legacy ceramic supply fuse"},
            {"id": "PARTIAL_RCD_COVERAGE", "priority": "RECOMMENDED_0_3_MONTHS", "title": "Partial RCD coverage"},
        ]}

    def test_existing_ids_skipped(self, capsys, answers_file):
        code, out, _ = run_cli(capsys, "derive", str(answers_file), "--existing", "LEGACY_SUPPLY_FUSE")
        assert code == 0
        assert [f["id"] for f in json.loads(out)["findings"]] == ["PARTIAL_RCD_COVERAGE"]

    def test_missing_file(self, capsys, tmp_path):
        code, _, err = run_cli(capsys, "derive", str(tmp_path / "missing.json"))
        assert code == 2
        assert "Cannot read input" in err

    def test_malformed_json(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        code, _, _ = run_cli(capsys, "derive", str(path))
        assert code == 2


class TestSignals:
    """Tests for the signals command."""

    def test_signals(self, capsys, findings_file):
        code, out, _ = run_cli(capsys, "signals", str(findings_file))
        data = json.loads(out)
        assert code == 0
        assert set(data["finding_signals"]) == {"PARTIAL_RCD_COVERAGE", "MEN_NOT_VERIFIED"}
        assert data["property_signals"]["counts"]["findings_total"] == 2
        assert data["risk_label"] in {"Low", "Moderate", "Elevated"}

    def test_partial_dimensions(self, capsys, tmp_path):
        path = tmp_path / "findings.yaml"
        path.write_text(yaml.safe_dump([
            {"id": "X", "dimensions": {"safety_impact": "high", "urgency": "now"}, "photo_ids": "P01"},
        ]), encoding="utf-8")
        code, out, _ = run_cli(capsys, "signals", str(path))
        data = json.loads(out)
        assert code == 0
        assert data["finding_signals"]["X"]["has_immediate_safety_risk"] is True

    def test_invalid_dimension_value(self, capsys, tmp_path):
        path = tmp_path / "findings.json"
        path.write_text(json.dumps([{"id": "X", "dimensions": {"urgency": "yesterday"}}]), encoding="utf-8")
        code, _, err = run_cli(capsys, "signals", str(path))
        assert code == 2
        assert "Invalid input" in err


class TestPages:
    """Tests for the pages command."""

    def test_pages(self, capsys, findings_file):
        code, out, _ = run_cli(capsys, "pages", str(findings_file))
        pages = json.loads(out)["pages"]
        assert code == 0
        assert [p["finding_id"] for p in pages] == ["PARTIAL_RCD_COVERAGE", "MEN_NOT_VERIFIED"]
        assert pages[0]["evidence"]["text"] == "Photo evidence provided: P01."
        assert pages[1]["priority"] == "IMMEDIATE"

    def test_pages_html(self, capsys, findings_file):
        code, out, _ = run_cli(capsys, "pages", str(findings_file), "--html")
        fields = json.loads(out)
        assert code == 0
        assert fields["FINDING_COUNT"] == "2"
        assert "SENTINEL_FINDINGS_V1" in fields["FINDING_PAGES_HTML"]

    def test_unknown_finding_fails(self, capsys, tmp_path):
        path = tmp_path / "findings.json"
        path.write_text(json.dumps([{"id": "NOT_PROFILED"}]), encoding="utf-8")
        code, out, err = run_cli(capsys, "pages", str(path))
        assert code == 1
        assert json.loads(out)["finding_ids"] == ["NOT_PROFILED"]
        assert "IP_FINDING_PAGES_INVALID" in err


class TestReport:
    """Tests for the report command."""

    def test_report(self, capsys, answers_file):
        code, out, _ = run_cli(capsys, "report", str(answers_file), "--inspection-id", "INS-1")
        data = json.loads(out)
        assert code == 0
        assert data["inspection_id"] == "INS-1"
        assert data["fields"]["FINDING_COUNT"] == "2"
        assert data["limitations"] == ["roof_space.accessible: skipped (no_access) - Hatch sealed"]


class TestValidatePacks:
    """Tests for the validate-packs command."""

    def test_shipped_packs_valid(self, capsys):
        code, out, err = run_cli(capsys, "validate-packs")
        assert code == 0
        assert json.loads(out)["errors"] == []
        assert "VALID" in err

    def test_rule_without_profile(self, capsys, tmp_path):
        rules = tmp_path / "rules" / "finding_rules.yaml"
        rules.parent.mkdir()
        rules.write_text(
            "finding_rules:\n  - id: ORPHAN\n    conditions:\n"
            "      - {field: a, operator: exists, value: true}\n",
            encoding="utf-8",
        )
        code = main(["--packs-dir", str(tmp_path), "validate-packs"])
        out = capsys.readouterr().out
        assert code == 1
        assert json.loads(out)["errors"] == ["Rule 'ORPHAN' has no finding profile"]

    def test_invalid_document(self, capsys, tmp_path):
        code = main(["--packs-dir", str(tmp_path), "validate-packs"])
        out = capsys.readouterr().out
        assert code == 1
        assert json.loads(out)["code"] == "IP_PACK_LOAD_ERROR"


class TestParser:
    """Tests for argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: inspectpilot" in capsys.readouterr().out

    def test_existing_ids_default(self):
        args = build_parser().parse_args(["derive", "answers.json"])
        assert args.existing == []
        assert args.packs_dir is None
