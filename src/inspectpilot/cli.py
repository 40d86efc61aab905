"""
InspectPilot CLI

Command-line interface for running the engine against JSON/YAML files.

Usage:
    inspectpilot derive answers.json --existing EARTH_DEGRADED
    inspectpilot signals findings.json
    inspectpilot pages findings.json --raw answers.json --inspection-id INS-1
    inspectpilot report answers.json --inspection-id INS-1
    inspectpilot validate-packs --packs-dir packs

Every command prints JSON to stdout and returns 0 on success, 1 on a
validation failure and 2 on unreadable input.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import Settings
from .engine import (
    DimensionNormalizer,
    NarrativeAssembler,
    derive_and_merge,
    derive_finding_signals,
    derive_property_signals,
    overall_health_to_risk_label,
)
from .engine.pipeline import InspectionPipeline
from .exceptions import FindingPagesValidationError, InspectPilotError, RenderValidationError
from .models import Finding
from .packs import PackLoader, PackSnapshot
from .render import render_fields

logger = logging.getLogger("inspectpilot.cli")


# =============================================================================
# Helpers
# =============================================================================

def read_document(path: Path) -> Any:
    """Read a JSON or YAML document."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _findings_from(document: Any) -> list[Finding]:
    """Findings from ``[...]`` or ``{"findings": [...]}``."""
    items = document.get("findings", []) if isinstance(document, dict) else document
    return [Finding.from_dict(item) for item in items or []]


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.packs_dir is not None:
        settings = replace(settings, packs_dir=args.packs_dir)
    return settings


def _snapshot(settings: Settings, strict: bool = False) -> PackSnapshot:
    return PackLoader(strict=strict).load_snapshot(
        settings.packs_dir,
        rules_file=settings.rules_file,
        profiles_file=settings.profiles_file,
        responses_file=settings.responses_file,
    )


def _report_failure(error: InspectPilotError) -> int:
    _print_json(error.to_dict())
    print(str(error), file=sys.stderr)
    return 1


# =============================================================================
# Commands
# =============================================================================

def cmd_derive(args: argparse.Namespace) -> int:
    """Derive new findings from raw answers."""
    snapshot = _snapshot(_settings(args))
    raw = read_document(args.answers)
    derived = derive_and_merge(raw, snapshot.rules, args.existing or [])
    _print_json({"findings": [d.to_dict() for d in derived]})
    return 0


def cmd_signals(args: argparse.Namespace) -> int:
    """Compute finding and property signals."""
    snapshot = _snapshot(_settings(args))
    normalizer = DimensionNormalizer(snapshot.profiles)

    findings = []
    for finding in _findings_from(read_document(args.findings)):
        if finding.dimensions is None:
            finding = finding.with_updates(
                dimensions=normalizer.normalize(finding.id, finding.authoring),
            )
        findings.append(finding)

    signals = derive_property_signals(findings)
    _print_json({
        "finding_signals": {f.id: derive_finding_signals(f.dimensions).to_dict() for f in findings},
        "property_signals": signals.to_dict(),
        "risk_label": overall_health_to_risk_label(signals.overall_health),
    })
    return 0


def cmd_pages(args: argparse.Namespace) -> int:
    """Assemble and validate finding pages."""
    settings = _settings(args)
    snapshot = _snapshot(settings)
    raw = read_document(args.raw) if args.raw else None

    assembler = NarrativeAssembler(
        profiles=snapshot.profiles,
        responses=snapshot.responses,
        signer=settings.photo_signer(),
    )
    try:
        result = assembler.assemble(
            _findings_from(read_document(args.findings)),
            raw=raw,
            inspection_id=args.inspection_id,
        )
        output = render_fields(result.pages) if args.html else result.to_dict()
    except (FindingPagesValidationError, RenderValidationError) as e:
        return _report_failure(e)

    _print_json(output)
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Run the full pipeline on raw answers."""
    settings = _settings(args)
    pipeline = InspectionPipeline(_snapshot(settings), settings)
    existing = _findings_from(read_document(args.existing)) if args.existing else []
    try:
        report = pipeline.run(
            read_document(args.answers),
            existing=existing,
            inspection_id=args.inspection_id,
        )
    except (FindingPagesValidationError, RenderValidationError) as e:
        return _report_failure(e)

    _print_json(report.to_dict())
    return 0


def cmd_validate_packs(args: argparse.Namespace) -> int:
    """Strictly load every pack document and cross-check rule ids."""
    settings = _settings(args)
    print(f"Validating packs: {settings.packs_dir}", file=sys.stderr)
    try:
        snapshot = _snapshot(settings, strict=True)
    except InspectPilotError as e:
        print("  INVALID", file=sys.stderr)
        _print_json(e.to_dict())
        return 1

    errors = [
        f"Rule '{rule.id}' has no finding profile"
        for rule in snapshot.rules
        if rule.id not in snapshot.profiles
    ]
    errors.extend(
        f"Hard override '{finding_id}' has no finding profile"
        for finding_id in sorted(snapshot.rules.hard_overrides)
        if finding_id not in snapshot.profiles
    )

    summary = snapshot.summary()
    summary["errors"] = errors
    _print_json(summary)
    if errors:
        print(f"  INVALID ({len(errors)} error(s))", file=sys.stderr)
        return 1
    print("  VALID", file=sys.stderr)
    return 0


# =============================================================================
# Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="InspectPilot finding engine CLI",
        prog="inspectpilot",
    )
    parser.add_argument(
        "--packs-dir",
        type=Path,
        default=None,
        help="Pack directory (default: IP_PACKS_DIR or ./packs)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: IP_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Derive command
    derive_parser = subparsers.add_parser("derive", help="Derive findings from raw answers")
    derive_parser.add_argument("answers", type=Path, help="Raw answers (JSON or YAML)")
    derive_parser.add_argument(
        "--existing", nargs="*", default=[], help="Finding ids already present",
    )
    derive_parser.set_defaults(func=cmd_derive)

    # Signals command
    signals_parser = subparsers.add_parser("signals", help="Compute finding and property signals")
    signals_parser.add_argument("findings", type=Path, help="Findings (JSON or YAML)")
    signals_parser.set_defaults(func=cmd_signals)

    # Pages command
    pages_parser = subparsers.add_parser("pages", help="Assemble and validate finding pages")
    pages_parser.add_argument("findings", type=Path, help="Findings (JSON or YAML)")
    pages_parser.add_argument("--raw", type=Path, help="Raw answers, searched for photo ids")
    pages_parser.add_argument("--inspection-id", help="Inspection id for photo links")
    pages_parser.add_argument("--html", action="store_true", help="Print rendered HTML fields")
    pages_parser.set_defaults(func=cmd_pages)

    # Report command
    report_parser = subparsers.add_parser("report", help="Run the full inspection pipeline")
    report_parser.add_argument("answers", type=Path, help="Raw answers (JSON or YAML)")
    report_parser.add_argument("--existing", type=Path, help="Existing findings (JSON or YAML)")
    report_parser.add_argument("--inspection-id", help="Inspection id for photo links")
    report_parser.set_defaults(func=cmd_report)

    # Validate packs command
    validate_parser = subparsers.add_parser("validate-packs", help="Strictly validate pack documents")
    validate_parser.set_defaults(func=cmd_validate_packs)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    level = (args.log_level or Settings.from_env().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        print(f"Cannot read input: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
