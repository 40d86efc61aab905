"""
InspectPilot - Electrical Inspection Finding Engine

InspectPilot turns inspection answers into a defensible, decision-ready
finding set. It produces a prioritized list of findings with nine-axis
risk dimensions, a property-level risk verdict, and six validated
narrative blocks per finding.

Core Principle: "Every finding page is complete, or the batch says exactly why not."

Key Features:
- Condition-matching rules over envelope-wrapped raw answers
- Fixed nine-axis (D1-D9) risk model with total normalization
- Deterministic finding and property signals
- Narrative waterfalls with self-repair and batch-wide error aggregation
- Signed, time-limited photo evidence links

Quick Start:
    from inspectpilot.packs import load_snapshot
    from inspectpilot.engine.pipeline import InspectionPipeline
    from inspectpilot.config import Settings

    snapshot = load_snapshot("packs")
    pipeline = InspectionPipeline(snapshot, Settings.from_env())
    report = pipeline.run(raw_answers, inspection_id="INS-1")

    report.property_signals.overall_health
    report.fields["FINDING_PAGES_HTML"]

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "InspectPilot Team"

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    FindingPagesValidationError,
    InspectPilotError,
    PackLoadError,
    PackValidationError,
    PhotoTokenError,
    ProfileNotFoundError,
)

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    AuthoringRecord,
    DerivedFinding,
    Finding,
    FindingPage,
    FindingPagesResult,
    NineAxisDimensions,
    PriorityTier,
    PropertySignals,
    RuleSet,
    Violation,
)

__all__ = [
    "__version__",
    # Exceptions
    "FindingPagesValidationError",
    "InspectPilotError",
    "PackLoadError",
    "PackValidationError",
    "PhotoTokenError",
    "ProfileNotFoundError",
    # Models
    "AuthoringRecord",
    "DerivedFinding",
    "Finding",
    "FindingPage",
    "FindingPagesResult",
    "NineAxisDimensions",
    "PriorityTier",
    "PropertySignals",
    "RuleSet",
    "Violation",
]
