"""
InspectPilot Inspection Pipeline

Runs one inspection end to end:

    raw answers
      -> derive findings from rules, merged with existing findings
      -> resolve priorities (calculated, overrides, hard overrides)
      -> normalize D1-D9 dimensions
      -> finding and property signals
      -> finding pages (validated per batch)
      -> limitations and classification
      -> rendered output fields

Everything the pipeline reads comes from an injected PackSnapshot; no
state is shared between runs.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from ..config import Settings
from ..models import (
    DerivedFinding,
    Finding,
    FindingClassification,
    FindingPage,
    FindingSignals,
    PriorityTier,
    PropertySignals,
)
from ..packs import PackSnapshot
from ..render import render_fields
from .classification import classify_finding
from .dimension_normalizer import DimensionNormalizer
from .evidence import PhotoMetadataStore
from .field_resolver import collect_limitations
from .narrative_assembler import NarrativeAssembler, sort_by_tier
from .photo_signing import PhotoUrlSigner
from .priority import calculate_priority, resolve_priority_final
from .rule_matcher import derive_and_merge
from .signal_aggregator import (
    derive_finding_signals,
    derive_property_signals,
    overall_health_to_risk_label,
)

logger = logging.getLogger(__name__)

ExistingFinding = Union[str, Finding, DerivedFinding, Mapping[str, Any]]


# =============================================================================
# Report
# =============================================================================

@dataclass
class InspectionReport:
    """
    Output of one pipeline run.

    Attributes:
        inspection_id: Inspection the report belongs to, if known
        findings: Findings in tier order with resolved priority and dimensions
        derived_ids: Ids added by the rule engine in this run
        finding_signals: Finding id -> per-finding signals
        property_signals: Property-level verdict
        risk_label: Low / Moderate / Elevated header label
        pages: Validated finding pages, in tier order
        limitations: Skipped-answer lines
        classifications: Finding id -> system/space grouping and tags
        fields: Rendered output fields
    """
    inspection_id: Optional[str]
    findings: list[Finding]
    derived_ids: list[str]
    finding_signals: dict[str, FindingSignals]
    property_signals: PropertySignals
    risk_label: str
    pages: list[FindingPage] = field(default_factory=list)
    limitations: list[str] = field(default_factory=list)
    classifications: dict[str, FindingClassification] = field(default_factory=dict)
    fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inspection_id": self.inspection_id,
            "findings": [f.to_dict() for f in self.findings],
            "derived_ids": list(self.derived_ids),
            "finding_signals": {k: v.to_dict() for k, v in self.finding_signals.items()},
            "property_signals": self.property_signals.to_dict(),
            "risk_label": self.risk_label,
            "pages": [p.to_dict() for p in self.pages],
            "limitations": list(self.limitations),
            "classifications": {k: v.to_dict() for k, v in self.classifications.items()},
            "fields": dict(self.fields),
        }


# =============================================================================
# Pipeline
# =============================================================================

def _as_finding(item: ExistingFinding) -> Finding:
    if isinstance(item, Finding):
        return item
    if isinstance(item, DerivedFinding):
        return Finding.from_derived(item)
    if isinstance(item, Mapping):
        return Finding.from_dict(item)
    return Finding(id=str(item))


class InspectionPipeline:
    """
    End-to-end pipeline bound to a pack snapshot.

    Usage:
        pipeline = InspectionPipeline(snapshot, Settings.from_env())
        report = pipeline.run(raw_answers, inspection_id="INS-1")
    """

    def __init__(self, snapshot: PackSnapshot, settings: Optional[Settings] = None):
        self.snapshot = snapshot
        self.settings = settings or Settings()
        self.normalizer = DimensionNormalizer(snapshot.profiles)

    def signer(self) -> PhotoUrlSigner:
        return self.settings.photo_signer()

    def assembler(self, photo_store: Optional[PhotoMetadataStore] = None) -> NarrativeAssembler:
        return NarrativeAssembler(
            profiles=self.snapshot.profiles,
            responses=self.snapshot.responses,
            signer=self.signer(),
            photo_store=photo_store,
        )

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def collect_findings(
        self,
        raw: Mapping[str, Any],
        existing: Iterable[ExistingFinding] = (),
    ) -> tuple[list[Finding], list[str]]:
        """Existing findings plus those newly derived from the rules."""
        current = [_as_finding(item) for item in existing]
        derived = derive_and_merge(raw, self.snapshot.rules, current)
        current.extend(Finding.from_derived(d) for d in derived)
        return current, [d.id for d in derived]

    def resolve_priority(self, finding: Finding) -> Finding:
        """Attach calculated and final tiers; the final tier becomes the priority."""
        calculated = finding.priority_calculated
        overrides = self.snapshot.rules.hard_overrides
        if finding.authoring is not None and finding.authoring.has_ratings:
            calculated = calculate_priority(finding.id, finding.authoring, overrides)
        elif finding.id in overrides:
            calculated = PriorityTier.IMMEDIATE

        resolved = finding.with_updates(priority_calculated=calculated)
        final = resolve_priority_final(resolved)
        return resolved.with_updates(priority=final, priority_final=final)

    def normalize(self, finding: Finding) -> Finding:
        """Attach D1-D9 dimensions unless the finding already carries them."""
        if finding.dimensions is not None:
            return finding
        return finding.with_updates(
            dimensions=self.normalizer.normalize(finding.id, finding.authoring),
        )

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    async def run_async(
        self,
        raw: Mapping[str, Any],
        existing: Iterable[ExistingFinding] = (),
        inspection_id: Optional[str] = None,
        photo_store: Optional[PhotoMetadataStore] = None,
        canonical: Optional[Mapping[str, Any]] = None,
    ) -> InspectionReport:
        """
        Run the pipeline.

        Raises:
            FindingPagesValidationError: If any finding page fails validation
        """
        findings, derived_ids = self.collect_findings(raw, existing)
        findings = [self.normalize(self.resolve_priority(f)) for f in findings]
        findings = sort_by_tier(findings)

        finding_signals = {f.id: derive_finding_signals(f.dimensions) for f in findings}
        property_signals = derive_property_signals(findings)

        result = await self.assembler(photo_store).assemble_async(
            findings, raw=raw, canonical=canonical, inspection_id=inspection_id,
        )
        limitations = collect_limitations(raw)

        logger.info(
            "Inspection %s: %d finding(s), %d derived, health %s",
            inspection_id or "-", len(findings), len(derived_ids),
            property_signals.overall_health.value,
        )
        return InspectionReport(
            inspection_id=inspection_id,
            findings=findings,
            derived_ids=derived_ids,
            finding_signals=finding_signals,
            property_signals=property_signals,
            risk_label=overall_health_to_risk_label(property_signals.overall_health),
            pages=result.pages,
            limitations=limitations,
            classifications={f.id: classify_finding(f.id) for f in findings},
            fields=render_fields(result.pages, limitations),
        )

    def run(
        self,
        raw: Mapping[str, Any],
        existing: Iterable[ExistingFinding] = (),
        inspection_id: Optional[str] = None,
        photo_store: Optional[PhotoMetadataStore] = None,
        canonical: Optional[Mapping[str, Any]] = None,
    ) -> InspectionReport:
        """Synchronous wrapper around ``run_async``."""
        return asyncio.run(
            self.run_async(raw, existing, inspection_id, photo_store, canonical)
        )
