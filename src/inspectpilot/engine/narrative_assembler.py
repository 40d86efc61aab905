"""
InspectPilot Narrative Assembler

Builds the six content blocks of every finding page in a batch:

    collect -> resolve each finding independently -> validate batch
            -> return every page, or raise one aggregate error

Each block is resolved through a waterfall of sources; the first
non-empty source wins and the last rung is always a non-empty default.
A finding without a profile is a hard error. Errors are collected for the
whole batch and raised once, after every finding has been resolved.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..exceptions import FindingPagesValidationError
from ..models import (
    DEFAULT_WHY_IT_MATTERS,
    BudgetBand,
    CategoryDefaults,
    Finding,
    FindingPage,
    FindingPagesResult,
    FindingProfile,
    FindingResponse,
    PriorityLabel,
    PriorityTier,
    ProfileCatalog,
    ResponseCatalog,
    Violation,
)
from .evidence import PhotoMetadataStore, resolve_evidence
from .narrative_validator import RequiredClauses, attempt_repair, validate_page
from .photo_signing import PhotoUrlSigner
from .priority import normalize_priority

logger = logging.getLogger(__name__)


# =============================================================================
# Fixed Tables
# =============================================================================

PRIORITY_LABELS = {
    PriorityTier.IMMEDIATE: PriorityLabel(PriorityTier.IMMEDIATE, "🔴", "Urgent Liability Risk"),
    PriorityTier.RECOMMENDED_0_3_MONTHS: PriorityLabel(
        PriorityTier.RECOMMENDED_0_3_MONTHS, "🟡", "Budgetary Provision Recommended",
    ),
    PriorityTier.PLAN_MONITOR: PriorityLabel(PriorityTier.PLAN_MONITOR, "🟢", "Acceptable"),
}

BUDGET_BAND_RANGES = {
    BudgetBand.LOW: "AUD $100–$500",
    BudgetBand.MED: "AUD $500–$2,000",
    BudgetBand.HIGH: "AUD $2,000–$10,000",
}
UNKNOWN_BAND_RANGE = "AUD $100–$1,000"
BUDGET_TO_BE_CONFIRMED = "To be confirmed (indicative benchmark only)"

DEFAULT_CURRENCY = "AUD"

IMMEDIATE_CONSEQUENCE = (
    "If this condition is not addressed, it may lead to immediate safety hazards, "
    "compliance violations, or liability escalation."
)
PLANNED_CONSEQUENCE = (
    "If this condition is not addressed, it may impact long-term reliability, "
    "compliance confidence, or operational efficiency over time."
)
PLANNED_JUSTIFICATION = (
    "This risk does not present an immediate hazard and can be managed within normal "
    "asset planning cycles, allowing for proper budgeting and contractor engagement "
    "without immediate urgency."
)
IMMEDIATE_JUSTIFICATION = (
    "This condition presents an immediate safety or compliance risk that requires "
    "urgent attention to prevent potential harm or liability escalation."
)

_IF_NOT_ADDRESSED = re.compile(r"if.*not.*addressed", re.IGNORECASE)
_NOT_IMMEDIATE_SHORT = re.compile(
    r"not immediate|no immediate|not urgent|manageable|can be planned|allows for planning",
    re.IGNORECASE,
)


def _text(value: Any) -> Optional[str]:
    """Stripped string, or None when blank or not a string."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _terminated(sentence: str) -> str:
    sentence = sentence.strip()
    return sentence if sentence[-1:] in (".", "!", "?") else sentence + "."


def humanize_id(finding_id: str) -> str:
    """FINDING_ID -> "FINDING ID"."""
    return finding_id.replace("_", " ")


# =============================================================================
# Block Waterfalls
# =============================================================================

def effective_priority(finding: Finding, profile: Optional[FindingProfile]) -> PriorityTier:
    """Profile priority override first, then the finding's own tier."""
    if profile is not None and profile.priority is not None:
        return profile.priority
    return normalize_priority(finding.priority)


def resolve_asset_component(
    finding: Finding,
    profile: FindingProfile,
    response: FindingResponse,
) -> str:
    """Profile component -> profile title -> authored title -> finding title -> id."""
    return (
        _text(profile.asset_component)
        or _text(profile.messaging.title)
        or _text(response.title)
        or _text(finding.title)
        or humanize_id(finding.id)
    )


def resolve_observed_condition(
    finding: Finding,
    response: FindingResponse,
    asset_component: str,
) -> str:
    """Authored list -> authored string -> raw observed/facts -> synthesized sentence."""
    observed = response.observed_condition
    if isinstance(observed, (list, tuple)):
        lines = [line.strip() for line in observed if _text(line)]
        if lines:
            return _terminated(". ".join(lines))
    elif _text(observed):
        return observed.strip()

    return (
        _text(finding.observed)
        or _text(finding.facts)
        or f"{asset_component} was observed during the visual inspection."
    )


def synthesize_risk_interpretation(
    profile: FindingProfile,
    response: FindingResponse,
    tier: PriorityTier,
) -> str:
    """
    Build a risk interpretation from its three parts.

    1. Current state (why it matters)
    2. Consequence if not addressed
    3. Why this tier: why not immediate, or why immediate for the top tier
    """
    current = (
        _text(profile.messaging.why_it_matters)
        or _text(response.why_it_matters)
        or DEFAULT_WHY_IT_MATTERS
    )

    consequence = _text(profile.messaging.if_not_addressed)
    if consequence is None:
        consequence = IMMEDIATE_CONSEQUENCE if tier.is_top_tier else PLANNED_CONSEQUENCE
    if not _IF_NOT_ADDRESSED.search(consequence):
        remainder = re.sub(r"^if\s+", "", consequence.lower(), flags=re.IGNORECASE)
        consequence = "If this condition is not addressed, " + remainder

    if tier.is_top_tier:
        justification = IMMEDIATE_JUSTIFICATION
    else:
        justification = _text(profile.messaging.planning_guidance) or PLANNED_JUSTIFICATION
        if not _NOT_IMMEDIATE_SHORT.search(justification):
            justification = "This condition does not present an immediate hazard. " + justification

    return " ".join(_terminated(part) for part in (current, consequence, justification))


def resolve_risk_interpretation(
    profile: FindingProfile,
    response: FindingResponse,
    tier: PriorityTier,
) -> str:
    """Authored text, else synthesized; then repaired against the tier's required clauses."""
    text = _text(response.risk_interpretation)
    if text is None:
        text = synthesize_risk_interpretation(profile, response, tier)
    return attempt_repair(text, RequiredClauses.for_tier(tier))


def priority_label(tier: PriorityTier) -> PriorityLabel:
    """Fixed icon and label for a tier."""
    return PRIORITY_LABELS[tier]


def budget_range_from_band(band: Optional[BudgetBand]) -> str:
    """Fixed numeric bracket for a qualitative band."""
    if band is None:
        return UNKNOWN_BAND_RANGE
    return BUDGET_BAND_RANGES.get(band, UNKNOWN_BAND_RANGE)


def _amount(value: float) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else f"{number:g}"


def _format_range(low: float, high: float, currency: Optional[str], note: Optional[str]) -> str:
    text = f"{_text(currency) or DEFAULT_CURRENCY} ${_amount(low)} – ${_amount(high)}"
    if _text(note):
        text += f". {note.strip()}"
    return text


def resolve_budget_range(
    profile: FindingProfile,
    response: FindingResponse,
    category_defaults: CategoryDefaults,
) -> str:
    """
    Profile range text -> authored range text -> authored low/high ->
    legacy authored range object -> profile band -> category band ->
    "to be confirmed".
    """
    explicit = _text(profile.budget_range) or _text(response.budget_range_text)
    if explicit:
        return explicit

    if response.budget_range_low is not None and response.budget_range_high is not None:
        return _format_range(
            response.budget_range_low,
            response.budget_range_high,
            response.budget_range_currency,
            response.budget_range_note,
        )

    legacy = response.budgetary_range
    if legacy is not None and legacy.low is not None and legacy.high is not None:
        return _format_range(legacy.low, legacy.high, legacy.currency, legacy.note)

    if profile.budget_band is not None:
        return budget_range_from_band(profile.budget_band)

    if category_defaults.budget_band is not None:
        return budget_range_from_band(category_defaults.budget_band)

    return BUDGET_TO_BE_CONFIRMED


# =============================================================================
# Assembler
# =============================================================================

def sort_by_tier(findings: Iterable[Finding]) -> list[Finding]:
    """Stable sort: IMMEDIATE, then RECOMMENDED, then PLAN."""
    return sorted(findings, key=lambda f: normalize_priority(f.priority).rank)


def format_failure_message(violations: Sequence[Violation]) -> str:
    """One-line summary naming every affected finding and the first violation."""
    finding_ids: list[str] = []
    for violation in violations:
        if violation.finding_id not in finding_ids:
            finding_ids.append(violation.finding_id)
    return (
        "Finding pages validation failed. "
        f"Finding ID(s): {', '.join(finding_ids)}. "
        f"First error: {violations[0]}"
    )


@dataclass
class NarrativeAssembler:
    """
    Resolves and validates finding pages for a batch.

    Profiles and responses are immutable snapshots injected at
    construction. Findings are resolved concurrently, one task each;
    validation runs once all of them have finished.

    Usage:
        assembler = NarrativeAssembler(snapshot.profiles, snapshot.responses)
        result = assembler.assemble(findings, raw=raw_answers)
    """
    profiles: ProfileCatalog
    responses: ResponseCatalog
    signer: Optional[PhotoUrlSigner] = None
    photo_store: Optional[PhotoMetadataStore] = None

    async def resolve_page(
        self,
        finding: Finding,
        sources: Sequence[Mapping[str, Any]] = (),
        inspection_id: Optional[str] = None,
    ) -> tuple[Optional[FindingPage], list[Violation]]:
        """Resolve one finding's blocks. Returns the page and any violations."""
        profile = self.profiles.get(finding.id)
        if profile is None:
            message = f"Finding profile not found for {finding.id}"
            logger.error(message)
            return (None, [Violation(finding.id, "profile", message)])

        response = self.responses.get(finding.id)
        tier = effective_priority(finding, profile)
        asset = resolve_asset_component(finding, profile, response)
        evidence = await resolve_evidence(
            finding,
            sources,
            inspection_id=inspection_id,
            store=self.photo_store,
            signer=self.signer,
        )
        page = FindingPage(
            finding_id=finding.id,
            priority=tier,
            asset_component=asset,
            observed_condition=resolve_observed_condition(finding, response, asset),
            evidence=evidence,
            risk_interpretation=resolve_risk_interpretation(profile, response, tier),
            priority_classification=priority_label(tier),
            budgetary_planning_range=resolve_budget_range(
                profile, response, self.profiles.defaults_for(profile.category),
            ),
        )
        return (page, validate_page(page))

    async def assemble_async(
        self,
        findings: Iterable[Finding],
        raw: Optional[Mapping[str, Any]] = None,
        canonical: Optional[Mapping[str, Any]] = None,
        inspection_id: Optional[str] = None,
    ) -> FindingPagesResult:
        """
        Resolve and validate every finding page.

        Raises:
            FindingPagesValidationError: Once, after the whole batch is
                processed, when any finding has violations
        """
        ordered = sort_by_tier(findings)
        sources = [tree for tree in (raw, canonical) if tree]

        resolved = await asyncio.gather(
            *(self.resolve_page(f, sources, inspection_id) for f in ordered)
        )

        pages: list[FindingPage] = []
        violations: list[Violation] = []
        for page, problems in resolved:
            violations.extend(problems)
            if page is not None:
                pages.append(page)

        if violations:
            message = format_failure_message(violations)
            logger.error(message)
            raise FindingPagesValidationError(
                message=message,
                details={"error_count": len(violations)},
                violations=violations,
            )

        logger.info("Assembled %d finding page(s)", len(pages))
        return FindingPagesResult(pages=pages)

    def assemble(
        self,
        findings: Iterable[Finding],
        raw: Optional[Mapping[str, Any]] = None,
        canonical: Optional[Mapping[str, Any]] = None,
        inspection_id: Optional[str] = None,
    ) -> FindingPagesResult:
        """Synchronous wrapper around ``assemble_async``."""
        return asyncio.run(self.assemble_async(findings, raw, canonical, inspection_id))
