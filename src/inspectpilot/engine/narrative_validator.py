"""
InspectPilot Narrative Validator

Two-stage contract for finding narratives:

1. ``attempt_repair(text, required)`` appends deterministic default
   clauses to a risk interpretation that misses a required part.
2. ``validate_risk_interpretation(text, required)`` and
   ``validate_page(page)`` report what is still wrong.

Repair is self-healing and never raises. Validation returns lists of
problems; the assembler aggregates them per batch.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from ..models import PAGE_FIELDS, FindingPage, PriorityTier, Violation


# Maximum photos referenced by an Evidence block.
MAX_EVIDENCE_PHOTOS = 2

MIN_SENTENCES = 2

CONSEQUENCE_PATTERN = re.compile(
    r"if.*not.*addressed|if.*left.*unresolved|if.*deferred|"
    r"if.*not.*remedied|if.*not.*fixed|if.*not.*corrected",
    re.IGNORECASE | re.DOTALL,
)

WHY_NOT_IMMEDIATE_PATTERN = re.compile(
    r"not immediate|no immediate|not urgent|not critical|manageable|can be planned|"
    r"allows for planning|within normal|strategic planning|does not present.*immediate|"
    r"does not require.*immediate|can be.*monitored|allows.*planning|"
    r"does not pose.*immediate|not.*immediate.*hazard|not.*immediate.*risk",
    re.IGNORECASE | re.DOTALL,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

DEFAULT_CONSEQUENCE = (
    "If this condition is not addressed, it may impact safety, compliance, "
    "or reliability over time."
)
DEFAULT_NOT_IMMEDIATE = (
    "This risk does not present an immediate hazard and can be managed "
    "within normal planning cycles."
)
DEFAULT_IMMEDIATE = "This condition requires urgent attention to reduce immediate risk."


# =============================================================================
# Required Clauses
# =============================================================================

@dataclass(frozen=True)
class RequiredClauses:
    """
    What a risk interpretation must contain.

    Attributes:
        min_sentences: Minimum sentence count
        consequence: Must state what happens if not addressed
        why_not_immediate: Must explain why the finding is not top tier
        tier: Tier the text is written for (selects the context clause)
    """
    min_sentences: int = MIN_SENTENCES
    consequence: bool = True
    why_not_immediate: bool = True
    tier: PriorityTier = PriorityTier.PLAN_MONITOR

    @classmethod
    def for_tier(cls, tier: PriorityTier) -> RequiredClauses:
        return cls(why_not_immediate=not tier.is_top_tier, tier=tier)


def _required(value: Union[RequiredClauses, PriorityTier]) -> RequiredClauses:
    if isinstance(value, RequiredClauses):
        return value
    return RequiredClauses.for_tier(value)


# =============================================================================
# Checks
# =============================================================================

def count_sentences(text: str) -> int:
    """Count non-empty fragments between sentence terminators."""
    return sum(1 for part in _SENTENCE_SPLIT.split(text or "") if part.strip())


def has_consequence_clause(text: str) -> bool:
    return bool(CONSEQUENCE_PATTERN.search(text or ""))


def has_why_not_immediate_clause(text: str) -> bool:
    return bool(WHY_NOT_IMMEDIATE_PATTERN.search(text or ""))


def validate_risk_interpretation(
    text: str,
    required: Union[RequiredClauses, PriorityTier],
) -> list[str]:
    """
    List the required parts a risk interpretation is missing.

    Returns:
        Empty list when the text is acceptable
    """
    spec = _required(required)
    missing: list[str] = []

    sentences = count_sentences(text)
    if sentences < spec.min_sentences:
        missing.append(f"minimum {spec.min_sentences} sentences (found {sentences})")
    if spec.consequence and not has_consequence_clause(text):
        missing.append("'if not addressed' clause")
    if spec.why_not_immediate and not has_why_not_immediate_clause(text):
        missing.append("explanation of why this is not Immediate priority (why not immediate)")
    return missing


# =============================================================================
# Repair
# =============================================================================

def _terminate(sentence: str) -> str:
    sentence = sentence.strip()
    if sentence and sentence[-1] not in ".!?":
        sentence += "."
    return sentence


def attempt_repair(
    text: str,
    required: Union[RequiredClauses, PriorityTier],
) -> str:
    """
    Append default clauses until ``text`` satisfies ``required``.

    Text that already passes is returned unchanged. Otherwise the
    consequence clause is appended when missing, then the tier's context
    clause when the text is short or (below top tier) lacks a
    not-immediate explanation.
    """
    spec = _required(required)
    if not validate_risk_interpretation(text or "", spec):
        return text

    parts = [_terminate(text)] if text and text.strip() else []
    if spec.consequence and not has_consequence_clause(text or ""):
        parts.append(DEFAULT_CONSEQUENCE)

    joined = " ".join(parts)
    needs_context = count_sentences(joined) < spec.min_sentences
    if spec.why_not_immediate and not has_why_not_immediate_clause(joined):
        needs_context = True
    if needs_context:
        parts.append(DEFAULT_IMMEDIATE if spec.tier.is_top_tier else DEFAULT_NOT_IMMEDIATE)

    return re.sub(r"\s+", " ", " ".join(parts)).strip()


# =============================================================================
# Page Validation
# =============================================================================

def validate_page(page: FindingPage) -> list[Violation]:
    """
    Structural checks on a resolved page.

    Every block must be non-empty, the Evidence block may reference at
    most two photos, and the risk interpretation must pass its checks.
    """
    violations: list[Violation] = []
    for name in PAGE_FIELDS:
        value = getattr(page, name)
        empty = value.is_empty if name == "evidence" else not str(value).strip()
        if empty:
            label = name.replace("_", " ").title()
            violations.append(Violation(page.finding_id, name, f"{label} is missing or empty"))

    if len(page.evidence.items) > MAX_EVIDENCE_PHOTOS:
        violations.append(Violation(
            page.finding_id,
            "evidence",
            f"Evidence references {len(page.evidence.items)} photos (max {MAX_EVIDENCE_PHOTOS})",
        ))

    for problem in validate_risk_interpretation(page.risk_interpretation, page.priority):
        violations.append(Violation(page.finding_id, "risk_interpretation", problem))
    return violations
