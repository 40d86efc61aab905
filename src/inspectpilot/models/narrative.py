"""
InspectPilot Narrative Models

Resolved content for a finding page: six mandatory blocks plus the
violations collected while resolving them. Violations are accumulated
per batch and raised once; they are never thrown per finding.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import PriorityTier


# Block field names, in page order.
PAGE_FIELDS = (
    "asset_component",
    "observed_condition",
    "evidence",
    "risk_interpretation",
    "priority_classification",
    "budgetary_planning_range",
)


@dataclass(frozen=True)
class Violation:
    """
    A single structural problem found for a finding.

    Attributes:
        finding_id: Finding the violation belongs to
        field: Block name, or "profile" for a missing profile
        message: Human-readable description
    """
    finding_id: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"Finding {self.finding_id} - {self.field}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {
            "finding_id": self.finding_id,
            "field": self.field,
            "message": self.message,
        }


# =============================================================================
# Blocks
# =============================================================================

@dataclass(frozen=True)
class EvidenceItem:
    """One photo reference in an Evidence block."""
    photo_id: str
    caption: str
    url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"photo_id": self.photo_id, "caption": self.caption, "url": self.url}


@dataclass(frozen=True)
class EvidenceBlock:
    """
    Resolved Evidence block.

    Either a list of photo items (at most two) or a fallback sentence.
    """
    items: tuple[EvidenceItem, ...] = ()
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.items and not (self.text and self.text.strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "text": self.text,
        }


@dataclass(frozen=True)
class PriorityLabel:
    """Fixed icon and label rendered for a tier."""
    tier: PriorityTier
    icon: str
    label: str

    def __str__(self) -> str:
        return f"{self.icon} {self.label}"


@dataclass(frozen=True)
class FindingPage:
    """The six resolved blocks for one finding."""
    finding_id: str
    priority: PriorityTier
    asset_component: str
    observed_condition: str
    evidence: EvidenceBlock
    risk_interpretation: str
    priority_classification: PriorityLabel
    budgetary_planning_range: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "finding_id": self.finding_id,
            "priority": self.priority.value,
            "asset_component": self.asset_component,
            "observed_condition": self.observed_condition,
            "evidence": self.evidence.to_dict(),
            "risk_interpretation": self.risk_interpretation,
            "priority_classification": str(self.priority_classification),
            "budgetary_planning_range": self.budgetary_planning_range,
        }


@dataclass
class FindingPagesResult:
    """Validated pages for a batch, in tier order."""
    pages: list[FindingPage] = field(default_factory=list)

    @property
    def finding_ids(self) -> list[str]:
        return [page.finding_id for page in self.pages]

    def to_dict(self) -> dict[str, Any]:
        return {"pages": [page.to_dict() for page in self.pages]}
