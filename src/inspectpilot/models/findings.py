"""
InspectPilot Finding Model

A finding is a single identified issue carried through priority
resolution, dimension normalization, signal aggregation and narrative
assembly. Priority fields are stored as canonical tiers; synonyms are
normalized when the finding is built.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .dimensions import AXES, AuthoringRecord, NineAxisDimensions, parse_axes
from .enums import PriorityTier
from .rules import DerivedFinding


@dataclass(frozen=True)
class Finding:
    """
    A finding in scope for a report.

    Attributes:
        id: Finding id (e.g. "PARTIAL_RCD_COVERAGE")
        priority: Legacy/declared priority tier
        title: Display title from the rule or inspector
        observed: Raw observed-condition text
        facts: Raw facts text
        photo_ids: Photo references captured for this finding
        priority_selected: Tier chosen by the inspector
        priority_calculated: Tier computed from the authoring record
        priority_final: Tier already resolved upstream
        override_reason: Justification for an inspector override
        authoring: Hand-maintained risk record, if any
        dimensions: Canonical D1-D9 dimensions, once normalized
    """
    id: str
    priority: PriorityTier = PriorityTier.PLAN_MONITOR
    title: Optional[str] = None
    observed: Optional[str] = None
    facts: Optional[str] = None
    photo_ids: tuple[str, ...] = ()
    priority_selected: Optional[PriorityTier] = None
    priority_calculated: Optional[PriorityTier] = None
    priority_final: Optional[PriorityTier] = None
    override_reason: Optional[str] = None
    authoring: Optional[AuthoringRecord] = None
    dimensions: Optional[NineAxisDimensions] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Finding:
        """
        Build a finding from loosely typed input.

        A complete ``dimensions`` map becomes the finding's D1-D9
        dimensions. A partial one is kept as explicit axes on the
        authoring record, and the normalizer fills the remaining axes.

        Raises:
            ValueError: If a supplied dimension is not a valid value
        """
        raw_authoring = data.get("authoring") or data.get("custom_dimensions")
        authoring = AuthoringRecord.from_dict(raw_authoring) if isinstance(raw_authoring, Mapping) else None

        dimensions = None
        raw_dimensions = data.get("dimensions")
        if isinstance(raw_dimensions, Mapping):
            axes = parse_axes(raw_dimensions)
            if len(axes) == len(AXES):
                dimensions = NineAxisDimensions(**axes)
            elif axes:
                record = authoring or AuthoringRecord()
                authoring = replace(record, axes={**record.axes, **axes})

        photo_ids = data.get("photo_ids") or ()
        if isinstance(photo_ids, str):
            photo_ids = (photo_ids,)
        return cls(
            id=str(data["id"]),
            priority=PriorityTier.parse(data.get("priority")) or PriorityTier.PLAN_MONITOR,
            title=data.get("title"),
            observed=data.get("observed"),
            facts=data.get("facts"),
            photo_ids=tuple(str(p) for p in photo_ids),
            priority_selected=PriorityTier.parse(data.get("priority_selected")),
            priority_calculated=PriorityTier.parse(data.get("priority_calculated")),
            priority_final=PriorityTier.parse(data.get("priority_final")),
            override_reason=data.get("override_reason"),
            authoring=authoring,
            dimensions=dimensions,
        )

    @classmethod
    def from_derived(cls, derived: DerivedFinding) -> Finding:
        return cls(id=derived.id, priority=derived.priority, title=derived.title)

    def with_updates(self, **changes: Any) -> Finding:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "priority": self.priority.value,
        }
        for name in ("title", "observed", "facts", "override_reason"):
            value = getattr(self, name)
            if value:
                result[name] = value
        if self.photo_ids:
            result["photo_ids"] = list(self.photo_ids)
        for name in ("priority_selected", "priority_calculated", "priority_final"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value.value
        if self.dimensions is not None:
            result["dimensions"] = self.dimensions.to_dict()
        return result


@dataclass(frozen=True)
class FindingClassification:
    """Grouping of a finding by electrical system, space and tags."""
    system_group: str = "other"
    space_group: str = "general"
    tags: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "system_group": self.system_group,
            "space_group": self.space_group,
            "tags": list(self.tags),
        }
