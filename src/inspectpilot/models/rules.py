"""
InspectPilot Rule Models

Finding rules are authored externally as YAML and evaluated against the
raw inspection answer tree. A rule is a flat AND of conditions; there is
no OR/NOT composition.

Key components:
- ConditionRule: a single field/operator/value test
- FindingRule: an id plus the conditions that must all hold
- RuleSet: immutable snapshot of every loaded rule
- DerivedFinding: what a matching rule emits
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .enums import ConditionOperator, PriorityTier


# Middle tier; used when a rule omits its priority.
DEFAULT_RULE_PRIORITY = PriorityTier.RECOMMENDED_0_3_MONTHS


# =============================================================================
# Conditions
# =============================================================================

@dataclass(frozen=True)
class ConditionRule:
    """
    A single test against the raw answer tree.

    Attributes:
        field: Dotted path into the answer tree (e.g. "switchboard.rcd_present")
        operator: One of equals, not_equals, exists, contains
        value: Comparison value; for ``exists`` the polarity flag
        description: Optional human-readable note
    """
    field: str
    operator: ConditionOperator
    value: Any = None
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "operator": self.operator.value,
            "value": self.value,
        }


@dataclass(frozen=True)
class FindingRule:
    """
    A rule that emits one finding when all of its conditions hold.

    Attributes:
        id: Finding id emitted on match (e.g. "NO_RCD_PROTECTION")
        conditions: Conditions ANDed together
        priority: Declared tier, if any
        title: Declared display title, if any
    """
    id: str
    conditions: tuple[ConditionRule, ...] = ()
    priority: Optional[PriorityTier] = None
    title: Optional[str] = None

    @property
    def effective_priority(self) -> PriorityTier:
        return self.priority or DEFAULT_RULE_PRIORITY


# =============================================================================
# Rule Set
# =============================================================================

@dataclass(frozen=True)
class RuleSet:
    """
    Immutable snapshot of the loaded rule document.

    Built once by the pack loader and passed explicitly to the rule
    matcher; there is no module-level cache.

    Attributes:
        rules: Finding rules in document order
        hard_overrides: Finding ids that always resolve to IMMEDIATE
        version: Document version string
        source: Path the rules were loaded from, if any
    """
    rules: tuple[FindingRule, ...] = ()
    hard_overrides: frozenset[str] = field(default_factory=frozenset)
    version: str = "1.0"
    source: Optional[str] = None

    @classmethod
    def empty(cls, source: Optional[str] = None) -> RuleSet:
        """Rule set used when the document is missing or unreadable."""
        return cls(source=source)

    @property
    def is_empty(self) -> bool:
        return not self.rules

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[FindingRule]:
        return iter(self.rules)


# =============================================================================
# Derived Findings
# =============================================================================

@dataclass(frozen=True)
class DerivedFinding:
    """A finding emitted by a matching rule."""
    id: str
    priority: PriorityTier = DEFAULT_RULE_PRIORITY
    title: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "priority": self.priority.value}
        if self.title:
            result["title"] = self.title
        return result
