"""
InspectPilot Rule Matcher

Evaluates finding rules against the raw inspection answer tree and emits
candidate findings.

Key features:
- Flat AND of conditions per rule (no OR/NOT)
- Loose equality: numeric strings compare numerically, booleans compare
  against "true"/"false"
- Polarity-controlled ``exists``
- ``contains`` across strings, lists and mappings
- Deterministic output independent of rule order
- Idempotent merge against an existing finding list
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Sized, Union

from ..models import (
    ConditionOperator,
    ConditionRule,
    DerivedFinding,
    Finding,
    FindingRule,
    RuleSet,
)
from .field_resolver import resolve_field

logger = logging.getLogger(__name__)


# =============================================================================
# Value Comparison
# =============================================================================

def _coerce_numeric(value: Any) -> Union[Decimal, None]:
    """Coerce numbers and numeric strings to Decimal; None when not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return Decimal(text)
        except InvalidOperation:
            return None
    return None


def _coerce_bool(value: Any) -> Union[bool, None]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def loose_equals(actual: Any, expected: Any) -> bool:
    """
    Loose equality between an answer and a rule value.

    - None equals only None
    - Booleans compare against booleans or "true"/"false" strings
    - Numbers and numeric strings compare numerically
    - Otherwise mixed scalars compare by their string form
    """
    if actual is None or expected is None:
        return actual is None and expected is None

    if isinstance(actual, bool) or isinstance(expected, bool):
        left, right = _coerce_bool(actual), _coerce_bool(expected)
        return left is not None and left == right

    left_num, right_num = _coerce_numeric(actual), _coerce_numeric(expected)
    if left_num is not None and right_num is not None:
        return left_num == right_num

    if isinstance(actual, (list, dict)) or isinstance(expected, (list, dict)):
        return actual == expected

    return str(actual) == str(expected)


def value_contains(actual: Any, needle: Any) -> bool:
    """
    Substring/membership test used by the ``contains`` operator.

    - Strings: substring
    - Lists: any element whose string form contains the needle
    - Mappings: any property value whose string form contains the needle
    """
    if actual is None or needle is None:
        return False
    search = _as_text(needle)
    if isinstance(actual, str):
        return search in actual
    if isinstance(actual, (list, tuple, set)):
        return any(search in _as_text(item) for item in actual)
    if isinstance(actual, Mapping):
        return any(search in _as_text(item) for item in actual.values())
    return search in _as_text(actual)


def _as_text(value: Any) -> str:
    # Match the lowercase rendering authors use for booleans in YAML.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =============================================================================
# Rule Evaluation
# =============================================================================

def evaluate_condition(raw: Any, condition: ConditionRule) -> bool:
    """Evaluate a single condition against the answer tree."""
    actual, found = resolve_field(raw, condition.field)
    operator = condition.operator

    if operator == ConditionOperator.EQUALS:
        return loose_equals(actual if found else None, condition.value)

    if operator == ConditionOperator.NOT_EQUALS:
        return not loose_equals(actual if found else None, condition.value)

    if operator == ConditionOperator.EXISTS:
        must_exist = _coerce_bool(condition.value)
        if must_exist is None:
            must_exist = bool(condition.value)
        return found if must_exist else not found

    if operator == ConditionOperator.CONTAINS:
        return found and value_contains(actual, condition.value)

    logger.warning("Unknown condition operator %r on field %s", operator, condition.field)
    return False


def rule_matches(raw: Any, rule: FindingRule) -> bool:
    """True when the rule has conditions and all of them hold."""
    if not rule.conditions:
        return False
    return all(evaluate_condition(raw, condition) for condition in rule.conditions)


def derive_findings(raw: Any, rule_set: Union[RuleSet, Iterable[FindingRule]]) -> list[DerivedFinding]:
    """
    Derive candidate findings from raw answers.

    Each matching rule emits one finding with its declared id, priority
    (middle tier when omitted) and title. Unmatched rules are skipped
    silently. The result is sorted by finding id. When several matching
    rules share an id, the most urgent one is kept (ties broken by title),
    so the output never depends on rule order.

    Args:
        raw: Raw inspection answer tree
        rule_set: Loaded rules

    Returns:
        Derived findings, one per distinct matching id
    """
    emitted: dict[str, DerivedFinding] = {}
    for rule in rule_set:
        if not rule_matches(raw, rule):
            continue
        candidate = DerivedFinding(
            id=rule.id,
            priority=rule.effective_priority,
            title=rule.title,
        )
        current = emitted.get(rule.id)
        if current is None or _preference(candidate) < _preference(current):
            emitted[rule.id] = candidate
    findings = [emitted[finding_id] for finding_id in sorted(emitted)]
    logger.debug("Derived %d finding(s) from %s rule(s)", len(findings), _count(rule_set))
    return findings


def derive_and_merge(
    raw: Any,
    rule_set: Union[RuleSet, Iterable[FindingRule]],
    existing: Iterable[Union[str, Finding, DerivedFinding, Mapping[str, Any]]],
) -> list[DerivedFinding]:
    """
    Derive findings not already present in ``existing``.

    Safe to re-run against a growing finding list: running it again with
    its own output added to ``existing`` yields nothing.

    Args:
        raw: Raw inspection answer tree
        rule_set: Loaded rules
        existing: Existing findings, as ids, finding objects or dicts

    Returns:
        Newly derived findings only
    """
    existing_ids = {_finding_id(item) for item in existing}
    return [f for f in derive_findings(raw, rule_set) if f.id not in existing_ids]


def _preference(finding: DerivedFinding) -> tuple[int, str]:
    return (finding.priority.rank, finding.title or "")


def _finding_id(item: Union[str, Finding, DerivedFinding, Mapping[str, Any]]) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        return str(item.get("id"))
    return item.id


def _count(rule_set: Union[RuleSet, Iterable[FindingRule]]) -> Union[int, str]:
    return len(rule_set) if isinstance(rule_set, Sized) else "?"
