"""
InspectPilot Field Resolver

Resolves dotted paths against the raw inspection answer tree.

Answers may be wrapped in envelopes such as
``{"value": ..., "status": "answered"}``, possibly nested several levels
deep. Every step of path resolution unwraps envelopes before descending.

Key features:
- Pure and total: absence is reported as ``found=False``, never raised
- Bounded envelope unwrapping (MAX_ENVELOPE_DEPTH)
- Collection of skipped answers as report limitations
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..models import AnswerStatus


# Envelopes nested deeper than this are returned as-is.
MAX_ENVELOPE_DEPTH = 8

_STATUS_VALUES = {status.value for status in AnswerStatus}


# =============================================================================
# Envelope Unwrapping
# =============================================================================

def is_envelope(node: Any) -> bool:
    """Check whether a node is an answer envelope."""
    if not isinstance(node, Mapping):
        return False
    if "value" in node:
        return True
    return node.get("status") in _STATUS_VALUES


def unwrap_envelope(node: Any, max_depth: int = MAX_ENVELOPE_DEPTH) -> Any:
    """
    Unwrap answer envelopes until a primitive, list or plain mapping remains.

    An envelope with a status tag but no ``value`` key (e.g. a skipped
    answer) unwraps to None.

    Args:
        node: Node from the answer tree
        max_depth: Maximum number of envelope layers to remove

    Returns:
        The innermost value, or the node reached when the depth bound hits
    """
    depth = 0
    while depth < max_depth and is_envelope(node):
        node = node.get("value")
        depth += 1
    return node


# =============================================================================
# Path Resolution
# =============================================================================

def resolve_field(tree: Any, path: str) -> tuple[Any, bool]:
    """
    Resolve a dot-notation path to a value.

    Supports:
    - Mapping keys: "switchboard.rcd_present"
    - List indices: "circuits.0.rating"
    - Envelopes at any level: {"switchboard": {"value": {...}}}

    Args:
        tree: Root of the answer tree
        path: Dot-notation path

    Returns:
        Tuple of (resolved_value, found). Not found, or resolved to None,
        returns (None, False).
    """
    if not path:
        return (None, False)

    current = tree
    for part in path.split("."):
        current = unwrap_envelope(current)
        if isinstance(current, Mapping):
            if part not in current:
                return (None, False)
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return (None, False)
            current = current[index]
        else:
            return (None, False)

    value = unwrap_envelope(current)
    if value is None:
        return (None, False)
    return (value, True)


def get_value(tree: Any, path: str, default: Any = None) -> Any:
    """Resolve a path, returning ``default`` when nothing is there."""
    value, found = resolve_field(tree, path)
    return value if found else default


def first_value(trees: Sequence[Any], path: str) -> tuple[Any, bool]:
    """Resolve ``path`` against each tree in turn; first hit wins."""
    for tree in trees:
        value, found = resolve_field(tree, path)
        if found:
            return (value, True)
    return (None, False)


def is_present(value: Any) -> bool:
    """True for anything except None, blank strings and empty containers."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


# =============================================================================
# Limitations
# =============================================================================

def collect_limitations(tree: Any) -> list[str]:
    """
    List every skipped answer that carries a skip reason.

    Walks mappings depth-first in key order. Envelopes are not descended
    into. Each entry reads ``"<path>: skipped (<reason>)"``, with
    ``" - <note>"`` appended when a skip note is present.
    """
    limitations: list[str] = []
    _walk_limitations(tree, "", limitations)
    return limitations


def _walk_limitations(node: Any, prefix: str, out: list[str]) -> None:
    if not isinstance(node, Mapping):
        return
    for key, child in node.items():
        if key == "created_at":
            continue
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(child, Mapping) and "status" in child:
            reason = _skip_reason(child)
            if reason:
                note = child.get("skip_note")
                entry = f"{path}: skipped ({reason})"
                if note:
                    entry += f" - {note}"
                out.append(entry)
        else:
            _walk_limitations(child, path, out)


def _skip_reason(envelope: Mapping[str, Any]) -> Optional[str]:
    if envelope.get("status") != AnswerStatus.SKIPPED.value:
        return None
    reason = envelope.get("skip_reason")
    return str(reason) if reason else None
