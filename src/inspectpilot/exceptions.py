"""
InspectPilot Exception Hierarchy

Domain-specific exceptions for inspection finding derivation and
report narrative assembly. All exceptions include error codes for
tracking and logging.

Exception codes follow the pattern: IP_<CATEGORY>_<SPECIFIC>

Only hard failures are modelled here. Missing rule configuration,
unresolvable answer paths and incomplete narrative text are recovered
in-line and never raise.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class InspectPilotError(Exception):
    """
    Base exception for all InspectPilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (IP_*)
        details: Additional context about the error
        finding_id: Associated finding ID if applicable
    """
    message: str
    code: str = "IP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    finding_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.finding_id:
            parts.append(f"(finding: {self.finding_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.finding_id:
            result["finding_id"] = self.finding_id
        return result


# =============================================================================
# Pack Errors
# =============================================================================

@dataclass
class PackLoadError(InspectPilotError):
    """Failed to read a pack document from disk."""
    code: str = "IP_PACK_LOAD_ERROR"


@dataclass
class PackValidationError(InspectPilotError):
    """Pack document failed schema validation."""
    code: str = "IP_PACK_VALIDATION_ERROR"


# =============================================================================
# Profile Errors
# =============================================================================

@dataclass
class ProfileNotFoundError(InspectPilotError):
    """A finding in scope has no profile entry."""
    code: str = "IP_PROFILE_NOT_FOUND"


# =============================================================================
# Narrative Errors
# =============================================================================

@dataclass
class FindingPagesValidationError(InspectPilotError):
    """
    One or more findings failed batch validation.

    Raised once per batch after every finding has been resolved. The
    message names the affected finding ids and the first violation;
    ``violations`` carries all of them.
    """
    code: str = "IP_FINDING_PAGES_INVALID"
    violations: list[Any] = field(default_factory=list)

    @property
    def finding_ids(self) -> list[str]:
        """Affected finding ids in first-seen order."""
        seen: list[str] = []
        for violation in self.violations:
            if violation.finding_id not in seen:
                seen.append(violation.finding_id)
        return seen

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["finding_ids"] = self.finding_ids
        result["violations"] = [v.to_dict() for v in self.violations]
        return result


@dataclass
class RenderValidationError(InspectPilotError):
    """Rendered finding pages failed the structural checks; ``details["errors"]`` lists them."""
    code: str = "IP_RENDER_INVALID"


# =============================================================================
# Photo Link Errors
# =============================================================================

@dataclass
class PhotoTokenError(InspectPilotError):
    """Signed photo link is missing, expired or does not verify."""
    code: str = "IP_PHOTO_TOKEN_INVALID"


__all__ = [
    "InspectPilotError",
    "PackLoadError",
    "PackValidationError",
    "ProfileNotFoundError",
    "FindingPagesValidationError",
    "RenderValidationError",
    "PhotoTokenError",
]
