"""
InspectPilot Packs

Schema validation and loading for the authored documents that drive the
engine: finding rules, finding profiles and finding responses.

Usage:
    from inspectpilot.packs import PackLoader, load_snapshot

    # Load every document under a pack directory
    snapshot = load_snapshot("packs")

    # Strict loading for CI validation of the pack documents
    loader = PackLoader(strict=True)
    rules = loader.load_rules("packs/rules/finding_rules.yaml")
"""
from __future__ import annotations

from .loader import (
    DEFAULT_PROFILES_FILE,
    DEFAULT_RESPONSES_FILE,
    DEFAULT_RULES_FILE,
    PackLoader,
    PackSnapshot,
    load_rules_from_string,
    load_snapshot,
)
from .schema import (
    SCHEMA_VERSION,
    CategoryDefaultsSchema,
    ConditionSchema,
    FindingProfileSchema,
    FindingResponseSchema,
    FindingRuleSchema,
    ProfileDocumentSchema,
    ResponseDocumentSchema,
    RuleDocumentSchema,
    check_schema_version,
    validate_profile_document,
    validate_response_document,
    validate_rule_document,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "DEFAULT_PROFILES_FILE",
    "DEFAULT_RESPONSES_FILE",
    "DEFAULT_RULES_FILE",
    "PackLoader",
    "PackSnapshot",
    "load_rules_from_string",
    "load_snapshot",
    # Validation
    "check_schema_version",
    "validate_profile_document",
    "validate_response_document",
    "validate_rule_document",
    # Schemas (for advanced usage)
    "CategoryDefaultsSchema",
    "ConditionSchema",
    "FindingProfileSchema",
    "FindingResponseSchema",
    "FindingRuleSchema",
    "ProfileDocumentSchema",
    "ResponseDocumentSchema",
    "RuleDocumentSchema",
]
