"""
InspectPilot Pack Loader

Loads and validates the rule, profile and response documents from YAML
or JSON files and converts the Pydantic schema models to InspectPilot
domain models.

Failure policy:
- Rule document missing or unreadable: an empty RuleSet and a warning
  (no findings are derived), unless the loader is strict.
- Individual rules that fail validation: skipped with a warning, the
  rest of the document still loads. A strict loader rejects the whole
  document instead.
- Profile or response document missing: an empty catalog and a warning.
  Every finding then fails narrative validation with a profile violation.
- Profile or response document present but invalid: PackLoadError or
  PackValidationError.

The loader is used once at startup; the resulting PackSnapshot is
immutable and passed explicitly to the engine.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import PackLoadError, PackValidationError, ProfileNotFoundError
from ..models import (
    BudgetaryRange,
    BudgetBand,
    CategoryDefaults,
    ConditionOperator,
    ConditionRule,
    EscalationRating,
    FindingProfile,
    FindingResponse,
    FindingRule,
    LiabilityRating,
    PriorityTier,
    ProfileCatalog,
    ProfileMessaging,
    ProfileRisk,
    ResponseCatalog,
    RuleSet,
    SafetyRating,
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

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_RULES_FILE = "rules/finding_rules.yaml"
DEFAULT_PROFILES_FILE = "profiles/finding_profiles.yaml"
DEFAULT_RESPONSES_FILE = "responses/responses.yaml"


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_condition(schema: ConditionSchema) -> ConditionRule:
    """Convert ConditionSchema to ConditionRule model."""
    return ConditionRule(
        field=schema.field,
        operator=ConditionOperator(schema.operator),
        value=schema.value,
        description=schema.description,
    )


def _convert_rule(schema: FindingRuleSchema) -> FindingRule:
    """Convert FindingRuleSchema to FindingRule model."""
    return FindingRule(
        id=schema.id,
        conditions=tuple(_convert_condition(c) for c in schema.conditions),
        priority=PriorityTier.parse(schema.priority),
        title=schema.title,
    )


def _convert_rule_document(schema: RuleDocumentSchema, source: Optional[str]) -> RuleSet:
    """Convert RuleDocumentSchema to RuleSet model."""
    return RuleSet(
        rules=tuple(_convert_rule(r) for r in schema.finding_rules),
        hard_overrides=frozenset(schema.hard_overrides.findings),
        version=schema.version,
        source=source,
    )


def _convert_category_defaults(schema: CategoryDefaultsSchema) -> CategoryDefaults:
    """Convert CategoryDefaultsSchema to CategoryDefaults model."""
    return CategoryDefaults(
        risk_severity=schema.risk_severity,
        likelihood=schema.likelihood,
        priority=PriorityTier.parse(schema.priority) or PriorityTier.PLAN_MONITOR,
        budget_band=BudgetBand(schema.budget_band),
        timeline=schema.timeline,
        evidence_requirements=tuple(schema.evidence_requirements),
    )


def _convert_profile(finding_id: str, schema: FindingProfileSchema) -> FindingProfile:
    """Convert FindingProfileSchema to FindingProfile model, fields kept as authored."""
    risk = schema.risk
    return FindingProfile(
        finding_id=finding_id,
        category=schema.category or "OTHER",
        asset_component=schema.asset_component,
        messaging=ProfileMessaging(
            title=schema.messaging.title,
            why_it_matters=schema.messaging.why_it_matters,
            if_not_addressed=schema.messaging.if_not_addressed,
            planning_guidance=schema.messaging.planning_guidance,
        ),
        budget_range=schema.budget_range,
        budget_band=BudgetBand(schema.budget_band) if schema.budget_band else None,
        priority=PriorityTier.parse(schema.priority),
        timeline=schema.timeline,
        risk=ProfileRisk(
            safety=SafetyRating(risk.safety) if risk.safety else None,
            compliance=LiabilityRating(risk.compliance) if risk.compliance else None,
            escalation=EscalationRating(risk.escalation) if risk.escalation else None,
        ),
        risk_severity=schema.risk_severity,
        likelihood=schema.likelihood,
        evidence_requirements=tuple(schema.evidence_requirements),
    )


def _convert_profile_document(schema: ProfileDocumentSchema) -> ProfileCatalog:
    """Convert ProfileDocumentSchema to ProfileCatalog model."""
    return ProfileCatalog(
        profiles={fid: _convert_profile(fid, p) for fid, p in schema.finding_profiles.items()},
        category_defaults={
            name: _convert_category_defaults(d) for name, d in schema.category_defaults.items()
        },
        version=schema.version,
    )


def _convert_response(schema: FindingResponseSchema) -> FindingResponse:
    """Convert FindingResponseSchema to FindingResponse model."""
    observed = schema.observed_condition
    legacy = schema.budgetary_range
    return FindingResponse(
        title=schema.title,
        observed_condition=tuple(observed) if isinstance(observed, list) else observed,
        why_it_matters=schema.why_it_matters,
        risk_interpretation=schema.risk_interpretation,
        budget_range_text=schema.budget_range_text,
        budget_range_low=schema.budget_range_low,
        budget_range_high=schema.budget_range_high,
        budget_range_currency=schema.budget_range_currency,
        budget_range_note=schema.budget_range_note,
        budgetary_range=(
            BudgetaryRange(
                low=legacy.low, high=legacy.high, currency=legacy.currency, note=legacy.note,
            )
            if legacy is not None else None
        ),
    )


def _convert_response_document(schema: ResponseDocumentSchema) -> ResponseCatalog:
    """Convert ResponseDocumentSchema to ResponseCatalog model."""
    return ResponseCatalog(
        responses={fid: _convert_response(r) for fid, r in schema.responses.items()},
    )


# =============================================================================
# Pack Snapshot
# =============================================================================

@dataclass(frozen=True)
class PackSnapshot:
    """
    Immutable snapshot of every loaded pack document.

    Attributes:
        rules: Finding rules and hard overrides
        profiles: Finding profiles and category defaults
        responses: Authored finding responses
        source: Pack directory the snapshot was loaded from
    """
    rules: RuleSet = field(default_factory=RuleSet)
    profiles: ProfileCatalog = field(default_factory=ProfileCatalog)
    responses: ResponseCatalog = field(default_factory=ResponseCatalog)
    source: Optional[str] = None

    def require_profile(self, finding_id: str) -> FindingProfile:
        """
        Get the profile for a finding.

        Raises:
            ProfileNotFoundError: If no profile is authored for the id
        """
        profile = self.profiles.get(finding_id)
        if profile is None:
            raise ProfileNotFoundError(
                message=f"Finding profile not found for {finding_id}",
                finding_id=finding_id,
            )
        return profile

    def summary(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "rules": len(self.rules),
            "rules_version": self.rules.version,
            "hard_overrides": sorted(self.rules.hard_overrides),
            "profiles": len(self.profiles),
            "profiles_version": self.profiles.version,
            "category_defaults": sorted(self.profiles.category_defaults),
            "responses": len(self.responses),
        }


# =============================================================================
# Pack Loader
# =============================================================================

class PackLoader:
    """
    Loads pack documents from YAML or JSON files.

    Usage:
        loader = PackLoader()
        snapshot = loader.load_snapshot("packs")

        # Or one document at a time
        rules = loader.load_rules("packs/rules/finding_rules.yaml")
    """

    def __init__(self, strict: bool = False):
        """
        Initialize the loader.

        Args:
            strict: If True, a missing or invalid rule document raises
                instead of degrading to an empty rule set, and schema
                version mismatches are rejected
        """
        self.strict = strict

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def load_rules(self, path: PathLike) -> RuleSet:
        """
        Load the finding rule document.

        Returns:
            Loaded RuleSet; empty when the document is missing or
            unreadable, without the rules that fail validation otherwise

        Raises:
            PackLoadError: Strict mode only, if the file cannot be read
            PackValidationError: Strict mode only, if validation fails
        """
        path = Path(path)
        try:
            data = self._read(path)
            self._check_version(data, path)
            if self.strict:
                schema = self._validate(validate_rule_document, data, path)
            else:
                schema = self._validate_rules_leniently(data, path)
        except (PackLoadError, PackValidationError) as e:
            if self.strict:
                raise
            logger.warning("Rule document unavailable, no findings will be derived: %s", e)
            return RuleSet.empty(source=str(path))

        rule_set = _convert_rule_document(schema, str(path))
        logger.info(
            "Loaded %d finding rule(s) from %s (version %s)",
            len(rule_set), path, rule_set.version,
        )
        return rule_set

    def _validate_rules_leniently(self, data: dict[str, Any], path: Path) -> RuleDocumentSchema:
        """Validate each rule on its own, dropping the ones that fail."""
        entries = data.get("finding_rules") or []
        if not isinstance(entries, list):
            raise PackValidationError(
                message=f"{path.name}: finding_rules must be a list",
                details={"path": str(path), "type": type(entries).__name__},
            )
        document = self._validate(validate_rule_document, {**data, "finding_rules": []}, path)

        rules: list[FindingRuleSchema] = []
        for index, entry in enumerate(entries):
            try:
                rules.append(FindingRuleSchema.model_validate(entry))
            except ValidationError as e:
                rule_id = entry.get("id") if isinstance(entry, dict) else None
                logger.warning(
                    "Skipping finding rule %s in %s: %d validation error(s): %s",
                    rule_id or f"#{index}", path.name, e.error_count(),
                    e.errors(include_url=False, include_context=False),
                )
        return document.model_copy(update={"finding_rules": rules})

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def load_profiles(self, path: PathLike) -> ProfileCatalog:
        """
        Load the finding profile document.

        Returns:
            Loaded ProfileCatalog; empty when the file does not exist

        Raises:
            PackLoadError: If the file exists but cannot be read
            PackValidationError: If validation fails
        """
        path = Path(path)
        if not path.exists():
            logger.warning("Profile document not found at %s; every finding will lack a profile", path)
            return ProfileCatalog()

        data = self._read(path)
        self._check_version(data, path)
        catalog = _convert_profile_document(self._validate(validate_profile_document, data, path))
        logger.info(
            "Loaded %d finding profile(s) and %d category default(s) from %s",
            len(catalog), len(catalog.category_defaults), path,
        )
        return catalog

    # -------------------------------------------------------------------------
    # Responses
    # -------------------------------------------------------------------------

    def load_responses(self, path: PathLike) -> ResponseCatalog:
        """
        Load the authored response document.

        Returns:
            Loaded ResponseCatalog; empty when the file does not exist

        Raises:
            PackLoadError: If the file exists but cannot be read
            PackValidationError: If validation fails
        """
        path = Path(path)
        if not path.exists():
            logger.warning("Response document not found at %s; narratives use profile text only", path)
            return ResponseCatalog()

        data = self._read(path)
        self._check_version(data, path)
        catalog = _convert_response_document(self._validate(validate_response_document, data, path))
        logger.info("Loaded %d finding response(s) from %s", len(catalog), path)
        return catalog

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def load_snapshot(
        self,
        packs_dir: PathLike,
        rules_file: Optional[PathLike] = None,
        profiles_file: Optional[PathLike] = None,
        responses_file: Optional[PathLike] = None,
    ) -> PackSnapshot:
        """
        Load all three documents.

        File arguments override the default locations; relative paths are
        resolved against ``packs_dir``.
        """
        base = Path(packs_dir)
        snapshot = PackSnapshot(
            rules=self.load_rules(base / (rules_file or DEFAULT_RULES_FILE)),
            profiles=self.load_profiles(base / (profiles_file or DEFAULT_PROFILES_FILE)),
            responses=self.load_responses(base / (responses_file or DEFAULT_RESPONSES_FILE)),
            source=str(base),
        )
        return snapshot

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            data = self._load_file(path)
        except Exception as e:
            raise PackLoadError(
                message=f"Failed to load pack document: {e}",
                details={"path": str(path), "error": str(e)},
            )
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PackValidationError(
                message="Pack document must be a mapping at the top level",
                details={"path": str(path), "type": type(data).__name__},
            )
        return data

    def _check_version(self, data: dict[str, Any], path: Path) -> None:
        if self.strict and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise PackValidationError(
                message=f"Schema version mismatch: {path.name} has {pack_version}, expected {SCHEMA_VERSION}",
                details={"pack_version": pack_version, "expected_version": SCHEMA_VERSION},
            )

    def _validate(self, validator: Any, data: dict[str, Any], path: Path) -> Any:
        try:
            return validator(data)
        except ValidationError as e:
            raise PackValidationError(
                message=f"{path.name} validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False, include_context=False), "path": str(path)},
            )

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f)
            elif path.suffix.lower() == ".json":
                return json.load(f)
            else:
                content = f.read()
                try:
                    return yaml.safe_load(content)
                except yaml.YAMLError:
                    return json.loads(content)


# =============================================================================
# Convenience Functions
# =============================================================================

def load_snapshot(packs_dir: PathLike, strict: bool = False) -> PackSnapshot:
    """Load every pack document under ``packs_dir`` with a temporary loader."""
    return PackLoader(strict=strict).load_snapshot(packs_dir)


def load_rules_from_string(content: str, format: str = "yaml") -> RuleSet:
    """
    Load a rule document from a string.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    data = json.loads(content) if format.lower() == "json" else yaml.safe_load(content)
    return _convert_rule_document(validate_rule_document(data or {}), None)
