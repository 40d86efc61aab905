"""
InspectPilot Pack Schemas

Pydantic models for validating the three authored YAML/JSON documents:

- Rule document: ``finding_rules`` plus ``hard_overrides``
- Profile document: ``finding_profiles`` plus ``category_defaults``
- Response document: ``responses``

These schemas map to the domain models in inspectpilot.models. Labels
are upper-cased before validation so authors may write ``high`` or
``High``; priority labels are kept as strings and normalized (synonyms
included) when converted.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check the major version
"""
from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

ConditionOperatorValue = Literal["equals", "not_equals", "exists", "contains"]

SafetyValue = Literal["HIGH", "MODERATE", "LOW"]
LiabilityValue = Literal["HIGH", "MEDIUM", "LOW"]
EscalationValue = Literal["HIGH", "MODERATE", "LOW"]
BudgetBandValue = Literal["LOW", "MED", "HIGH"]


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


# =============================================================================
# Rule Document
# =============================================================================

class ConditionSchema(BaseModel):
    """Schema for a single rule condition."""
    field: str = Field(..., min_length=1, description="Dot-notation answer path (e.g., 'switchboard.rcd_present')")
    operator: ConditionOperatorValue = Field(..., description="Comparison operator")
    value: Any = Field(None, description="Comparison value; polarity flag for 'exists'")
    description: Optional[str] = Field(None, description="Human-readable description")

    @field_validator("operator", mode="before")
    @classmethod
    def lower_operator(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class FindingRuleSchema(BaseModel):
    """Schema for a finding rule (AND of conditions)."""
    id: str = Field(..., min_length=1, description="Finding id emitted on match")
    priority: Optional[str] = Field(None, description="Declared tier or synonym")
    title: Optional[str] = Field(None, description="Display title")
    conditions: list[ConditionSchema] = Field(
        default_factory=list,
        description="Conditions that must all hold; an empty list never matches",
    )


class HardOverridesSchema(BaseModel):
    """Finding ids that always resolve to the top tier."""
    priority_bucket: Literal["IMMEDIATE"] = "IMMEDIATE"
    findings: list[str] = Field(default_factory=list)


class RuleDocumentSchema(BaseModel):
    """Top-level schema for the finding rule document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    version: str = Field("1.0", description="Document version")
    description: Optional[str] = None
    hard_overrides: HardOverridesSchema = Field(default_factory=HardOverridesSchema)
    finding_rules: list[FindingRuleSchema] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("hard_overrides", mode="before")
    @classmethod
    def accept_id_list(cls, v: Any) -> Any:
        """Allow ``hard_overrides: [ID, ...]`` as shorthand."""
        if isinstance(v, list):
            return {"findings": v}
        return v or {}


# =============================================================================
# Profile Document
# =============================================================================

class MessagingSchema(BaseModel):
    """Canned messaging on a profile."""
    title: Optional[str] = None
    why_it_matters: Optional[str] = None
    if_not_addressed: Optional[str] = None
    planning_guidance: Optional[str] = None


class ProfileRiskSchema(BaseModel):
    """Qualitative risk ratings on a profile."""
    safety: Optional[SafetyValue] = None
    compliance: Optional[LiabilityValue] = None
    escalation: Optional[EscalationValue] = None

    @field_validator("safety", "compliance", "escalation", mode="before")
    @classmethod
    def upper_label(cls, v: Any) -> Any:
        return _upper(v)


class CategoryDefaultsSchema(BaseModel):
    """Defaults applied to every profile in a category."""
    risk_severity: int = Field(2, ge=1, le=5)
    likelihood: int = Field(2, ge=1, le=5)
    priority: str = "PLAN"
    budget_band: BudgetBandValue = "LOW"
    timeline: str = "6–18 months"
    evidence_requirements: list[str] = Field(default_factory=lambda: ["Visual inspection"])

    @field_validator("budget_band", mode="before")
    @classmethod
    def upper_band(cls, v: Any) -> Any:
        v = _upper(v)
        return "MED" if v == "MEDIUM" else v


class FindingProfileSchema(BaseModel):
    """
    Schema for one finding profile.

    Unknown keys from older profile revisions are ignored.
    """
    category: Optional[str] = None
    asset_component: Optional[str] = None
    messaging: MessagingSchema = Field(default_factory=MessagingSchema)
    budget_range: Optional[str] = Field(None, description="Explicit range text (e.g., 'AUD $350–$450')")
    budget_band: Optional[BudgetBandValue] = None
    priority: Optional[str] = Field(None, description="Priority override (tier or synonym)")
    timeline: Optional[str] = Field(None, description="e.g. '0–3 months', 'Next renovation'")
    risk: ProfileRiskSchema = Field(default_factory=ProfileRiskSchema)
    risk_severity: Optional[int] = Field(None, ge=1, le=5)
    likelihood: Optional[int] = Field(None, ge=1, le=5)
    evidence_requirements: list[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("budget_band", mode="before")
    @classmethod
    def upper_band(cls, v: Any) -> Any:
        v = _upper(v)
        return "MED" if v == "MEDIUM" else v


class ProfileDocumentSchema(BaseModel):
    """Top-level schema for the finding profile document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    version: str = Field("1.0", description="Document version")
    category_defaults: dict[str, CategoryDefaultsSchema] = Field(default_factory=dict)
    finding_profiles: dict[str, FindingProfileSchema] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v


# =============================================================================
# Response Document
# =============================================================================

class BudgetaryRangeSchema(BaseModel):
    """Legacy structured budget range."""
    low: Optional[float] = None
    high: Optional[float] = None
    currency: Optional[str] = None
    note: Optional[str] = None


class FindingResponseSchema(BaseModel):
    """Schema for one authored finding response."""
    title: Optional[str] = None
    observed_condition: Union[str, list[str], None] = None
    why_it_matters: Optional[str] = None
    risk_interpretation: Optional[str] = None
    budget_range_text: Optional[str] = None
    budget_range_low: Optional[float] = None
    budget_range_high: Optional[float] = None
    budget_range_currency: Optional[str] = None
    budget_range_note: Optional[str] = None
    budgetary_range: Optional[BudgetaryRangeSchema] = None

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def validate_range(self) -> "FindingResponseSchema":
        """Reject inverted low/high pairs."""
        low, high = self.budget_range_low, self.budget_range_high
        if low is not None and high is not None and low > high:
            raise ValueError(f"budget_range_low ({low}) exceeds budget_range_high ({high})")
        return self


class ResponseDocumentSchema(BaseModel):
    """Top-level schema for the authored response document."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    responses: dict[str, FindingResponseSchema] = Field(default_factory=dict)


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_rule_document(data: dict[str, Any]) -> RuleDocumentSchema:
    """
    Validate a rule document dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return RuleDocumentSchema.model_validate(data)


def validate_profile_document(data: dict[str, Any]) -> ProfileDocumentSchema:
    """
    Validate a profile document dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return ProfileDocumentSchema.model_validate(data)


def validate_response_document(data: dict[str, Any]) -> ResponseDocumentSchema:
    """
    Validate a response document dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return ResponseDocumentSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """
    Check if a document's schema version is compatible.

    Only the major version has to match.
    """
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
