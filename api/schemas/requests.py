"""Request schemas for the API."""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional

from inspectpilot.models import Finding, parse_axes


class FindingInput(BaseModel):
    """A finding in scope for a report."""
    id: str = Field(..., description="Finding id, e.g., 'PARTIAL_RCD_COVERAGE'")
    priority: Optional[str] = Field(None, description="IMMEDIATE|RECOMMENDED_0_3_MONTHS|PLAN_MONITOR or a synonym")
    title: Optional[str] = Field(None, description="Display title")
    observed: Optional[str] = Field(None, description="Raw observed-condition text")
    facts: Optional[str] = Field(None, description="Raw facts text")
    photo_ids: list[str] = Field(default=[], description="Photo references, e.g., 'P01'")
    priority_selected: Optional[str] = Field(None, description="Tier chosen by the inspector")
    priority_calculated: Optional[str] = Field(None, description="Tier computed upstream")
    priority_final: Optional[str] = Field(None, description="Tier already resolved upstream")
    override_reason: Optional[str] = Field(None, description="Justification for an inspector override")
    authoring: Optional[dict[str, Any]] = Field(None, description="Authored risk record (safety, urgency, liability, ...)")
    dimensions: Optional[dict[str, str]] = Field(None, description="Canonical D1-D9 values; missing axes are defaulted")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "PARTIAL_RCD_COVERAGE",
                    "priority": "RECOMMENDED",
                    "photo_ids": ["P01", "P02"],
                    "authoring": {"safety": "MODERATE", "urgency": "SHORT_TERM", "liability": "HIGH"},
                },
                {"id": "LABELING_POOR", "priority": "PLAN"},
            ]
        }
    }

    @field_validator("dimensions")
    @classmethod
    def known_dimension_values(cls, v: Optional[dict[str, str]]) -> Optional[dict[str, str]]:
        if v is not None:
            parse_axes(v)
        return v

    def to_finding(self) -> Finding:
        return Finding.from_dict(self.model_dump(exclude_none=True))


class DeriveRequest(BaseModel):
    """Request to derive findings from raw answers."""
    raw: dict[str, Any] = Field(..., description="Raw inspection answers")
    existing: list[str] = Field(default=[], description="Finding ids already present")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "raw": {
                        "switchboard": {
                            "rcd_present": {"value": True, "status": "answered"},
                            "rcd_coverage": {"value": "partial", "status": "answered"},
                        }
                    },
                    "existing": ["LABELING_POOR"],
                }
            ]
        }
    }


class SignalsRequest(BaseModel):
    """Request to compute finding and property signals."""
    findings: list[FindingInput] = Field(..., description="Findings with dimensions or authoring records")


class FindingPagesRequest(BaseModel):
    """Request to assemble and validate finding pages."""
    findings: list[FindingInput] = Field(..., description="Findings in scope")
    raw: Optional[dict[str, Any]] = Field(None, description="Raw answers, searched for photo ids")
    canonical: Optional[dict[str, Any]] = Field(None, description="Canonical test data, searched after raw")
    inspection_id: Optional[str] = Field(None, description="Inspection id for photo captions and links")
    photo_captions: dict[str, str] = Field(default={}, description="Photo id -> caption")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "findings": [{"id": "PARTIAL_RCD_COVERAGE", "priority": "RECOMMENDED", "photo_ids": ["P01"]}],
                    "inspection_id": "INS-1001",
                    "photo_captions": {"P01": "Switchboard with RCD on power circuits only"},
                }
            ]
        }
    }


class InspectionReportRequest(BaseModel):
    """Request to run the full inspection pipeline."""
    raw: dict[str, Any] = Field(..., description="Raw inspection answers")
    existing: list[FindingInput] = Field(default=[], description="Findings already present")
    canonical: Optional[dict[str, Any]] = Field(None, description="Canonical test data")
    inspection_id: Optional[str] = Field(None, description="Inspection id")
    photo_captions: dict[str, str] = Field(default={}, description="Photo id -> caption")
