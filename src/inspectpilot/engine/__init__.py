"""
InspectPilot Engine

Core services for finding derivation, risk normalization and narrative
assembly.

Services:
- Field resolver: envelope-aware dotted-path lookup
- Rule matcher: derive findings from raw answers
- Priority: tier matrix, hard overrides and override resolution
- Dimension normalizer: authored ratings -> D1-D9
- Signal aggregator: finding and property signals
- Classification: system/space grouping and tags
- Narrative assembler and validator: six-block finding pages
- Photo signing: time-limited photo view links

The end-to-end InspectionPipeline lives in ``inspectpilot.engine.pipeline``.

Usage:
    from inspectpilot.engine import (
        derive_and_merge,
        DimensionNormalizer,
        derive_property_signals,
        NarrativeAssembler,
    )
"""
from __future__ import annotations

from .classification import (
    classify_finding,
    normalize_finding_id,
)
from .dimension_normalizer import (
    GLOBAL_DEFAULTS,
    THRESHOLD_TABLE_VERSION,
    DimensionNormalizer,
    RiskInputs,
    normalize,
    timeline_to_urgency,
)
from .evidence import (
    EVIDENCE_DEFAULT,
    InMemoryPhotoStore,
    PhotoMetadataStore,
    resolve_evidence,
    resolve_photo_ids,
)
from .field_resolver import (
    MAX_ENVELOPE_DEPTH,
    collect_limitations,
    first_value,
    get_value,
    is_envelope,
    is_present,
    resolve_field,
    unwrap_envelope,
)
from .narrative_assembler import (
    NarrativeAssembler,
    budget_range_from_band,
    priority_label,
    resolve_asset_component,
    resolve_budget_range,
    resolve_observed_condition,
    resolve_risk_interpretation,
    sort_by_tier,
    synthesize_risk_interpretation,
)
from .narrative_validator import (
    MAX_EVIDENCE_PHOTOS,
    RequiredClauses,
    attempt_repair,
    count_sentences,
    validate_page,
    validate_risk_interpretation,
)
from .photo_signing import (
    PhotoUrlSigner,
    require_photo_token,
    sign_photo_url,
    verify_photo_token,
)
from .priority import (
    calculate_priority,
    is_override_valid,
    normalize_priority,
    priority_rank,
    resolve_priority_final,
)
from .rule_matcher import (
    derive_and_merge,
    derive_findings,
    evaluate_condition,
    rule_matches,
)
from .signal_aggregator import (
    derive_finding_signals,
    derive_property_signals,
    max_risk,
    overall_health_to_risk_label,
)

__all__ = [
    # Field resolver
    "MAX_ENVELOPE_DEPTH",
    "collect_limitations",
    "first_value",
    "get_value",
    "is_envelope",
    "is_present",
    "resolve_field",
    "unwrap_envelope",
    # Rule matcher
    "derive_and_merge",
    "derive_findings",
    "evaluate_condition",
    "rule_matches",
    # Priority
    "calculate_priority",
    "is_override_valid",
    "normalize_priority",
    "priority_rank",
    "resolve_priority_final",
    # Dimensions
    "GLOBAL_DEFAULTS",
    "THRESHOLD_TABLE_VERSION",
    "DimensionNormalizer",
    "RiskInputs",
    "normalize",
    "timeline_to_urgency",
    # Signals
    "derive_finding_signals",
    "derive_property_signals",
    "max_risk",
    "overall_health_to_risk_label",
    # Classification
    "classify_finding",
    "normalize_finding_id",
    # Narrative
    "EVIDENCE_DEFAULT",
    "MAX_EVIDENCE_PHOTOS",
    "InMemoryPhotoStore",
    "NarrativeAssembler",
    "PhotoMetadataStore",
    "RequiredClauses",
    "attempt_repair",
    "budget_range_from_band",
    "count_sentences",
    "priority_label",
    "resolve_asset_component",
    "resolve_budget_range",
    "resolve_evidence",
    "resolve_observed_condition",
    "resolve_photo_ids",
    "resolve_risk_interpretation",
    "sort_by_tier",
    "synthesize_risk_interpretation",
    "validate_page",
    "validate_risk_interpretation",
    # Photo links
    "PhotoUrlSigner",
    "require_photo_token",
    "sign_photo_url",
    "verify_photo_token",
]
