from __future__ import annotations

from .candidates import (
    EnrichmentCandidate,
    FieldClaim,
    IdentityHints,
    PrimaryRecord,
    SequelLink,
    SeriesRef,
    claims_from_values,
)
from .errors import (
    AdapterError,
    FailureKind,
    MalformedError,
    NotFoundError,
    RateLimitedError,
    TimedOutError,
    TransientError,
)
from .merge import (
    FIELD_PRECEDENCE,
    RELATIONAL_SOURCE,
    FieldResolution,
    MergedEnrichment,
    encyclopedia_fallback_url,
    index_candidates,
    merge_enrichment,
)
from .orchestrator import (
    AdapterStatus,
    AdapterTiming,
    EnrichmentOrchestrator,
    EnrichmentRun,
    OrchestrationDiagnostics,
)

__all__ = [
    "FIELD_PRECEDENCE",
    "RELATIONAL_SOURCE",
    "AdapterError",
    "AdapterStatus",
    "AdapterTiming",
    "EnrichmentCandidate",
    "EnrichmentOrchestrator",
    "EnrichmentRun",
    "FailureKind",
    "FieldClaim",
    "FieldResolution",
    "IdentityHints",
    "MalformedError",
    "MergedEnrichment",
    "NotFoundError",
    "OrchestrationDiagnostics",
    "PrimaryRecord",
    "RateLimitedError",
    "SequelLink",
    "SeriesRef",
    "TimedOutError",
    "TransientError",
    "claims_from_values",
    "encyclopedia_fallback_url",
    "index_candidates",
    "merge_enrichment",
]
