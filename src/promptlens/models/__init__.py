"""Pydantic models for promptlens.

Import from submodules directly for narrower imports:

    from promptlens.models.enums import Severity
    from promptlens.models.findings import Finding
"""

# ============ ENUMS ============
from .enums import DocumentCategory, SessionState, Severity

# ============ FINDINGS ============
from .findings import DOCUMENT_START, Finding, Position, Range

# ============ CACHE ============
from .cache import CacheEntry

# ============ SEMANTIC ============
from .semantic import (
    AmbiguityIssue,
    CognitiveLoad,
    CognitiveLoadIssue,
    CombinedAnalysisResponse,
    CompletionRequest,
    CompletionResponse,
    CompositionConflict,
    CompositionConflictResponse,
    Contradiction,
    CoverageAnalysis,
    CoverageGap,
    FormatIssue,
    MissingErrorHandling,
    OutputPredictions,
    OutputShape,
    OutputWarning,
    PersonaIssue,
)

__all__ = [
    # Enums
    "DocumentCategory",
    "SessionState",
    "Severity",
    # Findings
    "DOCUMENT_START",
    "Finding",
    "Position",
    "Range",
    # Cache
    "CacheEntry",
    # Semantic
    "CompletionRequest",
    "CompletionResponse",
    "CombinedAnalysisResponse",
    "CompositionConflictResponse",
    "Contradiction",
    "AmbiguityIssue",
    "PersonaIssue",
    "CognitiveLoad",
    "CognitiveLoadIssue",
    "OutputShape",
    "OutputPredictions",
    "OutputWarning",
    "FormatIssue",
    "CoverageAnalysis",
    "CoverageGap",
    "MissingErrorHandling",
    "CompositionConflict",
]
