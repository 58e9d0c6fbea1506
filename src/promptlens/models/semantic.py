"""Models for the language-model boundary.

``CompletionRequest``/``CompletionResponse`` form the outbound contract of
the completion function. The remaining models describe the JSON payloads
the model is asked to return; every field is optional so a partially
filled response still validates and an explicit null takes the field default,
while a structurally wrong one (e.g. a string where a list is expected) fails
validation and is discarded.
"""

from pydantic import BaseModel, Field, ValidationInfo, field_validator

# ============ COMPLETION CONTRACT ============


class CompletionRequest(BaseModel):
    """One request to the completion provider."""

    prompt: str = Field(..., description="User prompt text")
    system_prompt: str = Field(..., description="System instruction text")


class CompletionResponse(BaseModel):
    """Provider response: text on success, ``error`` set on failure."""

    text: str = Field(default="", description="Raw response text")
    error: str | None = Field(default=None, description="Provider error message")


# ============ COMBINED ANALYSIS PAYLOAD ============


class LenientModel(BaseModel):
    """Payload base: a null value falls back to the field default."""

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class Contradiction(LenientModel):
    instruction1: str = ""
    instruction2: str = ""
    severity: str = "warning"
    explanation: str = ""


class AmbiguityIssue(LenientModel):
    text: str = ""
    type: str = "other"
    severity: str = "info"
    suggestion: str = ""


class PersonaIssue(LenientModel):
    description: str = ""
    trait1: str = ""
    trait2: str = ""
    severity: str = "info"
    suggestion: str = ""


class CognitiveLoadIssue(LenientModel):
    type: str = "other"
    description: str = ""
    severity: str = "info"
    suggestion: str = ""


class CognitiveLoad(LenientModel):
    issues: list[CognitiveLoadIssue] = Field(default_factory=list)
    overall_complexity: str | None = None


class FormatIssue(LenientModel):
    issue: str = ""
    suggestion: str = ""


class OutputPredictions(LenientModel):
    estimated_tokens: float = 0
    token_variance: str = "low"
    structured_output_requested: bool = False
    structured_output_compliance: str = "high"
    refusal_probability: str = "low"
    format_issues: list[FormatIssue] = Field(default_factory=list)


class OutputWarning(LenientModel):
    message: str = ""
    severity: str = "info"


class OutputShape(LenientModel):
    predictions: OutputPredictions | None = None
    warnings: list[OutputWarning] = Field(default_factory=list)


class CoverageGap(LenientModel):
    gap: str = ""
    impact: str = "low"
    suggestion: str = ""


class MissingErrorHandling(LenientModel):
    scenario: str = ""
    suggestion: str = ""


class CoverageAnalysis(LenientModel):
    well_handled_intents: list[str] = Field(default_factory=list)
    coverage_gaps: list[CoverageGap] = Field(default_factory=list)
    missing_error_handling: list[MissingErrorHandling] = Field(default_factory=list)
    overall_coverage: str | None = None


class CombinedAnalysisResponse(LenientModel):
    """Single-call response covering every document-level semantic check."""

    contradictions: list[Contradiction] = Field(default_factory=list)
    ambiguity_issues: list[AmbiguityIssue] = Field(default_factory=list)
    persona_issues: list[PersonaIssue] = Field(default_factory=list)
    cognitive_load: CognitiveLoad | None = None
    output_shape: OutputShape | None = None
    coverage_analysis: CoverageAnalysis | None = None


# ============ COMPOSITION PAYLOAD ============


class CompositionConflict(LenientModel):
    summary: str = ""
    instruction1: str = ""
    instruction2: str = ""
    severity: str = "warning"
    suggestion: str = ""


class CompositionConflictResponse(LenientModel):
    """Response for the composed (document + linked documents) pass."""

    conflicts: list[CompositionConflict] = Field(default_factory=list)
