"""Language-model analysis of prompt documents.

The analyzer issues up to two requests per document through an injected
completion function:
- a combined request covering contradictions, ambiguity, persona drift,
  cognitive load, output shape and coverage
- a composed request over the document plus the documents it links to,
  looking for conflicts across files

Both run concurrently and are joined tolerantly: whichever request
succeeds contributes findings, a failed or undecodable one contributes
nothing.
"""

import logging
from collections.abc import Awaitable, Callable

from ...config import Settings, settings as default_settings
from ...exceptions import SemanticProviderError
from ...models.enums import Severity
from ...models.findings import Finding
from ...models.semantic import (
    CombinedAnalysisResponse,
    CompletionRequest,
    CompletionResponse,
    CompositionConflictResponse,
    CoverageAnalysis,
    OutputShape,
)
from ...services.file_access import FileAccess, LocalFileAccess
from ..core.document import PromptDocument
from ..rules.base import document_finding, line_finding
from .decode import DecodeFailure, decode_response
from .gather import Failure, gather_settled
from .prompts import (
    SYSTEM_PROMPT,
    build_combined_prompt,
    build_composition_prompt,
    strip_delimiters,
)

logger = logging.getLogger(__name__)

# Type alias for the outbound provider call
CompletionFn = Callable[[CompletionRequest], Awaitable[CompletionResponse]]

ANALYZER = "semantic-analysis"
ANALYSIS_FAILED = "semantic-analysis-failed"

UNPREDICTABLE_LENGTH_TOKENS = 500


def _warning_or_info(value: str) -> Severity:
    return Severity.WARNING if value == "warning" else Severity.INFO


def _error_or_warning(value: str) -> Severity:
    return Severity.ERROR if value == "error" else Severity.WARNING


def find_line_number(doc: PromptDocument, text: str) -> int:
    """Best-effort line of ``text`` in the document.

    This is approximate: the model may paraphrase, and a phrase repeated on
    several lines always maps to the first. Tries case-insensitive
    containment of the whole text, then any of its first five words longer
    than three characters, and falls back to line 0.
    """
    if not text:
        return 0

    needle = text.lower()
    lowered = [line.lower() for line in doc.lines]
    for index, line in enumerate(lowered):
        if needle in line:
            return index

    words = [word for word in needle.split()[:5] if len(word) > 3]
    for index, line in enumerate(lowered):
        if any(word in line for word in words):
            return index

    return 0


# =============================================================================
# RESPONSE MAPPING
# =============================================================================


def _contradiction_findings(doc: PromptDocument, result: CombinedAnalysisResponse) -> list[Finding]:
    findings: list[Finding] = []
    for item in result.contradictions:
        line1 = find_line_number(doc, item.instruction1)
        line2 = find_line_number(doc, item.instruction2)
        findings.append(
            line_finding(
                doc,
                "contradiction",
                f'Contradiction detected: "{item.instruction1}" conflicts with '
                f'"{item.instruction2}". {item.explanation}'.rstrip(),
                _error_or_warning(item.severity),
                "contradiction-detection",
                line1,
            )
        )
        if line2 != line1:
            findings.append(
                line_finding(
                    doc,
                    "contradiction-related",
                    f"Related to contradiction above. See line {line1 + 1}.",
                    Severity.INFO,
                    "contradiction-detection",
                    line2,
                )
            )
    return findings


def _ambiguity_findings(doc: PromptDocument, result: CombinedAnalysisResponse) -> list[Finding]:
    findings = []
    for issue in result.ambiguity_issues:
        finding = line_finding(
            doc,
            "ambiguity-llm",
            f"Ambiguity detected: {issue.text}. {issue.suggestion}".rstrip(),
            _warning_or_info(issue.severity),
            "ambiguity-detection",
            find_line_number(doc, issue.text),
        )
        findings.append(finding)
    return findings


def _persona_findings(doc: PromptDocument, result: CombinedAnalysisResponse) -> list[Finding]:
    return [
        line_finding(
            doc,
            "persona-inconsistency",
            f'Persona inconsistency: {issue.description}. "{issue.trait1}" vs "{issue.trait2}"',
            _warning_or_info(issue.severity),
            "persona-consistency",
            find_line_number(doc, issue.trait1),
        )
        for issue in result.persona_issues
    ]


def _cognitive_load_findings(result: CombinedAnalysisResponse) -> list[Finding]:
    load = result.cognitive_load
    if load is None:
        return []

    findings = []
    if load.overall_complexity == "very-high":
        findings.append(
            document_finding(
                "high-complexity",
                "Very high cognitive load detected. This prompt may overwhelm the model's "
                "attention. Consider breaking it into simpler, focused prompts.",
                Severity.WARNING,
                "cognitive-load",
            )
        )
    for issue in load.issues:
        findings.append(
            document_finding(
                f"cognitive-{issue.type}",
                issue.description,
                _warning_or_info(issue.severity),
                "cognitive-load",
            )
        )
    return findings


def _output_shape_findings(shape: OutputShape | None) -> list[Finding]:
    if shape is None:
        return []

    findings = []
    predictions = shape.predictions
    if predictions is not None:
        if (
            predictions.estimated_tokens > UNPREDICTABLE_LENGTH_TOKENS
            and predictions.token_variance == "high"
        ):
            findings.append(
                document_finding(
                    "unpredictable-length",
                    f"Output length is unpredictable (estimated ~{predictions.estimated_tokens:g} "
                    "tokens with high variance). Consider adding explicit length constraints.",
                    Severity.INFO,
                    "output-prediction",
                )
            )
        if (
            predictions.structured_output_requested
            and predictions.structured_output_compliance == "low"
        ):
            findings.append(
                document_finding(
                    "low-format-compliance",
                    "Structured output requested but compliance likelihood is low. "
                    "Add explicit examples or use function calling.",
                    Severity.WARNING,
                    "output-prediction",
                )
            )
        if predictions.refusal_probability == "high":
            findings.append(
                document_finding(
                    "high-refusal-rate",
                    "This prompt may trigger frequent refusals. Review constraints for "
                    "overly restrictive or ambiguous safety rules.",
                    Severity.WARNING,
                    "output-prediction",
                )
            )
        for issue in predictions.format_issues:
            findings.append(
                document_finding("format-issue", issue.issue, Severity.INFO, "output-prediction")
            )

    for warning in shape.warnings:
        findings.append(
            document_finding(
                "output-warning",
                warning.message,
                _warning_or_info(warning.severity),
                "output-prediction",
            )
        )
    return findings


def _coverage_findings(analysis: CoverageAnalysis | None) -> list[Finding]:
    if analysis is None:
        return []

    findings = []
    if analysis.overall_coverage in ("limited", "minimal"):
        findings.append(
            document_finding(
                "limited-coverage",
                f"Semantic coverage is {analysis.overall_coverage}. This prompt may produce "
                "inconsistent results for edge cases.",
                Severity.WARNING,
                "semantic-coverage",
            )
        )
    for gap in analysis.coverage_gaps:
        if gap.impact == "high":
            message, severity = f"Coverage gap: {gap.gap}", Severity.WARNING
        elif gap.impact == "medium":
            message, severity = f"Minor coverage gap: {gap.gap}", Severity.INFO
        else:
            continue
        findings.append(document_finding("coverage-gap", message, severity, "semantic-coverage"))
    for missing in analysis.missing_error_handling:
        findings.append(
            document_finding(
                "missing-error-handling",
                f"No guidance for: {missing.scenario}",
                Severity.INFO,
                "semantic-coverage",
            )
        )
    return findings


def map_combined_response(doc: PromptDocument, result: CombinedAnalysisResponse) -> list[Finding]:
    """Turn a decoded combined response into findings."""
    findings = _contradiction_findings(doc, result)
    findings.extend(_ambiguity_findings(doc, result))
    findings.extend(_persona_findings(doc, result))
    findings.extend(_cognitive_load_findings(result))
    findings.extend(_output_shape_findings(result.output_shape))
    findings.extend(_coverage_findings(result.coverage_analysis))
    return findings


def map_composition_response(result: CompositionConflictResponse) -> list[Finding]:
    """Turn a decoded composition response into findings."""
    return [
        document_finding(
            "composition-conflict",
            f'Composition conflict: {conflict.summary}. "{conflict.instruction1}" vs '
            f'"{conflict.instruction2}"',
            _error_or_warning(conflict.severity),
            "composition-conflicts",
            suggestion=conflict.suggestion or None,
        )
        for conflict in result.conflicts
    ]


# =============================================================================
# ANALYZER
# =============================================================================


class SemanticAnalyzer:
    """Orchestrates language-model analysis of one document at a time."""

    def __init__(
        self,
        completion_fn: CompletionFn | None = None,
        files: FileAccess | None = None,
        settings: Settings | None = None,
    ):
        self.completion_fn = completion_fn
        self.files = files or LocalFileAccess()
        self.settings = settings or default_settings

    @property
    def is_available(self) -> bool:
        return self.completion_fn is not None

    async def analyze(self, doc: PromptDocument) -> list[Finding]:
        """Run the semantic checks for a document.

        Never raises for provider or decode failures.
        """
        if not self.is_available:
            return [
                document_finding(
                    "semantic-unavailable",
                    "Semantic analysis is unavailable: no language model is configured. "
                    "Contradiction, persona and coverage checks were skipped.",
                    Severity.INFO,
                    ANALYZER,
                )
            ]

        if len(doc.body_text.strip()) < self.settings.min_semantic_content_length:
            return []

        labels = ["combined"]
        requests = [self._combined(doc)]

        if doc.links:
            composed, included = await self.build_composed_text(doc)
            if included:
                labels.append("composition")
                requests.append(self._composition(composed))

        outcomes = await gather_settled(*requests, timeout=self.settings.semantic_timeout_seconds)

        findings: list[Finding] = []
        failed = 0
        for label, outcome in zip(labels, outcomes):
            if isinstance(outcome, Failure):
                failed += 1
                reason = "timed out" if outcome.timed_out else str(outcome.error)
                logger.warning(f"Semantic {label} analysis of {doc.identifier} failed: {reason}")
                continue
            findings.extend(outcome.value)

        if failed == len(outcomes):
            findings.append(
                document_finding(
                    ANALYSIS_FAILED,
                    "Semantic analysis failed: the language model did not return a usable "
                    "response. Static findings are still reported.",
                    Severity.INFO,
                    ANALYZER,
                )
            )

        logger.debug(f"Semantic analysis of {doc.identifier}: {len(findings)} findings")
        return findings

    async def build_composed_text(self, doc: PromptDocument) -> tuple[str, int]:
        """Concatenate the document with the text of each readable linked document.

        Returns:
            Tuple of (composed text, number of linked documents included)
        """
        limit = self.settings.max_composed_size
        parts = [strip_delimiters(doc.text)]
        total = len(parts[0])
        included = 0

        for link in doc.links:
            if link.resolved_path is None:
                continue
            if total >= limit:
                break
            try:
                linked = await self.files.read_text(link.resolved_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable linked document {link.resolved_path}: {e}")
                continue

            linked = strip_delimiters(linked)[: limit - total]
            parts.append(f"\n\n--- begin {link.target} ---\n{linked}\n--- end {link.target} ---\n")
            total += len(linked)
            included += 1

        return "\n".join(parts), included

    async def _call(self, prompt: str) -> str:
        if self.completion_fn is None:
            raise SemanticProviderError("No completion function configured")
        response = await self.completion_fn(
            CompletionRequest(prompt=prompt, system_prompt=SYSTEM_PROMPT)
        )
        if response.error:
            raise SemanticProviderError(response.error)
        return response.text

    async def _combined(self, doc: PromptDocument) -> list[Finding]:
        text = await self._call(build_combined_prompt(doc.text))
        decoded = decode_response(text, CombinedAnalysisResponse)
        if isinstance(decoded, DecodeFailure):
            logger.debug(f"Discarding combined response for {doc.identifier}: {decoded.reason}")
            return []
        return map_combined_response(doc, decoded.value)

    async def _composition(self, composed_text: str) -> list[Finding]:
        text = await self._call(build_composition_prompt(composed_text))
        decoded = decode_response(text, CompositionConflictResponse)
        if isinstance(decoded, DecodeFailure):
            logger.debug(f"Discarding composition response: {decoded.reason}")
            return []
        return map_composition_response(decoded.value)
