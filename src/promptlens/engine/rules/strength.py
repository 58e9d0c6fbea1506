"""Instruction strength: weak phrasing, safety positioning, dilution."""

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.constants import (
    CRITICAL_KEYWORDS,
    DEFAULT_STRONGER_PHRASE,
    MAX_CONSTRAINT_LINES,
    SAFETY_POSITION_KEYWORDS,
    SAFETY_POSITION_MIN_LINES,
    SAFETY_POSITION_RATIO,
    STRENGTH_PATTERNS,
    WEAK_PHRASE_SUGGESTIONS,
)
from ..core.document import PromptDocument
from .base import document_finding, line_finding, phrase_pattern, span_finding

ANALYZER = "instruction-strength"

_WEAK_PATTERNS = [(phrase, phrase_pattern(phrase)) for phrase in STRENGTH_PATTERNS["weak"]]
_CONSTRAINT_WORDS = STRENGTH_PATTERNS["strong"] + STRENGTH_PATTERNS["medium"]


def suggest_stronger_language(
    weak_phrase: str,
    suggestions: dict[str, str] | None = None,
) -> str:
    """Stronger replacement for a weak phrase."""
    table = WEAK_PHRASE_SUGGESTIONS if suggestions is None else suggestions
    return table.get(weak_phrase.lower(), DEFAULT_STRONGER_PHRASE)


def _weak_phrasing(doc: PromptDocument) -> list[Finding]:
    findings: list[Finding] = []
    for index, line in enumerate(doc.lines):
        lowered = line.lower()
        critical = any(keyword in lowered for keyword in CRITICAL_KEYWORDS)
        for _, pattern in _WEAK_PATTERNS:
            for match in pattern.finditer(line):
                phrase = match.group(0)
                if critical:
                    findings.append(
                        span_finding(
                            "weak-critical-instruction",
                            f'Critical constraint uses weak language: "{phrase}". Consider '
                            'using stronger language like "Never", "Must", or "Always".',
                            Severity.WARNING,
                            ANALYZER,
                            index,
                            match.start(),
                            match.end(),
                            suggestion=suggest_stronger_language(phrase),
                        )
                    )
                else:
                    findings.append(
                        span_finding(
                            "weak-instruction",
                            f'Weak instruction language: "{phrase}". This may be interpreted '
                            "inconsistently by the model.",
                            Severity.INFO,
                            ANALYZER,
                            index,
                            match.start(),
                            match.end(),
                            suggestion=suggest_stronger_language(phrase),
                        )
                    )
    return findings


def _safety_positioning(doc: PromptDocument) -> list[Finding]:
    total = len(doc.lines)
    if total <= SAFETY_POSITION_MIN_LINES:
        return []

    findings: list[Finding] = []
    for index, line in enumerate(doc.lines):
        if index >= total * SAFETY_POSITION_RATIO:
            break
        lowered = line.lower()
        if any(keyword in lowered for keyword in SAFETY_POSITION_KEYWORDS):
            findings.append(
                line_finding(
                    doc,
                    "safety-positioning",
                    "Safety instructions placed early in the prompt. Consider moving critical "
                    "safety constraints toward the end for better adherence (recency bias).",
                    Severity.INFO,
                    ANALYZER,
                    index,
                )
            )
    return findings


def _dilution(doc: PromptDocument) -> list[Finding]:
    constraint_lines = sum(
        1 for line in doc.lines if any(word in line.lower() for word in _CONSTRAINT_WORDS)
    )
    if constraint_lines <= MAX_CONSTRAINT_LINES:
        return []
    return [
        document_finding(
            "instruction-dilution",
            f"High number of constraints detected ({constraint_lines}). Too many competing "
            "instructions may dilute their effectiveness. Consider consolidating.",
            Severity.WARNING,
            ANALYZER,
        )
    ]


def check_instruction_strength(doc: PromptDocument) -> list[Finding]:
    """Report weak phrasing (escalated near safety keywords), early safety
    constraints and constraint overload."""
    return _weak_phrasing(doc) + _safety_positioning(doc) + _dilution(doc)
