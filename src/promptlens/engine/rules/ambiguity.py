"""Ambiguity detection: quantifiers, vague terms, dangling references."""

import re

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.constants import AMBIGUOUS_QUANTIFIERS, UNRESOLVED_REFERENCE_PATTERNS, VAGUE_TERMS
from ..core.document import PromptDocument
from .base import phrase_pattern, span_finding

ANALYZER = "ambiguity-detection"

_QUANTIFIER_PATTERNS = [phrase_pattern(quantifier) for quantifier in AMBIGUOUS_QUANTIFIERS]
_VAGUE_PATTERNS = [
    re.compile(rf"\bbe {re.escape(term)}\b|\bin a {re.escape(term)}\b", re.IGNORECASE)
    for term in VAGUE_TERMS
]


def check_ambiguity(doc: PromptDocument) -> list[Finding]:
    findings: list[Finding] = []

    for index, line in enumerate(doc.lines):
        for pattern in _QUANTIFIER_PATTERNS:
            for match in pattern.finditer(line):
                findings.append(
                    span_finding(
                        "ambiguous-quantifier",
                        f'Ambiguous quantifier: "{match.group(0)}". The model may interpret '
                        "this inconsistently. Consider specifying exact values.",
                        Severity.INFO,
                        ANALYZER,
                        index,
                        match.start(),
                        match.end(),
                    )
                )

        for pattern in _VAGUE_PATTERNS:
            for match in pattern.finditer(line):
                findings.append(
                    span_finding(
                        "vague-term",
                        f'Vague term: "{match.group(0)}". Consider defining what this means '
                        "specifically for your use case.",
                        Severity.INFO,
                        ANALYZER,
                        index,
                        match.start(),
                        match.end(),
                    )
                )

        for pattern in UNRESOLVED_REFERENCE_PATTERNS:
            for match in pattern.finditer(line):
                findings.append(
                    span_finding(
                        "unresolved-reference",
                        f'Potentially unresolved reference: "{match.group(0)}". Ensure the '
                        "referenced content exists and is clear.",
                        Severity.INFO,
                        ANALYZER,
                        index,
                        match.start(),
                        match.end(),
                    )
                )

    return findings
