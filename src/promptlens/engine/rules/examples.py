"""Example sufficiency heuristics."""

import re

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.document import PromptDocument
from .base import document_finding

ANALYZER = "example-analysis"

EXAMPLE_PATTERNS = (
    re.compile(r"examples?:", re.IGNORECASE),
    re.compile(r"for example", re.IGNORECASE),
    re.compile(r"e\.g\.", re.IGNORECASE),
    re.compile(r"such as:", re.IGNORECASE),
    re.compile(r"here's how", re.IGNORECASE),
    re.compile(r"sample\s+(input|output|response)", re.IGNORECASE),
)

STRUCTURED_OUTPUT_PATTERN = re.compile(r"json|object|array|\{|\[", re.IGNORECASE)
OUTPUT_VERB_PATTERN = re.compile(r"output|respond|return", re.IGNORECASE)
FORMAT_PATTERN = re.compile(r"format|structure|schema", re.IGNORECASE)
INPUT_MARKER_PATTERN = re.compile(r"input\s*:", re.IGNORECASE)
OUTPUT_MARKER_PATTERN = re.compile(r"output\s*:", re.IGNORECASE)
REFUSAL_PATTERN = re.compile(r"refuse|reject|decline|don't|do not|never", re.IGNORECASE)
NEGATIVE_EXAMPLE_PATTERN = re.compile(
    r"bad example|negative example|incorrect|wrong|don't do|invalid", re.IGNORECASE
)


def check_examples(doc: PromptDocument) -> list[Finding]:
    findings: list[Finding] = []
    text = doc.text

    has_examples = any(pattern.search(text) for pattern in EXAMPLE_PATTERNS)
    wants_structured = bool(STRUCTURED_OUTPUT_PATTERN.search(text)) and bool(
        OUTPUT_VERB_PATTERN.search(text)
    )
    wants_format = bool(FORMAT_PATTERN.search(text))

    if (wants_structured or wants_format) and not has_examples:
        findings.append(
            document_finding(
                "missing-examples",
                "Output format specified but no examples provided. Consider adding a few-shot "
                "example to clarify expected output structure.",
                Severity.INFO,
                ANALYZER,
            )
        )

    if not has_examples:
        return findings

    inputs = len(INPUT_MARKER_PATTERN.findall(text))
    outputs = len(OUTPUT_MARKER_PATTERN.findall(text))

    if inputs > 0 and outputs > 0 and inputs != outputs:
        findings.append(
            document_finding(
                "example-mismatch",
                f"Found {inputs} input example(s) but {outputs} output example(s). Ensure each "
                "input has a corresponding output.",
                Severity.WARNING,
                ANALYZER,
            )
        )

    if inputs > 0 and REFUSAL_PATTERN.search(text) and not NEGATIVE_EXAMPLE_PATTERN.search(text):
        findings.append(
            document_finding(
                "missing-negative-example",
                "Prompt has refusal/rejection instructions but no negative examples. Consider "
                "adding an example showing correct refusal behavior.",
                Severity.INFO,
                ANALYZER,
            )
        )

    return findings
