"""Injection surface: user-input interpolation and jailbreak phrases."""

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.constants import INJECTION_PATTERNS, INPUT_DELIMITERS, USER_INPUT_PLACEHOLDER_PATTERN
from ..core.document import PromptDocument
from .base import document_finding, span_finding

ANALYZER = "injection-analysis"


def check_injection_surface(doc: PromptDocument) -> list[Finding]:
    findings: list[Finding] = []

    for index, line in enumerate(doc.lines):
        for match in USER_INPUT_PLACEHOLDER_PATTERN.finditer(line):
            name = match.group(1)
            findings.append(
                span_finding(
                    "injection-surface",
                    f"User input interpolation point: {{{{{name}}}}}. This is a potential "
                    "injection vector. Consider using delimiters, input validation, or "
                    "sandboxing.",
                    Severity.WARNING,
                    ANALYZER,
                    index,
                    match.start(),
                    match.end(),
                    suggestion=f"<user_input>\n{{{{{name}}}}}\n</user_input>",
                )
            )

        for pattern in INJECTION_PATTERNS:
            match = pattern.search(line)
            if match:
                findings.append(
                    span_finding(
                        "injection-pattern",
                        f'Potential jailbreak pattern detected: "{match.group(0)}". If this is '
                        "in user input, it could override your instructions.",
                        Severity.ERROR,
                        ANALYZER,
                        index,
                        match.start(),
                        match.end(),
                    )
                )

    has_delimiters = any(delimiter in doc.text for delimiter in INPUT_DELIMITERS)
    if not has_delimiters and USER_INPUT_PLACEHOLDER_PATTERN.search(doc.text):
        findings.append(
            document_finding(
                "missing-input-delimiters",
                "User input is interpolated without clear delimiters. Consider wrapping user "
                "input in XML tags or code blocks to prevent injection attacks.",
                Severity.WARNING,
                ANALYZER,
            )
        )

    return findings
