"""Placeholder validation: undefined and empty ``{{...}}`` placeholders."""

import re

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.constants import COMMON_CONTEXT_VARIABLES
from ..core.document import PromptDocument
from ..core.parsing import PLACEHOLDER_PATTERN
from .base import span_finding

ANALYZER = "variable-validation"

# A name counts as defined by "name:", "name =", "define name" or "{{name}} ="
DEFINITION_PATTERNS = (
    re.compile(r"(\w+)\s*[:=]"),
    re.compile(r"define\s+(\w+)", re.IGNORECASE),
    re.compile(r"\{\{(\w+)\}\}\s*[:=]"),
)

EMPTY_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*\}\}")


def _defined_names(doc: PromptDocument) -> set[str]:
    defined: set[str] = set()
    for line in doc.lines:
        for pattern in DEFINITION_PATTERNS:
            defined.update(match.group(1).lower() for match in pattern.finditer(line))
    return defined


def check_placeholders(doc: PromptDocument) -> list[Finding]:
    """Report placeholders that are never defined and empty placeholders."""
    findings: list[Finding] = []
    defined = _defined_names(doc)

    for name, lines in doc.placeholders.items():
        lowered = name.lower()
        if lowered in defined or lowered in COMMON_CONTEXT_VARIABLES:
            continue
        token = "{{" + name + "}}"
        for line in sorted(set(lines)):
            for match in re.finditer(re.escape(token), doc.lines[line]):
                findings.append(
                    span_finding(
                        "undefined-variable",
                        f"Variable '{token}' is referenced but may not be defined. "
                        "Ensure it's provided in the runtime context.",
                        Severity.WARNING,
                        ANALYZER,
                        line,
                        match.start(),
                        match.end(),
                    )
                )

    for index, line in enumerate(doc.lines):
        for match in EMPTY_PLACEHOLDER_PATTERN.finditer(line):
            findings.append(
                span_finding(
                    "empty-variable",
                    "Empty variable placeholder detected.",
                    Severity.ERROR,
                    ANALYZER,
                    index,
                    match.start(),
                    match.end(),
                    suggestion="",
                )
            )

    return findings
