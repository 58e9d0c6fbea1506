"""Structure linting: mixed markup conventions and unbalanced tags."""

import re
from collections import Counter

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.document import PromptDocument
from .base import document_finding

ANALYZER = "structure-linting"

XML_TAG_PATTERN = re.compile(r"<[a-z]+>", re.IGNORECASE)
MARKDOWN_HEADING_PATTERN = re.compile(r"^#{1,6}\s+", re.MULTILINE)
OPEN_TAG_PATTERN = re.compile(r"<([a-z_]+)>", re.IGNORECASE)
CLOSE_TAG_PATTERN = re.compile(r"</([a-z_]+)>", re.IGNORECASE)


def check_structure(doc: PromptDocument) -> list[Finding]:
    findings: list[Finding] = []

    if XML_TAG_PATTERN.search(doc.text) and MARKDOWN_HEADING_PATTERN.search(doc.text):
        findings.append(
            document_finding(
                "mixed-conventions",
                "Mixed XML and Markdown formatting detected. Consider using a consistent "
                "convention throughout.",
                Severity.HINT,
                ANALYZER,
            )
        )

    open_tags = Counter(match.lower() for match in OPEN_TAG_PATTERN.findall(doc.text))
    close_tags = Counter(match.lower() for match in CLOSE_TAG_PATTERN.findall(doc.text))

    for tag, count in open_tags.items():
        close_count = close_tags.get(tag, 0)
        if count != close_count:
            findings.append(
                document_finding(
                    "unclosed-tag",
                    f"Mismatched XML tag: <{tag}> appears {count} time(s), </{tag}> appears "
                    f"{close_count} time(s).",
                    Severity.WARNING,
                    ANALYZER,
                )
            )

    return findings
