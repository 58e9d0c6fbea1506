"""Base infrastructure for static rules.

Each rule is a pure function of a ``PromptDocument`` returning a list of
findings. Rules do not depend on each other or on execution order.
"""

import re
from collections.abc import Callable

from ...models.enums import Severity
from ...models.findings import DOCUMENT_START, Finding, Range
from ..core.document import PromptDocument

# Type alias for rule functions
Rule = Callable[[PromptDocument], list[Finding]]


def span_finding(
    code: str,
    message: str,
    severity: Severity,
    analyzer: str,
    line: int,
    start: int,
    end: int,
    suggestion: str | None = None,
) -> Finding:
    """Build a finding anchored to a span on one line."""
    return Finding(
        code=code,
        message=message,
        severity=severity,
        range=Range.on_line(line, start, end),
        analyzer=analyzer,
        suggestion=suggestion,
    )


def line_finding(
    doc: PromptDocument,
    code: str,
    message: str,
    severity: Severity,
    analyzer: str,
    line: int,
) -> Finding:
    """Build a finding covering a whole line."""
    return span_finding(code, message, severity, analyzer, line, 0, doc.line_length(line))


def document_finding(
    code: str,
    message: str,
    severity: Severity,
    analyzer: str,
    suggestion: str | None = None,
) -> Finding:
    """Build a finding about the document as a whole."""
    return Finding(
        code=code,
        message=message,
        severity=severity,
        range=DOCUMENT_START,
        analyzer=analyzer,
        suggestion=suggestion,
    )


def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Case-insensitive word-boundary pattern for a literal phrase."""
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)
