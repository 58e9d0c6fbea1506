"""Redundancy detection: repeated and subsumed instructions."""

import re

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.document import PromptDocument
from .base import line_finding

ANALYZER = "redundancy-detection"

INSTRUCTION_PATTERN = re.compile(
    r"\b(must|should|always|never|avoid|do not|don't)\s+([^.!?]+)", re.IGNORECASE
)
NEVER_PATTERN = re.compile(r"never\s+([^.!?]+)", re.IGNORECASE)
AVOID_PATTERN = re.compile(r"avoid\s+([^.!?]+)", re.IGNORECASE)

# Clauses this short are too generic to call duplicates
MIN_CLAUSE_LENGTH = 10
# Prefix compared when deciding whether "never X" covers "avoid X"
SUBSUMPTION_PREFIX = 20


def normalize_clause(clause: str) -> str:
    return re.sub(r"\s+", " ", clause.lower().strip())


def _duplicates(doc: PromptDocument) -> list[Finding]:
    occurrences: dict[str, list[int]] = {}
    for index, line in enumerate(doc.lines):
        for match in INSTRUCTION_PATTERN.finditer(line):
            clause = normalize_clause(match.group(2))
            if len(clause) > MIN_CLAUSE_LENGTH:
                occurrences.setdefault(clause, []).append(index)

    findings: list[Finding] = []
    for lines in occurrences.values():
        if len(lines) < 2:
            continue
        listed = ", ".join(str(line + 1) for line in lines)
        findings.append(
            line_finding(
                doc,
                "redundant-instruction",
                f"Similar instruction appears {len(lines)} times (lines {listed}). "
                "Consider consolidating.",
                Severity.INFO,
                ANALYZER,
                lines[0],
            )
        )
    return findings


def _subsumed(doc: PromptDocument) -> list[Finding]:
    never_clauses: list[tuple[str, int]] = []
    avoid_clauses: list[tuple[str, int]] = []
    for index, line in enumerate(doc.lines):
        match = NEVER_PATTERN.search(line)
        if match:
            never_clauses.append((match.group(1).lower(), index))
        match = AVOID_PATTERN.search(line)
        if match:
            avoid_clauses.append((match.group(1).lower(), index))

    findings: list[Finding] = []
    for avoid_text, avoid_line in avoid_clauses:
        for never_text, never_line in never_clauses:
            if (
                never_text[:SUBSUMPTION_PREFIX] in avoid_text
                or avoid_text[:SUBSUMPTION_PREFIX] in never_text
            ):
                findings.append(
                    line_finding(
                        doc,
                        "subsumed-constraint",
                        f'"Avoid" on line {avoid_line + 1} may be subsumed by "Never" on line '
                        f"{never_line + 1}. Consider removing the weaker constraint.",
                        Severity.HINT,
                        ANALYZER,
                        avoid_line,
                    )
                )
                break
    return findings


def check_redundancy(doc: PromptDocument) -> list[Finding]:
    return _duplicates(doc) + _subsumed(doc)
