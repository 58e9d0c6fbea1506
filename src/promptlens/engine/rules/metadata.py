"""Category-aware validation of the metadata header."""

import re

from ...models.enums import DocumentCategory, Severity
from ...models.findings import Finding
from ..core.constants import (
    HEADER_REQUIRED_CATEGORIES,
    KNOWN_HEADER_FIELDS,
    RECOMMENDED_HEADER_FIELDS,
    REQUIRED_HEADER_FIELDS,
    SKILL_DESCRIPTION_MAX_LENGTH,
    SKILL_NAME_MAX_LENGTH,
    SKILL_NAME_PATTERN,
)
from ..core.document import PromptDocument
from .base import document_finding, line_finding

ANALYZER = "metadata-validation"

_KEY_LINE_PATTERN = re.compile(r"^\s*([^\s:#][^:]*?)\s*:")


def _field_line(doc: PromptDocument, field_name: str) -> int:
    """Line of a top-level header key, or the opening delimiter line."""
    header_range = doc.header_range
    if header_range is None:
        return 0
    for index in range(header_range.start_line + 1, header_range.end_line):
        match = _KEY_LINE_PATTERN.match(doc.lines[index])
        if match and match.group(1).strip("'\"") == field_name:
            return index
    return header_range.start_line


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _skill_field_shapes(doc: PromptDocument, header: dict) -> list[Finding]:
    findings: list[Finding] = []

    name = header.get("name")
    if isinstance(name, str) and name.strip():
        line = _field_line(doc, "name")
        if len(name) > SKILL_NAME_MAX_LENGTH:
            findings.append(
                line_finding(
                    doc,
                    "skill-name-too-long",
                    f"Skill name is {len(name)} characters; the maximum is "
                    f"{SKILL_NAME_MAX_LENGTH}.",
                    Severity.ERROR,
                    ANALYZER,
                    line,
                )
            )
        if not SKILL_NAME_PATTERN.match(name):
            findings.append(
                line_finding(
                    doc,
                    "skill-invalid-name",
                    f"Skill name '{name}' must use lowercase letters, digits and single "
                    "hyphens only.",
                    Severity.ERROR,
                    ANALYZER,
                    line,
                )
            )

    description = header.get("description")
    if isinstance(description, str) and len(description) > SKILL_DESCRIPTION_MAX_LENGTH:
        findings.append(
            line_finding(
                doc,
                "skill-description-too-long",
                f"Skill description is {len(description)} characters; the maximum is "
                f"{SKILL_DESCRIPTION_MAX_LENGTH}.",
                Severity.WARNING,
                ANALYZER,
                _field_line(doc, "description"),
            )
        )

    return findings


def check_metadata(doc: PromptDocument) -> list[Finding]:
    """Validate the metadata header against the rules of the document category."""
    category = doc.category
    known_fields = KNOWN_HEADER_FIELDS.get(category)
    if known_fields is None:
        return []

    if doc.header_range is None:
        if category in HEADER_REQUIRED_CATEGORIES:
            return [
                document_finding(
                    f"{category}-missing-frontmatter",
                    f"{category.capitalize()} files must start with a metadata header "
                    "declaring at least: " + ", ".join(REQUIRED_HEADER_FIELDS.get(category, ())),
                    Severity.ERROR,
                    ANALYZER,
                    suggestion="---\nname: \ndescription: \n---\n",
                )
            ]
        if category in REQUIRED_HEADER_FIELDS:
            return [
                document_finding(
                    f"{category}-missing-{field_name.lower()}",
                    f"{category.capitalize()} files should declare '{field_name}' in a "
                    "metadata header.",
                    Severity.WARNING,
                    ANALYZER,
                )
                for field_name in REQUIRED_HEADER_FIELDS[category]
            ]
        return []

    header = doc.header
    if header is None:
        # Range only: the block did not decode to a mapping; field checks are skipped
        return [
            line_finding(
                doc,
                "invalid-frontmatter",
                "Metadata header could not be parsed as a YAML mapping. Field checks skipped.",
                Severity.WARNING,
                ANALYZER,
                doc.header_range.start_line,
            )
        ]

    findings: list[Finding] = []
    opening_line = doc.header_range.start_line

    for field_name in REQUIRED_HEADER_FIELDS.get(category, ()):
        if _is_blank(header.get(field_name)):
            findings.append(
                line_finding(
                    doc,
                    f"{category}-missing-{field_name.lower()}",
                    f"{category.capitalize()} metadata is missing required field "
                    f"'{field_name}'.",
                    Severity.ERROR if category == DocumentCategory.SKILL else Severity.WARNING,
                    ANALYZER,
                    opening_line,
                )
            )

    for field_name in RECOMMENDED_HEADER_FIELDS.get(category, ()):
        if _is_blank(header.get(field_name)):
            findings.append(
                line_finding(
                    doc,
                    f"{category}-missing-{field_name.lower()}",
                    f"{category.capitalize()} metadata has no '{field_name}'; consider "
                    "declaring it.",
                    Severity.INFO,
                    ANALYZER,
                    opening_line,
                )
            )

    if category == DocumentCategory.SKILL:
        findings.extend(_skill_field_shapes(doc, header))

    for key in header:
        if str(key) not in known_fields:
            findings.append(
                line_finding(
                    doc,
                    "unknown-frontmatter-field",
                    f"Unknown metadata field '{key}' for {category} files. Known fields: "
                    + ", ".join(sorted(known_fields)),
                    Severity.WARNING,
                    ANALYZER,
                    _field_line(doc, str(key)),
                )
            )

    return findings
