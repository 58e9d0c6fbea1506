"""Parsing of raw prompt text into a ``PromptDocument``.

Parsing never raises for document content: an unclosed or invalid
metadata header degrades to "no header", and links whose targets cannot
be resolved safely keep ``resolved_path=None``.
"""

import logging
import os
import re
from typing import Any
from urllib.parse import unquote, urlparse

import yaml

from ...models.enums import DocumentCategory
from .document import CompositionLink, HeaderRange, PromptDocument, Section

logger = logging.getLogger(__name__)

HEADER_DELIMITER = "---"

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

# Exact basenames take precedence over suffixes
BASENAME_CATEGORIES = {
    "agents.md": DocumentCategory.AGENTS_MD,
    "copilot-instructions.md": DocumentCategory.COPILOT_INSTRUCTIONS,
    "skill.md": DocumentCategory.SKILL,
}

SUFFIX_CATEGORIES = (
    (".agent.md", DocumentCategory.AGENT),
    (".prompt.md", DocumentCategory.PROMPT),
    (".system.md", DocumentCategory.SYSTEM),
    (".instructions.md", DocumentCategory.INSTRUCTIONS),
)

SKILL_DIR_PATTERNS = (
    re.compile(r"(^|[\\/])\.?(github|claude)[\\/]skills[\\/]"),
    re.compile(r"(^|[\\/])skills[\\/]"),
)

_EXTERNAL_SCHEME = re.compile(r"^(https?:|mailto:)", re.IGNORECASE)
_ANY_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_TITLED_TARGET = re.compile(r"""^(\S+)(?:\s+['"][^'"]*['"])?$""")


# =============================================================================
# CLASSIFICATION
# =============================================================================


def _basename(path: str) -> str:
    return re.split(r"[\\/]", path)[-1]


def is_skill_markdown_path(target: str) -> bool:
    """Check if a lower-cased path is a markdown file inside a skills directory."""
    if not target.endswith(".md"):
        return False
    return any(pattern.search(target) for pattern in SKILL_DIR_PATTERNS)


def classify(identifier: str) -> DocumentCategory:
    """Infer the document category from its identifier.

    Matching is case-insensitive and checks exact basenames, then suffixes,
    then skill-directory containment.
    """
    lower = identifier.lower()
    category = BASENAME_CATEGORIES.get(_basename(lower))
    if category is not None:
        return category
    for suffix, suffix_category in SUFFIX_CATEGORIES:
        if lower.endswith(suffix):
            return suffix_category
    if is_skill_markdown_path(lower):
        return DocumentCategory.SKILL
    return DocumentCategory.UNKNOWN


def is_prompt_file(target: str) -> bool:
    """Check if a link target looks like a prompt document."""
    return classify(target) != DocumentCategory.UNKNOWN


# =============================================================================
# METADATA HEADER
# =============================================================================


def parse_header(lines: list[str]) -> tuple[dict[str, Any] | None, HeaderRange | None]:
    """Parse a leading YAML metadata block.

    Returns:
        Tuple of (header, header_range):
        - no opening delimiter or no closing delimiter: (None, None)
        - block present but not a YAML mapping: (None, range)
        - valid mapping: (mapping, range)
    """
    if not lines or lines[0].strip() != HEADER_DELIMITER:
        return None, None

    end_line = -1
    for index in range(1, len(lines)):
        if lines[index].strip() == HEADER_DELIMITER:
            end_line = index
            break

    if end_line == -1:
        return None, None

    header_range = HeaderRange(start_line=0, end_line=end_line)
    block = "\n".join(lines[1:end_line])

    try:
        parsed = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.debug(f"Metadata header is not valid YAML: {e}")
        return None, header_range

    if isinstance(parsed, dict):
        return parsed, header_range
    return None, header_range


# =============================================================================
# SECTIONS AND PLACEHOLDERS
# =============================================================================


def extract_sections(lines: list[str]) -> list[Section]:
    """Collect markdown sections; each ends on the line before the next heading."""
    sections: list[Section] = []
    current: tuple[str, int] | None = None

    for index, line in enumerate(lines):
        match = HEADING_PATTERN.match(line)
        if not match:
            continue
        if current is not None:
            sections.append(Section(name=current[0], start_line=current[1], end_line=index - 1))
        current = (match.group(2), index)

    if current is not None:
        sections.append(Section(name=current[0], start_line=current[1], end_line=len(lines) - 1))

    return sections


def extract_placeholders(lines: list[str]) -> dict[str, list[int]]:
    """Map each ``{{name}}`` placeholder to the lines it occurs on."""
    placeholders: dict[str, list[int]] = {}
    for index, line in enumerate(lines):
        for match in PLACEHOLDER_PATTERN.finditer(line):
            placeholders.setdefault(match.group(1), []).append(index)
    return placeholders


# =============================================================================
# LINKS
# =============================================================================


def file_uri_to_path(uri: str) -> str | None:
    """Convert a ``file://`` URI to a local path, or None if it is not one."""
    parsed = urlparse(uri)
    if parsed.scheme.lower() != "file":
        return None
    if parsed.netloc and parsed.netloc != "localhost":
        return None
    path = unquote(parsed.path)
    # file:///C:/dir -> C:/dir
    if re.match(r"^/[A-Za-z]:[\\/]", path):
        path = path[1:]
    return path or None


def document_dir(identifier: str, workspace_root: str | None = None) -> str | None:
    """Directory links in a document are resolved against.

    A file URI or absolute path gives its own directory. A relative
    identifier is anchored under the workspace root when one is given.
    Anything else has no location on disk.
    """
    if _ANY_SCHEME.match(identifier) or identifier.lower().startswith("file:"):
        path = file_uri_to_path(identifier)
        return os.path.dirname(path) if path else None
    if os.path.isabs(identifier):
        return os.path.dirname(identifier)
    if re.match(r"^[a-z][a-z0-9+.-]*:", identifier, re.IGNORECASE):
        # untitled:Untitled-1 and similar non-file identifiers
        return None
    if workspace_root:
        return os.path.dirname(os.path.join(workspace_root, identifier))
    return None


def normalize_link_target(raw_target: str) -> str | None:
    """Clean raw markdown link text.

    Strips ``<...>`` wrapping and a trailing quoted title. Returns None for
    empty, anchor-only and external (network scheme) targets.
    """
    cleaned = raw_target.strip()

    if cleaned.startswith("<") and cleaned.endswith(">"):
        cleaned = cleaned[1:-1].strip()

    if not cleaned or cleaned.startswith("#"):
        return None

    if _EXTERNAL_SCHEME.match(cleaned):
        return None
    if _ANY_SCHEME.match(cleaned) and not cleaned.lower().startswith("file://"):
        return None

    match = _TITLED_TARGET.match(cleaned)
    return match.group(1) if match else cleaned


def _is_within_directory(path: str, directory: str) -> bool:
    normalized_path = os.path.normpath(os.path.abspath(path))
    normalized_dir = os.path.normpath(os.path.abspath(directory))
    return normalized_path == normalized_dir or normalized_path.startswith(
        normalized_dir.rstrip(os.sep) + os.sep
    )


def resolve_link(
    target: str,
    doc_dir: str | None,
    workspace_root: str | None = None,
) -> str | None:
    """Resolve a link target to an absolute path, or None if unsafe.

    With a workspace root, anything resolving outside it is rejected,
    absolute targets and ``..`` traversal included. Without one, absolute
    targets are rejected and only relative targets are resolved.
    """
    target = target.split("#", 1)[0]
    if not target or not doc_dir:
        return None

    is_absolute_target = False
    if target.lower().startswith("file:"):
        path = file_uri_to_path(target)
        if path is None:
            return None
        resolved = os.path.normpath(path)
        is_absolute_target = True
    elif os.path.isabs(target):
        resolved = os.path.normpath(target)
        is_absolute_target = True
    else:
        resolved = os.path.normpath(os.path.join(doc_dir, target))

    if workspace_root:
        if not _is_within_directory(resolved, workspace_root):
            logger.debug(f"Link target outside workspace rejected: {target}")
            return None
    elif is_absolute_target:
        logger.debug(f"Absolute link target rejected without workspace root: {target}")
        return None

    return os.path.abspath(resolved)


def extract_links(
    lines: list[str],
    doc_dir: str | None,
    workspace_root: str | None = None,
) -> list[CompositionLink]:
    """Collect links whose targets look like prompt documents."""
    links: list[CompositionLink] = []

    for index, line in enumerate(lines):
        for match in LINK_PATTERN.finditer(line):
            raw_target = match.group(2)
            target = normalize_link_target(raw_target)
            if not target:
                continue

            target = target.split("#", 1)[0]
            if not target or not is_prompt_file(target):
                continue

            target_start = match.start(2)
            links.append(
                CompositionLink(
                    target=target,
                    resolved_path=resolve_link(target, doc_dir, workspace_root),
                    line=index,
                    column=match.start(),
                    end_column=match.end(),
                    target_start_column=target_start,
                    target_end_column=target_start + len(raw_target),
                )
            )

    return links


# =============================================================================
# DOCUMENT
# =============================================================================


def parse_document(
    text: str,
    identifier: str,
    workspace_root: str | None = None,
) -> PromptDocument:
    """Parse a text snapshot into a ``PromptDocument``.

    Args:
        text: Raw document text
        identifier: Document identifier (file URI or path)
        workspace_root: Optional root directory that links must stay inside

    Returns:
        The structured document
    """
    lines = text.split("\n")
    header, header_range = parse_header(lines)

    return PromptDocument(
        identifier=identifier,
        text=text,
        lines=lines,
        category=classify(identifier),
        header=header,
        header_range=header_range,
        sections=extract_sections(lines),
        placeholders=extract_placeholders(lines),
        links=extract_links(lines, document_dir(identifier, workspace_root), workspace_root),
    )
