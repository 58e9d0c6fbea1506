"""Document data structures for the analysis engine.

A ``PromptDocument`` is derived from one text snapshot and never changes
afterwards; editing the text means parsing a new document.
"""

from dataclasses import dataclass, field
from typing import Any

from ...models.enums import DocumentCategory


@dataclass(frozen=True)
class Section:
    """A markdown section.

    Attributes:
        name: Heading text (without the leading ``#`` markers)
        start_line: Line of the heading (0-indexed)
        end_line: Last line of the section (0-indexed, inclusive): the line
            before the next heading, or the last document line
    """

    name: str
    start_line: int
    end_line: int


@dataclass(frozen=True)
class HeaderRange:
    """Line range of the metadata header, delimiters included."""

    start_line: int
    end_line: int


@dataclass(frozen=True)
class CompositionLink:
    """A markdown link to another prompt document.

    Attributes:
        target: Link path text with any ``#anchor`` removed
        resolved_path: Absolute path, or None when the target could not be
            resolved safely
        line: Line of the link (0-indexed)
        column: Start column of the whole ``[label](target)`` construct
        end_column: End column (exclusive) of the whole construct
        target_start_column: Start column of the text inside the parentheses
        target_end_column: End column (exclusive) of that text
    """

    target: str
    resolved_path: str | None
    line: int
    column: int
    end_column: int
    target_start_column: int
    target_end_column: int


@dataclass(frozen=True)
class PromptDocument:
    """Structured view of one prompt document snapshot.

    Attributes:
        identifier: Opaque document identifier (file URI or path)
        text: Raw text
        lines: ``text`` split on newlines
        category: Document kind inferred from the identifier
        header: Parsed metadata header, None if missing or malformed
        header_range: Header line range; kept even when decoding failed
        sections: Sections in document order
        placeholders: Placeholder name -> line numbers, in order of occurrence
        links: Composition links in document order
    """

    identifier: str
    text: str
    lines: list[str]
    category: DocumentCategory = DocumentCategory.UNKNOWN
    header: dict[str, Any] | None = None
    header_range: HeaderRange | None = None
    sections: list[Section] = field(default_factory=list)
    placeholders: dict[str, list[int]] = field(default_factory=dict)
    links: list[CompositionLink] = field(default_factory=list)

    @property
    def body_text(self) -> str:
        """Text with the metadata header block removed."""
        if self.header_range is None:
            return self.text
        return "\n".join(self.lines[self.header_range.end_line + 1 :])

    def line_length(self, line: int) -> int:
        if 0 <= line < len(self.lines):
            return len(self.lines[line])
        return 0
