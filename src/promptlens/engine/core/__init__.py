"""Engine core module.

This module contains core utilities and data structures for the engine:
- Document data structures
- Parsing of raw text into documents
- Token counting
- Rule vocabulary
"""

from .document import CompositionLink, HeaderRange, PromptDocument, Section
from .parsing import (
    classify,
    document_dir,
    extract_links,
    extract_placeholders,
    extract_sections,
    is_prompt_file,
    is_skill_markdown_path,
    normalize_link_target,
    parse_document,
    parse_header,
    resolve_link,
)
from .tokens import CONTEXT_WINDOWS, TokenInfo, count_tokens, get_encoder, get_token_info

__all__ = [
    # Document structures
    "PromptDocument",
    "Section",
    "HeaderRange",
    "CompositionLink",
    # Parsing
    "parse_document",
    "classify",
    "parse_header",
    "extract_sections",
    "extract_placeholders",
    "extract_links",
    "normalize_link_target",
    "resolve_link",
    "document_dir",
    "is_prompt_file",
    "is_skill_markdown_path",
    # Token utilities
    "CONTEXT_WINDOWS",
    "TokenInfo",
    "count_tokens",
    "get_encoder",
    "get_token_info",
]
