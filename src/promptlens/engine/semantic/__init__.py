"""Language-model analysis for the engine.

This package contains:
- prompts: request templates and data delimiters
- decode: defensive JSON decoding into validated models
- gather: tolerant concurrent join
- analyzer: SemanticAnalyzer and response-to-finding mapping
"""

from .analyzer import (
    ANALYSIS_FAILED,
    CompletionFn,
    SemanticAnalyzer,
    find_line_number,
    map_combined_response,
    map_composition_response,
)
from .decode import Decoded, DecodeFailure, decode_response, extract_json_payload
from .gather import Failure, Success, gather_settled
from .prompts import (
    DOCUMENT_CLOSE,
    DOCUMENT_OPEN,
    SYSTEM_PROMPT,
    build_combined_prompt,
    build_composition_prompt,
    strip_delimiters,
)

__all__ = [
    # Analyzer
    "ANALYSIS_FAILED",
    "CompletionFn",
    "SemanticAnalyzer",
    "find_line_number",
    "map_combined_response",
    "map_composition_response",
    # Decode
    "Decoded",
    "DecodeFailure",
    "decode_response",
    "extract_json_payload",
    # Join
    "Success",
    "Failure",
    "gather_settled",
    # Prompts
    "DOCUMENT_OPEN",
    "DOCUMENT_CLOSE",
    "SYSTEM_PROMPT",
    "build_combined_prompt",
    "build_composition_prompt",
    "strip_delimiters",
]
