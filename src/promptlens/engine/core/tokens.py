"""Token counting utilities.

Counts tokens with tiktoken (cl100k_base, GPT-4/Claude compatible) and
falls back to a four-characters-per-token estimate when the encoding
cannot be loaded, e.g. offline without a cached BPE file.
"""

import logging
import math
from dataclasses import dataclass, field

import tiktoken

from .document import PromptDocument

logger = logging.getLogger(__name__)

# Context window sizes of well-known models (tokens)
CONTEXT_WINDOWS: dict[str, int] = {
    "gpt-3.5-turbo": 4096,
    "gpt-4": 8192,
    "gpt-4-32k": 32768,
    "gpt-4-turbo": 128000,
    "gpt-4o": 128000,
    "claude-2": 100000,
    "claude-3-sonnet": 200000,
    "claude-3-opus": 200000,
    "claude-3-haiku": 200000,
}
DEFAULT_CONTEXT_WINDOW = 8192

# Budget thresholds as a share of the context window
BUDGET_CRITICAL_RATIO = 0.9
BUDGET_NOTICE_RATIO = 0.5

_encoding: tiktoken.Encoding | None = None
_encoding_failed = False


def get_encoder() -> tiktoken.Encoding | None:
    """Get or create the tiktoken encoder (lazy initialization).

    Returns:
        The cl100k_base encoding, or None if it could not be loaded
    """
    global _encoding, _encoding_failed
    if _encoding is None and not _encoding_failed:
        try:
            _encoding = tiktoken.get_encoding("cl100k_base")
        except Exception as e:
            _encoding_failed = True
            logger.warning(f"tiktoken encoding unavailable, estimating tokens: {e}")
    return _encoding


def estimate_tokens(text: str) -> int:
    """Estimate tokens at ~4 characters per token."""
    return math.ceil(len(text) / 4)


def count_tokens(text: str) -> int:
    """Count tokens in text.

    Args:
        text: Text to count tokens for

    Returns:
        Number of tokens (exact with tiktoken, estimated otherwise)
    """
    encoder = get_encoder()
    if encoder is None:
        return estimate_tokens(text)
    return len(encoder.encode(text, disallowed_special=()))


def context_window_for(model: str) -> int:
    return CONTEXT_WINDOWS.get(model, DEFAULT_CONTEXT_WINDOW)


@dataclass
class TokenInfo:
    """Token usage of a document.

    Attributes:
        total_tokens: Tokens in the whole document
        section_tokens: Tokens per section, aligned with ``doc.sections``
        context_window: Context window of the target model
        budget_warning: Usage message once the document passes half the window
    """

    total_tokens: int
    section_tokens: list[int] = field(default_factory=list)
    context_window: int = DEFAULT_CONTEXT_WINDOW
    budget_warning: str | None = None


def get_token_info(doc: PromptDocument, target_model: str = "gpt-4") -> TokenInfo:
    """Compute total and per-section token counts plus a budget warning."""
    total = count_tokens(doc.text)
    section_tokens = [
        count_tokens("\n".join(doc.lines[section.start_line : section.end_line + 1]))
        for section in doc.sections
    ]

    window = context_window_for(target_model)
    percent = round(total / window * 100)
    budget_warning = None
    if total > window * BUDGET_CRITICAL_RATIO:
        budget_warning = (
            f"Prompt uses {total} tokens ({percent}% of {target_model} context window). "
            "Leave room for response!"
        )
    elif total > window * BUDGET_NOTICE_RATIO:
        budget_warning = f"Prompt uses {total} tokens ({percent}% of context window)"

    return TokenInfo(
        total_tokens=total,
        section_tokens=section_tokens,
        context_window=window,
        budget_warning=budget_warning,
    )
