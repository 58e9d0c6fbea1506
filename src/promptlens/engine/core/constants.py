"""Vocabulary used by the static rules.

This module contains the phrase lists and tables the rules match against:
- Instruction strength vocabulary and stronger-language suggestions
- Critical/safety keywords
- Ambiguity vocabulary
- Known jailbreak phrases and user-input placeholder names
- Metadata header field lists per document category
"""

import re

from ...models.enums import DocumentCategory

# ---------------------------------------------------------------------------
# Instruction strength. Phrases are matched case-insensitively on word
# boundaries. Weak phrasing is what models follow least reliably.
# ---------------------------------------------------------------------------
STRENGTH_PATTERNS: dict[str, tuple[str, ...]] = {
    "strong": (
        "never",
        "must",
        "always",
        "under no circumstances",
        "absolutely",
        "required",
        "mandatory",
        "forbidden",
        "prohibited",
    ),
    "medium": (
        "should",
        "avoid",
        "prefer",
        "recommended",
        "expected",
        "generally",
        "typically",
    ),
    "weak": (
        "try to",
        "consider",
        "when appropriate",
        "if possible",
        "might",
        "could",
        "may want to",
        "optionally",
    ),
}

# Replacement offered for each weak phrase
WEAK_PHRASE_SUGGESTIONS: dict[str, str] = {
    "try to": "Always",
    "consider": "Must",
    "when appropriate": "Always",
    "if possible": "Must",
    "might": "Will",
    "could": "Must",
    "may want to": "Must",
    "optionally": "Always",
}
DEFAULT_STRONGER_PHRASE = "Must"

# Weak phrasing on a line with any of these is escalated
CRITICAL_KEYWORDS = (
    "safety",
    "security",
    "harmful",
    "refuse",
    "reject",
    "never",
    "forbidden",
    "prohibited",
    "dangerous",
    "illegal",
)

# Safety constraints early in a long prompt lose to recency bias
SAFETY_POSITION_KEYWORDS = ("safety", "harmful", "refuse", "reject", "forbidden", "prohibited")
SAFETY_POSITION_RATIO = 0.3
SAFETY_POSITION_MIN_LINES = 10

# More constraint lines than this dilute each other
MAX_CONSTRAINT_LINES = 15

# ---------------------------------------------------------------------------
# Ambiguity
# ---------------------------------------------------------------------------
AMBIGUOUS_QUANTIFIERS = (
    "a few",
    "some",
    "sometimes",
    "occasionally",
    "often",
    "many",
    "several",
    "various",
    "numerous",
)

# Flagged in "be X" / "in a X" constructions
VAGUE_TERMS = (
    "appropriate",
    "professional",
    "good",
    "bad",
    "nice",
    "proper",
    "suitable",
    "reasonable",
    "adequate",
)

UNRESOLVED_REFERENCE_PATTERNS = (
    re.compile(
        r"\b(mentioned|described|shown|listed|given)\s+(above|below|earlier|previously|before)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\bthe\s+(above|below|following|preceding)\s+"
        r"(format|example|instructions?|rules?|guidelines?)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\bsee\s+(above|below)\b", re.IGNORECASE),
    re.compile(r"\bas\s+(mentioned|described|stated)\b", re.IGNORECASE),
)

# ---------------------------------------------------------------------------
# Placeholders. These are conventionally supplied by the runtime and are
# never reported as undefined.
# ---------------------------------------------------------------------------
COMMON_CONTEXT_VARIABLES = frozenset(
    {
        "user_input",
        "user_name",
        "context",
        "input",
        "query",
        "message",
        "date",
        "time",
        "user",
    }
)

# ---------------------------------------------------------------------------
# Injection surface
# ---------------------------------------------------------------------------
USER_INPUT_PLACEHOLDER_PATTERN = re.compile(
    r"\{\{(user_input|user_message|input|query|message|user_query)\}\}", re.IGNORECASE
)

INJECTION_PATTERNS = (
    re.compile(r"ignore\s+(previous|all|above)\s+(instructions?|prompts?)", re.IGNORECASE),
    re.compile(r"disregard\s+(previous|all|above)", re.IGNORECASE),
    re.compile(r"new\s+instructions?:", re.IGNORECASE),
    re.compile(r"system\s*:\s*", re.IGNORECASE),
    re.compile(r"\[INST\]", re.IGNORECASE),
    re.compile(r"<<SYS>>", re.IGNORECASE),
    re.compile(r"pretend\s+(you\s+are|to\s+be)", re.IGNORECASE),
    re.compile(r"roleplay\s+as", re.IGNORECASE),
    re.compile(r"act\s+as\s+if", re.IGNORECASE),
    re.compile(r"jailbreak", re.IGNORECASE),
    re.compile(r"DAN\s+mode", re.IGNORECASE),
)

INPUT_DELIMITERS = ("<user_input>", "```user", "---USER INPUT---", "<input>")

# ---------------------------------------------------------------------------
# Metadata header fields per category. Categories missing from
# KNOWN_HEADER_FIELDS get no header checks.
# ---------------------------------------------------------------------------
KNOWN_HEADER_FIELDS: dict[DocumentCategory, frozenset[str]] = {
    DocumentCategory.AGENT: frozenset(
        {
            "name",
            "description",
            "tools",
            "model",
            "target",
            "handoffs",
            "argument-hint",
            "mcp-servers",
        }
    ),
    DocumentCategory.PROMPT: frozenset(
        {"name", "description", "mode", "agent", "model", "tools", "argument-hint"}
    ),
    DocumentCategory.INSTRUCTIONS: frozenset({"name", "description", "applyTo"}),
    DocumentCategory.SKILL: frozenset(
        {"name", "description", "license", "allowed-tools", "metadata", "compatibility"}
    ),
}

REQUIRED_HEADER_FIELDS: dict[DocumentCategory, tuple[str, ...]] = {
    DocumentCategory.AGENT: ("description",),
    DocumentCategory.SKILL: ("name", "description"),
}

# Missing but recommended: reported as info
RECOMMENDED_HEADER_FIELDS: dict[DocumentCategory, tuple[str, ...]] = {
    DocumentCategory.INSTRUCTIONS: ("applyTo",),
}

# Categories whose documents must start with a header
HEADER_REQUIRED_CATEGORIES = frozenset({DocumentCategory.SKILL})

SKILL_NAME_MAX_LENGTH = 64
SKILL_DESCRIPTION_MAX_LENGTH = 1024
SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
