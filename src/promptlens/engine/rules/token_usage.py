"""Token budget estimation.

Not part of the quick profile: counting with tiktoken costs more than a
keystroke should.
"""

import re

from ...models.enums import Severity
from ...models.findings import Finding
from ..core.document import PromptDocument
from ..core.tokens import get_token_info
from .base import document_finding, span_finding

ANALYZER = "token-analysis"

LARGE_PROMPT_TOKENS = 2000
BUDGET_WARNING_TOKENS = 4000
HEAVY_SECTION_MIN_TOKENS = 1000
HEAVY_SECTION_RATIO = 0.4
MAX_EMOJI = 10

EMOJI_PATTERN = re.compile("[\U0001F300-\U0001F9FF]|[\u2600-\u26FF]")
POORLY_TOKENIZED_PATTERNS = (
    re.compile(r"[A-Z]{10,}"),  # long acronyms
    re.compile(r"\w{20,}"),  # very long words
    re.compile(r"\d{10,}"),  # long numbers
)


def check_token_usage(doc: PromptDocument, target_model: str = "gpt-4") -> list[Finding]:
    findings: list[Finding] = []
    info = get_token_info(doc, target_model)
    total = info.total_tokens

    if info.budget_warning:
        findings.append(
            document_finding(
                "token-budget",
                info.budget_warning,
                Severity.WARNING if total > BUDGET_WARNING_TOKENS else Severity.INFO,
                ANALYZER,
            )
        )

    if total > LARGE_PROMPT_TOKENS:
        findings.append(
            document_finding(
                "large-prompt",
                f"Prompt uses {total} tokens. This is a large prompt. Leave room for your "
                "model's response and context window limits.",
                Severity.INFO,
                ANALYZER,
            )
        )

    emoji_count = len(EMOJI_PATTERN.findall(doc.text))
    if emoji_count > MAX_EMOJI:
        findings.append(
            document_finding(
                "emoji-tokens",
                f"{emoji_count} emojis detected. Emojis can use multiple tokens each. Consider "
                "reducing if token budget is tight.",
                Severity.HINT,
                ANALYZER,
            )
        )

    for pattern in POORLY_TOKENIZED_PATTERNS:
        for index, line in enumerate(doc.lines):
            for match in pattern.finditer(line):
                findings.append(
                    span_finding(
                        "inefficient-tokenization",
                        f'"{match.group(0)[:20]}..." may tokenize inefficiently. Consider '
                        "breaking up or abbreviating.",
                        Severity.HINT,
                        ANALYZER,
                        index,
                        match.start(),
                        match.end(),
                    )
                )

    if total > HEAVY_SECTION_MIN_TOKENS and info.section_tokens:
        heaviest = max(range(len(info.section_tokens)), key=info.section_tokens.__getitem__)
        tokens = info.section_tokens[heaviest]
        if tokens > total * HEAVY_SECTION_RATIO:
            section = doc.sections[heaviest]
            findings.append(
                span_finding(
                    "heavy-section",
                    f'Section "{section.name}" uses {tokens} tokens '
                    f"({round(tokens / total * 100)}% of prompt). Consider condensing.",
                    Severity.INFO,
                    ANALYZER,
                    section.start_line,
                    0,
                    doc.line_length(section.start_line),
                )
            )

    return findings
