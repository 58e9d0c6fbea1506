"""Static rules for the analysis engine.

This package contains one module per rule category:
- placeholders: undefined and empty {{placeholders}}
- strength: weak phrasing, safety positioning, constraint dilution
- injection: user-input interpolation and jailbreak phrases
- ambiguity: quantifiers, vague terms, dangling references
- structure: mixed conventions and unbalanced tags
- redundancy: repeated and subsumed instructions
- examples: example sufficiency
- metadata: category-aware header validation
- token_usage: token budget (full profile only)
- links: composition link reachability (full profile only, filesystem)

Two profiles are exposed:
- run_quick(doc): synchronous, no tokenizer and no filesystem access
- run_full(doc, files): quick rules plus token and link rules
"""

import logging

from ...models.findings import Finding
from ...services.file_access import FileAccess
from ..core.document import PromptDocument
from .ambiguity import check_ambiguity
from .base import Rule
from .examples import check_examples
from .injection import check_injection_surface
from .links import check_links
from .metadata import check_metadata
from .placeholders import check_placeholders
from .redundancy import check_redundancy
from .strength import check_instruction_strength, suggest_stronger_language
from .structure import check_structure
from .token_usage import check_token_usage

logger = logging.getLogger(__name__)

QUICK_RULES: tuple[Rule, ...] = (
    check_placeholders,
    check_instruction_strength,
    check_injection_surface,
    check_ambiguity,
    check_structure,
    check_redundancy,
    check_examples,
    check_metadata,
)


def run_quick(doc: PromptDocument) -> list[Finding]:
    """Run the quick profile."""
    findings: list[Finding] = []
    for rule in QUICK_RULES:
        findings.extend(rule(doc))
    return findings


async def run_full(
    doc: PromptDocument,
    files: FileAccess,
    target_model: str = "gpt-4",
) -> list[Finding]:
    """Run the full static profile: quick rules, token budget and link checks."""
    findings = run_quick(doc)
    findings.extend(check_token_usage(doc, target_model))
    findings.extend(await check_links(doc, files))
    logger.debug(f"Static analysis of {doc.identifier}: {len(findings)} findings")
    return findings


__all__ = [
    "Rule",
    "QUICK_RULES",
    "run_quick",
    "run_full",
    "check_placeholders",
    "check_instruction_strength",
    "check_injection_surface",
    "check_ambiguity",
    "check_structure",
    "check_redundancy",
    "check_examples",
    "check_metadata",
    "check_token_usage",
    "check_links",
    "suggest_stronger_language",
]
