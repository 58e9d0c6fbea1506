"""Composition link reachability.

The only static rule that touches the filesystem, through the injected
``FileAccess`` probe.
"""

import logging

from ...models.enums import Severity
from ...models.findings import Finding
from ...services.file_access import FileAccess
from ..core.document import PromptDocument
from .base import span_finding

logger = logging.getLogger(__name__)

ANALYZER = "composition-links"


async def check_links(doc: PromptDocument, files: FileAccess) -> list[Finding]:
    """Report links that could not be resolved or whose file cannot be found."""
    findings: list[Finding] = []

    for link in doc.links:
        if link.resolved_path is None:
            findings.append(
                span_finding(
                    "composition-link-unresolved",
                    f"Linked prompt '{link.target}' could not be resolved. Links must be "
                    "relative paths inside the workspace.",
                    Severity.WARNING,
                    ANALYZER,
                    link.line,
                    link.target_start_column,
                    link.target_end_column,
                )
            )
            continue

        try:
            exists = await files.exists(link.resolved_path)
        except OSError as e:
            logger.debug(f"Existence probe failed for {link.resolved_path}: {e}")
            exists = False

        if not exists:
            findings.append(
                span_finding(
                    "composition-link-missing",
                    f"Linked prompt '{link.target}' was not found at {link.resolved_path}.",
                    Severity.ERROR,
                    ANALYZER,
                    link.line,
                    link.target_start_column,
                    link.target_end_column,
                )
            )

    return findings
