"""Analysis pipeline: parse, static rules, semantic pass, cache.

``AnalysisPipeline`` is the inbound surface of the engine. ``analyze_quick``
is synchronous and touches neither the filesystem nor the network.
``analyze`` runs the full static profile plus the semantic pass and caches
the result under a hash of the document text and category combined with
the resolution and text of every linked document, so editing a linked file
invalidates the entry for every document that links to it. Results whose
semantic pass failed outright are not cached.
"""

import logging

from ..config import Settings, settings as default_settings
from ..engine.core import PromptDocument, parse_document
from ..engine.rules import run_full, run_quick
from ..engine.semantic import ANALYSIS_FAILED, SemanticAnalyzer
from ..models.findings import Finding
from .file_access import FileAccess, LocalFileAccess
from .result_cache import ResultCache

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Runs the analysis profiles for document snapshots."""

    def __init__(
        self,
        cache: ResultCache | None = None,
        semantic: SemanticAnalyzer | None = None,
        files: FileAccess | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or default_settings
        self.files = files or LocalFileAccess()
        self.cache = cache or ResultCache(
            ttl_seconds=self.settings.cache_ttl_seconds,
            max_entries=self.settings.cache_max_entries,
        )
        self.semantic = semantic or SemanticAnalyzer(files=self.files, settings=self.settings)
        # identifier -> (text, workspace_root, document)
        self._parsed: dict[str, tuple[str, str | None, PromptDocument]] = {}

    def parse(
        self,
        text: str,
        identifier: str,
        workspace_root: str | None = None,
    ) -> PromptDocument:
        """Parse a snapshot, reusing the last parse of the same identifier and text."""
        cached = self._parsed.get(identifier)
        if cached is not None and cached[0] == text and cached[1] == workspace_root:
            return cached[2]
        doc = parse_document(text, identifier, workspace_root)
        self._parsed[identifier] = (text, workspace_root, doc)
        return doc

    def forget(self, identifier: str) -> None:
        self._parsed.pop(identifier, None)

    def analyze_quick(
        self,
        text: str,
        identifier: str,
        workspace_root: str | None = None,
    ) -> list[Finding]:
        """Run the quick profile. Synchronous; no I/O."""
        return run_quick(self.parse(text, identifier, workspace_root))

    async def compute_composite_hash(self, doc: PromptDocument) -> str:
        """Hash of everything the full profile reads.

        Covers the document text and category plus, for each link, its
        resolution state and the linked text when readable.
        """
        composite = f"{doc.text}\n\n--- category:{doc.category} ---"
        for link in doc.links:
            if link.resolved_path is None:
                composite += f"\n\n--- link:{link.target} -> <unresolved> ---"
                continue
            try:
                linked = await self.files.read_text(link.resolved_path)
            except (OSError, UnicodeDecodeError):
                linked = "<unreadable>"
            composite += f"\n\n--- link:{link.target} -> {link.resolved_path} ---\n{linked}"
        return self.cache.compute_hash(composite)

    async def analyze(
        self,
        text: str,
        identifier: str,
        workspace_root: str | None = None,
    ) -> list[Finding]:
        """Run the full pipeline, serving repeated content from the cache."""
        doc = self.parse(text, identifier, workspace_root)
        digest = await self.compute_composite_hash(doc)

        cached = self.cache.get(digest)
        if cached is not None:
            logger.info(f"Cache hit for {identifier} ({len(cached)} findings)")
            return cached

        findings = await run_full(doc, self.files, self.settings.target_model)
        if self.settings.enable_semantic_analysis:
            semantic_findings = await self.semantic.analyze(doc)
            findings.extend(semantic_findings)
            if any(f.code == ANALYSIS_FAILED for f in semantic_findings):
                logger.info(f"Analyzed {identifier}: semantic pass failed, not caching")
                return findings

        self.cache.set(digest, findings)
        logger.info(f"Analyzed {identifier}: {len(findings)} findings")
        return findings
