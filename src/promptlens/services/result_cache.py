"""Content-addressed cache of analysis results.

Entries are keyed by a SHA-256 digest of the exact analyzed content, not
by document identifier, so identical content shares one entry. Entries
expire after a TTL and the cache never holds more than ``max_entries``.
"""

import hashlib
import json
import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ..exceptions import ConfigurationError
from ..models.cache import CacheEntry
from ..models.findings import Finding

logger = logging.getLogger(__name__)


class ResultCache:
    """TTL + capacity bounded cache of finding lists.

    Eviction is by insertion order (oldest first), not by last access.
    Expired entries are removed when read and before every write.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 100,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ConfigurationError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if max_entries < 1:
            raise ConfigurationError(f"max_entries must be at least 1, got {max_entries}")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, digest: str) -> bool:
        return self.get(digest) is not None

    @staticmethod
    def compute_hash(content: str) -> str:
        """SHA-256 hex digest of the UTF-8 bytes of ``content``."""
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def get(self, digest: str) -> list[Finding] | None:
        """Cached findings, or None when absent or expired."""
        entry = self._entries.get(digest)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[digest]
            return None
        return list(entry.findings)

    def set(self, digest: str, findings: list[Finding], ttl: float | None = None) -> None:
        """Store findings under ``digest``, evicting as needed.

        A missing or zero ``ttl`` uses the cache default.
        """
        ttl = ttl or self.ttl_seconds
        if ttl < 0:
            raise ConfigurationError(f"ttl must not be negative, got {ttl}")
        self.prune()
        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(digest, None)
        while len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Evicted cache entry {oldest[:12]}")

        self._entries[digest] = CacheEntry(
            hash=digest,
            findings=list(findings),
            timestamp=self._clock(),
            ttl=ttl,
        )

    def delete(self, digest: str) -> bool:
        return self._entries.pop(digest, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def prune(self) -> int:
        """Remove expired entries. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> dict[str, int]:
        """Entry count and approximate serialized size in bytes."""
        size = sum(len(entry.model_dump_json()) for entry in self._entries.values())
        return {"entries": len(self._entries), "size": size}

    # ============ SNAPSHOT ============

    def export(self) -> str:
        """Serialize all non-expired entries to a JSON list."""
        now = self._clock()
        entries = [
            entry.model_dump(mode="json")
            for entry in self._entries.values()
            if not entry.is_expired(now)
        ]
        return json.dumps(entries)

    def import_(self, data: str | bytes) -> int:
        """Load entries from an ``export()`` snapshot.

        Malformed payloads and malformed or expired entries are skipped.
        Never raises.

        Returns:
            Number of entries imported
        """
        try:
            payload: Any = json.loads(data)
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning(f"Ignoring malformed cache snapshot: {e}")
            return 0

        if not isinstance(payload, list):
            logger.warning("Ignoring cache snapshot that is not a list")
            return 0

        now = self._clock()
        imported = 0
        for raw in payload:
            try:
                entry = CacheEntry.model_validate(raw)
            except ValidationError:
                logger.debug("Skipping malformed cache entry")
                continue
            if entry.is_expired(now):
                continue

            self._entries.pop(entry.hash, None)
            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[entry.hash] = entry
            imported += 1

        logger.info(f"Imported {imported} cache entries")
        return imported
