"""Per-document scheduling of analysis runs.

Each open document gets a ``DocumentSession`` holding its own debounce
timer, version counter and in-flight run. All sessions share one
``AnalysisPipeline`` (and therefore one result cache) through the
``SessionManager``.

State flow of a session::

    change ─► quick-pending ─► (quick findings published) ─► full-scheduled
    timer fires / open / save / reanalyze ─► full-running ─► idle

A full result computed for a version older than the session's current
version is dropped without publishing. At most one full run is in flight
per document; triggers arriving during a run are coalesced into a single
follow-up run.
"""

import asyncio
import logging
from collections.abc import Callable

from ..config import Settings
from ..models.enums import SessionState
from ..models.findings import Finding
from .pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

# Receives (identifier, version, findings) whenever findings are published
Publisher = Callable[[str, int, list[Finding]], None]


class DocumentSession:
    """Debounce controller for one document."""

    def __init__(
        self,
        identifier: str,
        pipeline: AnalysisPipeline,
        publisher: Publisher,
        workspace_root: str | None = None,
        settings: Settings | None = None,
    ):
        self.identifier = identifier
        self.pipeline = pipeline
        self.publisher = publisher
        self.workspace_root = workspace_root
        self.settings = settings or pipeline.settings
        self.state = SessionState.IDLE
        self.version = 0
        self.text = ""
        self._timer: asyncio.Task | None = None
        self._run: asyncio.Task | None = None
        self._rerun = False
        self._closed = False

    @property
    def is_running(self) -> bool:
        return self._run is not None and not self._run.done()

    # ============ TRIGGERS ============

    def change(self, text: str, version: int) -> list[Finding]:
        """Handle an edit: publish quick findings now, schedule a full run.

        Returns:
            The quick-profile findings that were published
        """
        self._cancel_timer()
        self.text = text
        self.version = version
        self.state = SessionState.QUICK_PENDING

        findings = self.pipeline.analyze_quick(text, self.identifier, self.workspace_root)
        self._publish(version, findings)

        self._timer = asyncio.create_task(self._debounce())
        self.state = SessionState.FULL_RUNNING if self.is_running else SessionState.FULL_SCHEDULED
        return findings

    def open(self, text: str, version: int) -> asyncio.Task:
        """Handle a newly opened document: analyze fully right away."""
        self.text = text
        self.version = version
        return self.trigger()

    def save(self) -> asyncio.Task:
        return self.trigger()

    def reanalyze(self) -> asyncio.Task:
        """Drop every cached result and analyze again."""
        self.pipeline.cache.clear()
        logger.info(f"Re-analysis requested for {self.identifier}, cache cleared")
        return self.trigger()

    def trigger(self) -> asyncio.Task:
        """Start a full run now, or queue one behind the run in flight."""
        self._cancel_timer()
        if self.is_running:
            self._rerun = True
            return self._run
        self._run = asyncio.create_task(self._run_full())
        return self._run

    def close(self) -> None:
        """Cancel the timer and any run in flight."""
        self._closed = True
        self._cancel_timer()
        if self._run is not None and not self._run.done():
            self._run.cancel()
        self._run = None
        self._rerun = False
        self.state = SessionState.IDLE

    async def wait_idle(self) -> None:
        """Wait until no timer is armed and no run is in flight."""
        while True:
            pending = [
                task for task in (self._timer, self._run) if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    # ============ INTERNALS ============

    def _cancel_timer(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None and timer is not asyncio.current_task() and not timer.done():
            timer.cancel()

    async def _debounce(self) -> None:
        await asyncio.sleep(self.settings.debounce_seconds)
        self._timer = None
        self.trigger()

    async def _run_full(self) -> None:
        try:
            while True:
                self._rerun = False
                self.state = SessionState.FULL_RUNNING
                captured_version = self.version
                try:
                    findings = await self.pipeline.analyze(
                        self.text, self.identifier, self.workspace_root
                    )
                except Exception as e:
                    logger.error(f"Full analysis of {self.identifier} failed: {e}", exc_info=True)
                    findings = None

                if findings is not None:
                    if self.version != captured_version:
                        logger.debug(
                            f"Discarding stale result for {self.identifier} "
                            f"(v{captured_version}, current v{self.version})"
                        )
                    else:
                        self._publish(captured_version, findings)

                if not self._rerun or self._closed:
                    break
        finally:
            if not self._closed:
                pending_timer = self._timer is not None and not self._timer.done()
                self.state = SessionState.FULL_SCHEDULED if pending_timer else SessionState.IDLE

    def _publish(self, version: int, findings: list[Finding]) -> None:
        if self._closed:
            return
        self.publisher(self.identifier, version, findings)


class SessionManager:
    """Owns one ``DocumentSession`` per open document."""

    def __init__(
        self,
        pipeline: AnalysisPipeline,
        publisher: Publisher,
        workspace_root: str | None = None,
    ):
        self.pipeline = pipeline
        self.publisher = publisher
        self.workspace_root = workspace_root
        self.sessions: dict[str, DocumentSession] = {}

    def get(self, identifier: str) -> DocumentSession | None:
        return self.sessions.get(identifier)

    def _session(self, identifier: str) -> DocumentSession:
        session = self.sessions.get(identifier)
        if session is None:
            session = DocumentSession(
                identifier,
                self.pipeline,
                self.publisher,
                workspace_root=self.workspace_root,
            )
            self.sessions[identifier] = session
        return session

    def open(self, identifier: str, text: str, version: int = 0) -> asyncio.Task:
        return self._session(identifier).open(text, version)

    def change(self, identifier: str, text: str, version: int) -> list[Finding]:
        return self._session(identifier).change(text, version)

    def save(self, identifier: str) -> asyncio.Task | None:
        session = self.sessions.get(identifier)
        return session.save() if session is not None else None

    def reanalyze(self, identifier: str) -> asyncio.Task | None:
        session = self.sessions.get(identifier)
        return session.reanalyze() if session is not None else None

    def close(self, identifier: str) -> None:
        session = self.sessions.pop(identifier, None)
        if session is not None:
            session.close()
        self.pipeline.forget(identifier)

    def close_all(self) -> None:
        for identifier in list(self.sessions):
            self.close(identifier)

    def clear_cache(self) -> None:
        self.pipeline.cache.clear()
