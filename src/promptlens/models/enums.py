"""Enumeration types for promptlens."""

from enum import StrEnum


class DocumentCategory(StrEnum):
    """Kind of prompt document, inferred from its file name."""

    AGENT = "agent"
    PROMPT = "prompt"
    INSTRUCTIONS = "instructions"
    SKILL = "skill"
    SYSTEM = "system"
    AGENTS_MD = "agents-md"
    COPILOT_INSTRUCTIONS = "copilot-instructions"
    UNKNOWN = "unknown"


class Severity(StrEnum):
    """Finding severity, most urgent first."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"

    @property
    def rank(self) -> int:
        """0 for the most urgent severity, increasing as urgency drops."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = (Severity.ERROR, Severity.WARNING, Severity.INFO, Severity.HINT)


class SessionState(StrEnum):
    """Scheduling state of a document session."""

    IDLE = "idle"
    QUICK_PENDING = "quick-pending"
    FULL_SCHEDULED = "full-scheduled"
    FULL_RUNNING = "full-running"
