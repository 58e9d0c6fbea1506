"""promptlens: analysis of structured prompt documents.

Parses markdown prompt files (metadata header, placeholders, sections and
composition links), runs static rules and an optional language-model pass,
and reports findings.
"""

__version__ = "0.4.0"

from .config import Settings, configure_logging, settings
from .engine.core import PromptDocument, parse_document
from .models import CompletionRequest, CompletionResponse, Finding, Severity
from .services import (
    AnalysisPipeline,
    DocumentSession,
    LocalFileAccess,
    ResultCache,
    SessionManager,
)

__all__ = [
    "__version__",
    "Settings",
    "settings",
    "configure_logging",
    "PromptDocument",
    "parse_document",
    "Finding",
    "Severity",
    "CompletionRequest",
    "CompletionResponse",
    "AnalysisPipeline",
    "DocumentSession",
    "SessionManager",
    "ResultCache",
    "LocalFileAccess",
]
