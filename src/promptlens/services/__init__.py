"""Services for promptlens.

This package contains:
- file_access: file probes used by link checks and composition
- result_cache: content-addressed TTL/LRU result cache
- pipeline: quick and full analysis entry points
- session: per-document debounce sessions and their manager
- providers: HTTP completion provider
"""

# file_access first: the engine's link rule imports it
from .file_access import FileAccess, LocalFileAccess
from .result_cache import ResultCache
from .pipeline import AnalysisPipeline
from .providers import HttpCompletionProvider
from .session import DocumentSession, Publisher, SessionManager

__all__ = [
    # Files
    "FileAccess",
    "LocalFileAccess",
    # Cache
    "ResultCache",
    # Pipeline
    "AnalysisPipeline",
    "DocumentSession",
    "SessionManager",
    "Publisher",
    # Providers
    "HttpCompletionProvider",
]
