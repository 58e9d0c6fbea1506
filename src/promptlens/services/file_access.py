"""File-reading capability used for link probes and composition.

The engine only needs ``exists`` and ``read_text``; hosts with their own
view of the workspace (unsaved buffers, virtual files) can supply any
object with these two coroutines.
"""

import asyncio
from pathlib import Path
from typing import Protocol


class FileAccess(Protocol):
    """Protocol for file probes."""

    async def exists(self, path: str) -> bool: ...

    async def read_text(self, path: str) -> str: ...


class LocalFileAccess:
    """``FileAccess`` over the local filesystem.

    Blocking calls run in a worker thread so other documents keep
    progressing while one waits on the disk.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    async def read_text(self, path: str) -> str:
        """Read a file. Raises OSError (or UnicodeDecodeError) on failure."""
        return await asyncio.to_thread(Path(path).read_text, encoding=self.encoding)
