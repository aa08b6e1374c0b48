"""
Capabilities the job client borrows from its host: reading the clipboard and
asking for media library access.
"""

import asyncio
import sys
from typing import Optional, Protocol


class ClipboardSource(Protocol):
    """Returns the current clipboard text, or an empty string."""

    async def read_text(self) -> str: ...


class PermissionSource(Protocol):
    """Asks for permission to write into the media library."""

    async def request(self) -> bool: ...


class StaticClipboard:
    """A clipboard holding a fixed string, e.g. a command-line argument."""

    def __init__(self, text: Optional[str] = None):
        self.text = text or ""

    async def read_text(self) -> str:
        return self.text


class StdinClipboard:
    """Treats the first non-empty, non-comment line of stdin as the clipboard."""

    def _read_sync(self) -> str:
        for line in sys.stdin:
            line = line.strip()
            if line and not line.startswith("#"):
                return line
        return ""

    async def read_text(self) -> str:
        return await asyncio.to_thread(self._read_sync)


class StaticPermission:
    """Answers every permission request the same way."""

    def __init__(self, granted: bool):
        self.granted = granted
        self.requests = 0

    async def request(self) -> bool:
        self.requests += 1
        return self.granted
