"""
File descriptor bookkeeping.

Descriptors are nominal: they record which path was opened, but no read
or write is routed through them.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Optional

from kvfs.exceptions import BadFileDescriptorError

_FLAGS_PATTERN = re.compile(r'^(?:r|w|a)(?:[+bxs]*)$')


@dataclass(frozen=True)
class OpenFlags:
    """Parsed ``open`` flag string, e.g. ``'r'``, ``'w+'``, ``'ax'``."""
    raw: str

    @classmethod
    def parse(cls, flags: str) -> 'OpenFlags':
        """
        Validate a flag string.

        Raises:
            ValueError: If the string is not a known open mode
        """
        if not isinstance(flags, str) or not _FLAGS_PATTERN.match(flags):
            raise ValueError(f"Invalid open flags: {flags!r}")
        return cls(raw=flags)

    @property
    def creates(self) -> bool:
        """Whether opening a missing path creates an empty file."""
        return 'w' in self.raw or 'a' in self.raw


@dataclass
class FileHandle:
    """An entry in the descriptor table."""
    fd: int
    path: str
    flags: OpenFlags
    opened_at: float = field(default_factory=time.time)


class DescriptorTable:
    """
    Maps descriptors to open paths.

    Each filesystem instance owns its own table, so counters never leak
    between instances. Descriptors start at 1 and are never reused.
    """

    def __init__(self):
        self._handles: dict[int, FileHandle] = {}
        self._fd_counter = 0

    def allocate(self, path: str, flags: OpenFlags) -> FileHandle:
        """Register a new handle for ``path`` under the next descriptor."""
        # Descriptors are never reused
        self._fd_counter += 1
        handle = FileHandle(fd=self._fd_counter, path=path, flags=flags)
        self._handles[handle.fd] = handle
        return handle

    def get(self, fd: int, syscall: Optional[str] = None) -> FileHandle:
        """
        Look up an open handle.

        Raises:
            BadFileDescriptorError: If ``fd`` is not open
        """
        handle = self._handles.get(fd)
        if handle is None:
            raise BadFileDescriptorError(fd, syscall=syscall)
        return handle

    def release(self, fd: int) -> FileHandle:
        """
        Remove a handle from the table.

        Raises:
            BadFileDescriptorError: If ``fd`` is not open
        """
        handle = self.get(fd, syscall='close')
        del self._handles[fd]
        return handle

    def clear(self) -> int:
        """Drop every handle and return how many were open."""
        count = len(self._handles)
        self._handles.clear()
        return count

    def __len__(self) -> int:
        return len(self._handles)
