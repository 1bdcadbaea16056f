"""
Entry Module

Records stored under each storage key, and the ``Stats`` view returned
by ``stat``. A record is serialized as a JSON object:

    file:      {"data", "encoding", "type": "file", "created", "modified"}
    directory: {"type": "directory", "children", "created", "modified"}

Timestamps are integer milliseconds since the epoch.
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Union

from kvfs.exceptions import CorruptEntryError, UnsupportedEncodingError


def now_ms() -> int:
    """Current time in integer milliseconds."""
    return int(time.time() * 1000)


class Encoding(str, Enum):
    """Content encodings a file can be stored with."""
    UTF8 = 'utf8'
    BINARY = 'binary'

    @classmethod
    def parse(cls, value: Union[str, 'Encoding'], path: str = None) -> 'Encoding':
        """
        Convert a user-supplied encoding name.

        Raises:
            UnsupportedEncodingError: If the name is not ``utf8`` or ``binary``
        """
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedEncodingError(value, path=path) from None


class EntryType(str, Enum):
    """Kinds of stored entries."""
    FILE = 'file'
    DIRECTORY = 'directory'


@dataclass
class FileEntry:
    """A stored file. ``data`` is base64 text when ``encoding`` is binary."""
    data: str
    encoding: Encoding = Encoding.UTF8
    created: int = field(default_factory=now_ms)
    modified: int = field(default_factory=now_ms)

    type = EntryType.FILE

    @property
    def size(self) -> int:
        return len(self.data)

    def to_record(self) -> dict[str, Any]:
        return {
            'data': self.data,
            'encoding': self.encoding.value,
            'type': self.type.value,
            'created': self.created,
            'modified': self.modified,
        }


@dataclass
class DirectoryEntry:
    """
    A stored directory.

    ``children`` is only what the record says; it is not kept in sync
    with the entries that exist beneath the directory's path.
    """
    children: List[str] = field(default_factory=list)
    created: int = field(default_factory=now_ms)
    modified: int = field(default_factory=now_ms)

    type = EntryType.DIRECTORY

    @property
    def size(self) -> int:
        return 0

    def to_record(self) -> dict[str, Any]:
        return {
            'type': self.type.value,
            'children': list(self.children),
            'created': self.created,
            'modified': self.modified,
        }


Entry = Union[FileEntry, DirectoryEntry]


def encode_entry(entry: Entry) -> str:
    """Serialize an entry to its stored JSON text."""
    return json.dumps(entry.to_record(), separators=(',', ':'))


def decode_entry(key: str, raw: str) -> Entry:
    """
    Parse the JSON text stored under ``key``.

    Raises:
        CorruptEntryError: If the text is not a valid entry record
    """
    try:
        record = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptEntryError(key, reason=f"invalid JSON: {e}") from e

    if not isinstance(record, dict):
        raise CorruptEntryError(key, reason="record is not an object")

    # Timestamps missing from older records default to 0
    created = record.get('created', 0)
    modified = record.get('modified', created)
    entry_type = record.get('type')

    if entry_type == EntryType.FILE.value:
        data = record.get('data')
        if not isinstance(data, str):
            raise CorruptEntryError(key, reason="file data is not a string")
        # Validate encoding
        try:
            encoding = Encoding(record.get('encoding'))
        except ValueError:
            raise CorruptEntryError(
                key, reason=f"unknown encoding {record.get('encoding')!r}"
            ) from None
        return FileEntry(data=data, encoding=encoding, created=created, modified=modified)

    if entry_type == EntryType.DIRECTORY.value:
        children = record.get('children') or []
        if not isinstance(children, list):
            raise CorruptEntryError(key, reason="children is not a list")
        return DirectoryEntry(children=list(children), created=created, modified=modified)

    raise CorruptEntryError(key, reason=f"unknown entry type {entry_type!r}")


@dataclass(frozen=True)
class Stats:
    """Result of ``stat``."""
    type: EntryType
    size: int
    created: int
    modified: int

    def is_file(self) -> bool:
        return self.type == EntryType.FILE

    def is_directory(self) -> bool:
        return self.type == EntryType.DIRECTORY

    @classmethod
    def from_entry(cls, entry: Entry) -> 'Stats':
        return cls(
            type=entry.type,
            size=entry.size,
            created=entry.created,
            modified=entry.modified,
        )
