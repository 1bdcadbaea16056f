"""
kvfs File System Module

A POSIX-flavored file API over a key-value store:
- Path to storage-key mapping
- utf8 and base64 binary file entries
- Directory records
- Nominal file descriptors
- Simulated read/write streams
"""

from .entry import (
    Encoding,
    EntryType,
    FileEntry,
    DirectoryEntry,
    Stats,
    decode_entry,
    encode_entry,
)
from .path_resolver import PathResolver, ParsedPath
from .descriptors import DescriptorTable, FileHandle, OpenFlags
from .streams import EventEmitter, ReadStream, WriteStream
from .storage_fs import StorageFileSystem, get_filesystem, reset_filesystem
from .async_fs import AsyncStorageFileSystem

__all__ = [
    # Entries
    'Encoding',
    'EntryType',
    'FileEntry',
    'DirectoryEntry',
    'Stats',
    'decode_entry',
    'encode_entry',
    # Paths
    'PathResolver',
    'ParsedPath',
    # Descriptors
    'DescriptorTable',
    'FileHandle',
    'OpenFlags',
    # Streams
    'EventEmitter',
    'ReadStream',
    'WriteStream',
    # File system
    'StorageFileSystem',
    'AsyncStorageFileSystem',
    'get_filesystem',
    'reset_filesystem',
]
