"""
kvfs - A Filesystem Shim over Key-Value Storage

Emulates read/write/rename/stat/stream file operations and POSIX error
codes on top of a flat string key-value store, for environments that
have no real filesystem.
"""

__version__ = "1.0.0"

from .filesystem import (
    StorageFileSystem,
    AsyncStorageFileSystem,
    Encoding,
    Stats,
    get_filesystem,
    reset_filesystem,
)
from .storage import KeyValueStorage, MemoryStorage, JsonFileStorage

__all__ = [
    'StorageFileSystem',
    'AsyncStorageFileSystem',
    'Encoding',
    'Stats',
    'get_filesystem',
    'reset_filesystem',
    'KeyValueStorage',
    'MemoryStorage',
    'JsonFileStorage',
]
