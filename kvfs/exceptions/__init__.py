"""
kvfs Exception Hierarchy

Architecture:
    FileSystemException (tagged by ErrorKind)
    ├── FileNotFoundError        ENOENT
    ├── FileExistsError          EEXIST
    ├── NotADirectoryError       ENOTDIR
    ├── DirectoryNotEmptyError   ENOTEMPTY
    ├── BadFileDescriptorError   EBADF
    ├── UnsupportedEncodingError EINVAL
    └── StreamClosedError        EPIPE
    StorageException
    ├── StorageBackendError
    └── CorruptEntryError
    ConfigurationError

Note that ``FileNotFoundError``, ``FileExistsError`` and
``NotADirectoryError`` shadow the builtins of the same name; import them
from this package explicitly.
"""

from .fs_exceptions import (
    ErrorKind,
    FileSystemException,
    FileNotFoundError,
    FileExistsError,
    NotADirectoryError,
    DirectoryNotEmptyError,
    BadFileDescriptorError,
    UnsupportedEncodingError,
    StreamClosedError,
)

from .storage_exceptions import (
    StorageException,
    StorageBackendError,
    CorruptEntryError,
)

from .config_exceptions import ConfigurationError

__all__ = [
    # Filesystem exceptions
    "ErrorKind",
    "FileSystemException",
    "FileNotFoundError",
    "FileExistsError",
    "NotADirectoryError",
    "DirectoryNotEmptyError",
    "BadFileDescriptorError",
    "UnsupportedEncodingError",
    "StreamClosedError",
    # Storage exceptions
    "StorageException",
    "StorageBackendError",
    "CorruptEntryError",
    # Configuration exceptions
    "ConfigurationError",
]
