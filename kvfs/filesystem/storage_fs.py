"""
Storage-Backed File System

Emulates a small POSIX-like file API on top of a flat key-value store:
- Each path is one storage key (``key_prefix + normalized path``)
- Files hold utf8 text or base64-encoded binary content
- Directories are records with a ``children`` list
- Descriptors are bookkeeping only
- Read/write streams are simulated over whole-file operations

Every call is a synchronous read-modify-write of a single key. There is
no locking and no multi-key atomicity: the last write wins.
"""

import threading
from typing import Any, List, Optional, Union

from kvfs.core.config_loader import Config, get_config
from kvfs.core.event_loop import EventLoop
from kvfs.core.registry import Subsystem, SubsystemState
from kvfs.exceptions import (
    CorruptEntryError,
    FileExistsError,
    FileNotFoundError,
    FileSystemException,
    NotADirectoryError,
    DirectoryNotEmptyError,
    StorageException,
    UnsupportedEncodingError,
)
from kvfs.logger import Logger, LogLevel
from kvfs.storage import KeyValueStorage, create_storage

from .codec import base64_to_binary, binary_to_base64
from .descriptors import DescriptorTable, OpenFlags
from .entry import (
    DirectoryEntry,
    Encoding,
    Entry,
    FileEntry,
    Stats,
    decode_entry,
    encode_entry,
    now_ms,
)
from .path_resolver import PathResolver
from .streams import ReadStream, WriteStream

Content = Union[str, bytes, bytearray, memoryview]


class StorageFileSystem(Subsystem):
    """
    File system shim over a ``KeyValueStorage``.

    Example:
        >>> fs = StorageFileSystem(MemoryStorage())
        >>> fs.write_file('/notes.txt', 'hello')
        >>> fs.read_file('/notes.txt')
        'hello'
        >>> fs.stat('/notes.txt').size
        5
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        key_prefix: Optional[str] = None,
        event_loop: Optional[EventLoop] = None,
        config: Optional[Config] = None
    ):
        super().__init__('filesystem')
        config = config or get_config()

        # Fall back to the configured backend when no store is given
        self._storage = storage if storage is not None else create_storage(config.storage)
        self._key_prefix = config.filesystem.key_prefix if key_prefix is None else key_prefix
        self._default_encoding = config.filesystem.default_encoding
        self._preserve_created = config.filesystem.preserve_created
        self._high_water_mark = config.streams.high_water_mark
        self._event_loop = event_loop or EventLoop()
        self._descriptors = DescriptorTable()

    # Lifecycle

    def initialize(self) -> None:
        """Initialize the filesystem."""
        self.set_state(SubsystemState.INITIALIZED)
        self._logger.info(
            "Storage filesystem initialized",
            context={'prefix': self._key_prefix, 'storage': type(self._storage).__name__}
        )

    def start(self) -> None:
        self.set_state(SubsystemState.RUNNING)

    def stop(self) -> None:
        self.set_state(SubsystemState.STOPPED)

    def cleanup(self) -> None:
        """Release every open descriptor."""
        released = self._descriptors.clear()
        if released:
            self._logger.info("Released open descriptors", context={'count': released})

    # Properties

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    @property
    def event_loop(self) -> EventLoop:
        """Loop that delivers read stream events."""
        return self._event_loop

    @property
    def open_descriptors(self) -> DescriptorTable:
        return self._descriptors

    # Storage helpers

    def storage_key(self, path: str) -> str:
        """Key under which the entry for ``path`` is stored."""
        return f"{self._key_prefix}{PathResolver.normalize(path)}"

    def _load(self, path: str) -> Optional[Entry]:
        key = self.storage_key(path)
        raw = self._storage.get_item(key)
        if raw is None:
            return None
        return decode_entry(key, raw)

    def _require(self, path: str, syscall: str, message: Optional[str] = None) -> Entry:
        entry = self._load(path)
        if entry is None:
            if message:
                raise FileNotFoundError(PathResolver.normalize(path), syscall=syscall, message=message)
            raise FileNotFoundError(PathResolver.normalize(path), syscall=syscall)
        return entry

    def _store(self, path: str, entry: Entry) -> None:
        self._storage.set_item(self.storage_key(path), encode_entry(entry))

    def _encoding(self, encoding: Optional[Union[str, Encoding]], path: str) -> Encoding:
        return Encoding.parse(self._default_encoding if encoding is None else encoding, path=path)

    def _created_for_overwrite(self, path: str, now: int) -> int:
        if not self._preserve_created:
            return now
        try:
            existing = self._load(path)
        # A corrupt record cannot supply its creation time
        except CorruptEntryError as e:
            self._logger.warning(
                "Overwriting corrupt entry",
                context={'path': path, 'reason': e.reason}
            )
            return now
        if isinstance(existing, FileEntry):
            return existing.created
        return now

    @staticmethod
    def _check_content(content: Any, encoding: Encoding) -> None:
        if encoding is Encoding.UTF8 and not isinstance(content, str):
            raise TypeError(
                f"utf8 content must be str, not {type(content).__name__}"
            )
        if encoding is Encoding.BINARY and not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"binary content must be bytes-like, not {type(content).__name__}"
            )

    # File operations

    def exists(self, path: str) -> bool:
        """Check whether any entry is stored for ``path``."""
        return self._storage.get_item(self.storage_key(path)) is not None

    def write_file(
        self,
        path: str,
        content: Content,
        encoding: Optional[Union[str, Encoding]] = None
    ) -> None:
        """
        Store ``content`` at ``path``, replacing any existing entry.

        Args:
            path: File path
            content: ``str`` for utf8, bytes-like for binary
            encoding: ``'utf8'`` or ``'binary'`` (default from configuration)

        Raises:
            UnsupportedEncodingError: If the encoding is not supported
            TypeError: If the content type does not match the encoding
        """
        enc = self._encoding(encoding, path)
        self._check_content(content, enc)

        # Binary content is stored as base64 text
        data = content if enc is Encoding.UTF8 else binary_to_base64(content)
        now = now_ms()
        entry = FileEntry(
            data=data,
            encoding=enc,
            created=self._created_for_overwrite(path, now),
            modified=now
        )
        self._store(path, entry)

        self._logger.debug(
            "Wrote file",
            context={'path': path, 'encoding': enc.value, 'size': entry.size}
        )

    def read_file(
        self,
        path: str,
        encoding: Optional[Union[str, Encoding]] = None
    ) -> Union[str, bytes]:
        """
        Read the content stored at ``path``.

        Returns:
            ``str`` for utf8 files, ``bytes`` for binary files

        Raises:
            FileNotFoundError: If nothing is stored at ``path``
            UnsupportedEncodingError: If the encoding is unsupported or
                differs from the encoding the file was written with
        """
        entry = self._require(path, 'open')
        enc = self._encoding(encoding, path)

        # Directories and mismatched encodings cannot be read
        if not isinstance(entry, FileEntry) or entry.encoding is not enc:
            stored = entry.encoding.value if isinstance(entry, FileEntry) else None
            raise UnsupportedEncodingError(enc.value, path=path, stored_encoding=stored)

        if enc is Encoding.UTF8:
            return entry.data

        # Decode binary payload
        try:
            return base64_to_binary(entry.data)
        except ValueError as e:
            raise CorruptEntryError(self.storage_key(path), reason=str(e)) from e

    def append_file(
        self,
        path: str,
        content: Content,
        encoding: Optional[Union[str, Encoding]] = None
    ) -> None:
        """
        Append ``content`` to the file at ``path``, creating it if absent.

        The existing content is read first; if that fails the stored
        entry is left untouched.
        """
        enc = self._encoding(encoding, path)
        self._check_content(content, enc)

        # Read existing content first
        if enc is Encoding.UTF8:
            existing = self.read_file(path, enc) if self.exists(path) else ''
            new_content: Content = existing + content
        else:
            existing = self.read_file(path, enc) if self.exists(path) else b''
            new_content = existing + bytes(content)

        self.write_file(path, new_content, enc)

    def unlink(self, path: str) -> None:
        """
        Delete the entry at ``path``.

        Raises:
            FileNotFoundError: If nothing is stored at ``path``
        """
        if not self.exists(path):
            raise FileNotFoundError(PathResolver.normalize(path), syscall='unlink')

        self._storage.remove_item(self.storage_key(path))
        self._logger.debug("Deleted entry", context={'path': path})

    def mkdir(self, path: str) -> None:
        """
        Create an empty directory entry.

        Raises:
            FileExistsError: If an entry already exists at ``path``
        """
        if self.exists(path):
            raise FileExistsError(PathResolver.normalize(path), syscall='mkdir')

        now = now_ms()
        self._store(path, DirectoryEntry(children=[], created=now, modified=now))
        self._logger.debug("Created directory", context={'path': path})

    def rmdir(self, path: str) -> None:
        """
        Delete a directory entry whose ``children`` list is empty.

        Raises:
            FileNotFoundError: If nothing is stored at ``path``
            NotADirectoryError: If the entry is a file
            DirectoryNotEmptyError: If the directory records children
        """
        entry = self._require(path, 'rmdir', message="no such directory")
        resolved = PathResolver.normalize(path)

        if not isinstance(entry, DirectoryEntry):
            raise NotADirectoryError(resolved, syscall='rmdir')
        if entry.children:
            raise DirectoryNotEmptyError(resolved, syscall='rmdir')

        self._storage.remove_item(self.storage_key(path))
        self._logger.debug("Removed directory", context={'path': path})

    def readdir(self, path: str) -> List[str]:
        """
        List the names recorded in a directory's ``children``.

        The namespace is not scanned: entries written beneath the
        directory do not show up here.

        Raises:
            FileNotFoundError: If nothing is stored at ``path``
            NotADirectoryError: If the entry is a file
        """
        entry = self._require(path, 'scandir', message="no such directory")

        if not isinstance(entry, DirectoryEntry):
            raise NotADirectoryError(PathResolver.normalize(path), syscall='scandir')

        return list(entry.children)

    def rename(self, old_path: str, new_path: str) -> None:
        """
        Move the raw record at ``old_path`` to ``new_path``.

        Any entry at ``new_path`` is replaced.

        Raises:
            FileNotFoundError: If nothing is stored at ``old_path``
        """
        old_key = self.storage_key(old_path)
        new_key = self.storage_key(new_path)

        # Move the raw record without decoding it
        raw = self._storage.get_item(old_key)
        if raw is None:
            raise FileNotFoundError(PathResolver.normalize(old_path), syscall='rename')

        # Renaming onto itself
        if old_key == new_key:
            return

        self._storage.set_item(new_key, raw)
        self._storage.remove_item(old_key)
        self._logger.debug("Renamed entry", context={'from': old_path, 'to': new_path})

    def copy_file(self, src: str, dest: str) -> None:
        """
        Copy the raw record at ``src`` to ``dest``.

        Raises:
            FileNotFoundError: If nothing is stored at ``src``
        """
        raw = self._storage.get_item(self.storage_key(src))
        if raw is None:
            raise FileNotFoundError(PathResolver.normalize(src), syscall='copyfile')

        self._storage.set_item(self.storage_key(dest), raw)
        self._logger.debug("Copied entry", context={'from': src, 'to': dest})

    def truncate(self, path: str, length: int = 0) -> None:
        """
        Keep only the first ``length`` characters of a utf8 file.

        Raises:
            FileNotFoundError: If nothing is stored at ``path``
            UnsupportedEncodingError: If the file is not utf8
        """
        if not self.exists(path):
            raise FileNotFoundError(PathResolver.normalize(path), syscall='truncate')

        content = self.read_file(path, Encoding.UTF8)
        self.write_file(path, content[:max(length, 0)], Encoding.UTF8)

    def stat(self, path: str) -> Stats:
        """
        Describe the entry at ``path``.

        ``size`` is the length of the stored data (base64 text for
        binary files) and 0 for directories.

        Raises:
            FileNotFoundError: If nothing is stored at ``path``
        """
        return Stats.from_entry(self._require(path, 'stat'))

    # Streams

    def create_read_stream(
        self,
        path: str,
        encoding: Optional[Union[str, Encoding]] = None,
        high_water_mark: Optional[int] = None
    ) -> ReadStream:
        """
        Read ``path`` now and deliver it in chunks on the event loop.

        Failures are reported through the stream's ``error`` event.
        """
        # Read up front; a failure is delivered as an error event
        content = None
        error = None
        try:
            content = self.read_file(path, encoding)
        except (FileSystemException, StorageException) as e:
            error = e

        return ReadStream(
            path=path,
            loop=self._event_loop,
            high_water_mark=high_water_mark or self._high_water_mark,
            content=content,
            error=error
        )

    def create_write_stream(
        self,
        path: str,
        encoding: Optional[Union[str, Encoding]] = None
    ) -> WriteStream:
        """Buffer writes in memory and store them at ``path`` on ``end()``."""
        if encoding is None:
            encoding = self._default_encoding
        elif isinstance(encoding, Encoding):
            encoding = encoding.value
        return WriteStream(self, path, encoding)

    # Descriptors

    def open(self, path: str, flags: str = 'r') -> int:
        """
        Allocate a descriptor for ``path``.

        A missing file is created empty when ``flags`` contains ``w`` or
        ``a``; existing content is never truncated.

        Returns:
            The new descriptor

        Raises:
            FileNotFoundError: If the path is missing and flags do not create
            ValueError: If the flags are not a valid open mode
        """
        parsed = OpenFlags.parse(flags)
        resolved = PathResolver.normalize(path)

        # Create missing file for write and append modes
        if not self.exists(resolved):
            if not parsed.creates:
                raise FileNotFoundError(resolved, syscall='open')
            self.write_file(resolved, '', Encoding.UTF8)

        handle = self._descriptors.allocate(resolved, parsed)
        self._logger.debug(
            "Opened file",
            context={'path': resolved, 'fd': handle.fd, 'flags': flags}
        )
        return handle.fd

    def close(self, fd: int) -> None:
        """
        Release a descriptor.

        Raises:
            BadFileDescriptorError: If ``fd`` is not open
        """
        handle = self._descriptors.release(fd)
        self._logger.debug("Closed file", context={'path': handle.path, 'fd': fd})

    def get_open_path(self, fd: int) -> str:
        """Path an open descriptor refers to."""
        return self._descriptors.get(fd, syscall='fstat').path

    def get_stats(self) -> dict[str, Any]:
        """Get filesystem statistics."""
        # Count only keys under this instance's prefix
        entries = sum(1 for key in self._storage.keys() if key.startswith(self._key_prefix))
        return {
            'key_prefix': self._key_prefix,
            'entries': entries,
            'open_files': len(self._descriptors),
            'pending_stream_events': self._event_loop.pending,
        }


_default_filesystem: Optional[StorageFileSystem] = None
_default_lock = threading.Lock()


def get_filesystem() -> StorageFileSystem:
    """
    Get the process-wide filesystem built from the global configuration.

    The first call also sets up logging from ``config.logging``.
    """
    global _default_filesystem
    with _default_lock:
        if _default_filesystem is None:
            # Set up logging from configuration first
            config = get_config()
            Logger.initialize(
                level=LogLevel.from_name(config.logging.level),
                log_file=config.logging.log_file,
                console_output=config.logging.console_output
            )
            fs = StorageFileSystem(config=config)
            fs.initialize()
            fs.start()
            _default_filesystem = fs
        return _default_filesystem


def reset_filesystem() -> None:
    """Stop and discard the process-wide filesystem."""
    global _default_filesystem
    with _default_lock:
        if _default_filesystem is not None:
            _default_filesystem.stop()
            _default_filesystem.cleanup()
            _default_filesystem = None
