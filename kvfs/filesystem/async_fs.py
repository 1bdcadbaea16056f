"""
Awaitable facade over ``StorageFileSystem``.

Each coroutine runs the blocking operation to completion and returns
its result; errors are raised from the ``await``. The underlying store
does no I/O that could be overlapped, so nothing is offloaded to threads.
"""

from typing import Any, List, Optional, Union

from .entry import Encoding, Stats
from .storage_fs import Content, StorageFileSystem
from .streams import ReadStream, WriteStream

EncodingArg = Optional[Union[str, Encoding]]


class AsyncStorageFileSystem:
    """
    Deferred form of every filesystem operation.

    Example:
        >>> afs = AsyncStorageFileSystem(StorageFileSystem(MemoryStorage()))
        >>> await afs.write_file('/a.txt', 'hi')
        >>> await afs.read_file('/a.txt')
        'hi'
    """

    def __init__(self, filesystem: StorageFileSystem):
        self._fs = filesystem

    @property
    def sync(self) -> StorageFileSystem:
        """The wrapped blocking filesystem."""
        return self._fs

    async def exists(self, path: str) -> bool:
        return self._fs.exists(path)

    async def write_file(self, path: str, content: Content, encoding: EncodingArg = None) -> None:
        self._fs.write_file(path, content, encoding)

    async def read_file(self, path: str, encoding: EncodingArg = None) -> Union[str, bytes]:
        return self._fs.read_file(path, encoding)

    async def append_file(self, path: str, content: Content, encoding: EncodingArg = None) -> None:
        self._fs.append_file(path, content, encoding)

    async def unlink(self, path: str) -> None:
        self._fs.unlink(path)

    async def mkdir(self, path: str) -> None:
        self._fs.mkdir(path)

    async def rmdir(self, path: str) -> None:
        self._fs.rmdir(path)

    async def readdir(self, path: str) -> List[str]:
        return self._fs.readdir(path)

    async def rename(self, old_path: str, new_path: str) -> None:
        self._fs.rename(old_path, new_path)

    async def copy_file(self, src: str, dest: str) -> None:
        self._fs.copy_file(src, dest)

    async def truncate(self, path: str, length: int = 0) -> None:
        self._fs.truncate(path, length)

    async def stat(self, path: str) -> Stats:
        return self._fs.stat(path)

    async def open(self, path: str, flags: str = 'r') -> int:
        return self._fs.open(path, flags)

    async def close(self, fd: int) -> None:
        self._fs.close(fd)

    def create_read_stream(
        self,
        path: str,
        encoding: EncodingArg = None,
        high_water_mark: Optional[int] = None
    ) -> ReadStream:
        return self._fs.create_read_stream(path, encoding, high_water_mark)

    def create_write_stream(self, path: str, encoding: EncodingArg = None) -> WriteStream:
        return self._fs.create_write_stream(path, encoding)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._fs, name)
