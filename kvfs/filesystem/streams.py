"""
Simulated Streams

Listener-based read and write streams over whole-file operations:
- ReadStream reads the file eagerly, then delivers it in chunks paced by
  zero-delay timers on an EventLoop
- WriteStream buffers chunks in memory and stores them on ``end()``

Neither stream applies backpressure: ``drain`` fires after every write.
"""

from collections import defaultdict
from typing import Any, Callable, Iterator, List, Optional, Union, TYPE_CHECKING

from kvfs.core.event_loop import EventLoop
from kvfs.exceptions import (
    FileSystemException,
    StorageException,
    StreamClosedError,
)
from kvfs.logger import get_logger

if TYPE_CHECKING:
    from .storage_fs import StorageFileSystem

Chunk = Union[str, bytes]


class EventEmitter:
    """
    Minimal publish-subscribe helper.

    Listeners run synchronously in registration order. There is no
    way to unsubscribe, and a listener that raises stops the remaining
    listeners of that ``emit`` call.
    """

    def __init__(self):
        self._listeners: dict[str, List[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, listener: Callable[..., Any]) -> 'EventEmitter':
        """Register ``listener`` for ``event``. Returns self for chaining."""
        self._listeners[event].append(listener)
        return self

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener registered for ``event`` with ``args``.

        Returns:
            True if the event had listeners
        """
        # Snapshot so listeners added during emit wait for the next one
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))


class ReadStream(EventEmitter):
    """
    Chunked delivery of content that was read up front.

    Events:
        data(chunk): one per ``high_water_mark`` slice of the content
        end(): after the last chunk
        error(exc): instead of data/end when the read failed

    Events fire as the owning event loop is pumped. Iterating the
    stream yields the same chunks directly, without the loop.
    """

    def __init__(
        self,
        path: str,
        loop: EventLoop,
        high_water_mark: int,
        content: Optional[Chunk] = None,
        error: Optional[BaseException] = None
    ):
        super().__init__()
        if high_water_mark <= 0:
            raise ValueError(f"high_water_mark must be positive: {high_water_mark}")

        self.path = path
        self.high_water_mark = high_water_mark
        self._loop = loop
        self._content = content
        self._error = error
        self._position = 0
        self._ended = False
        self._logger = get_logger('streams')

        # First delivery happens on the next loop turn
        if error is not None:
            loop.schedule_timer(self._emit_error, 0.0)
        else:
            loop.schedule_timer(self._read_chunk, 0.0)

    @property
    def ended(self) -> bool:
        return self._ended

    def _emit_error(self) -> None:
        self._logger.debug(
            "Read stream failed",
            context={'path': self.path, 'error': type(self._error).__name__}
        )
        self.emit('error', self._error)

    def _read_chunk(self) -> None:
        if self._position >= len(self._content):
            self._ended = True
            self.emit('end')
            return

        # Slice next chunk
        chunk = self._content[self._position:self._position + self.high_water_mark]
        self._position += self.high_water_mark

        self.emit('data', chunk)
        self._loop.schedule_timer(self._read_chunk, 0.0)

    def __iter__(self) -> Iterator[Chunk]:
        if self._error is not None:
            raise self._error
        for start in range(0, len(self._content), self.high_water_mark):
            yield self._content[start:start + self.high_water_mark]


class WriteStream(EventEmitter):
    """
    In-memory buffer flushed to a file on ``end()``.

    Events:
        drain(): after every ``write``
        finish(): once the buffer is stored
        error(exc): when storing fails or on a write after ``end``
    """

    def __init__(self, filesystem: 'StorageFileSystem', path: str, encoding: str):
        super().__init__()
        self.path = path
        self.encoding = encoding
        self._filesystem = filesystem
        self._chunks: List[Chunk] = []
        self._ending = False
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def buffered(self) -> int:
        """Length of the buffered content."""
        return sum(len(chunk) for chunk in self._chunks)

    def write(self, chunk: Chunk) -> bool:
        """
        Buffer a chunk and signal ``drain``.

        Returns:
            True, unless the stream has already ended
        """
        # Write after end
        if self._ending:
            self.emit('error', StreamClosedError(self.path))
            return False

        self._chunks.append(chunk)
        self.emit('drain')
        return True

    def end(self, chunk: Optional[Chunk] = None) -> None:
        """Optionally write a final chunk, then store the buffer."""
        if self._ending:
            return
        if chunk is not None:
            self.write(chunk)
        self._ending = True

        # Join buffered chunks and store them in one write
        try:
            if self.encoding == 'binary':
                content: Chunk = b''.join(self._chunks)
            else:
                content = ''.join(self._chunks)
            self._filesystem.write_file(self.path, content, encoding=self.encoding)
        except (FileSystemException, StorageException, TypeError, ValueError) as e:
            self.emit('error', e)
            return
        finally:
            self._chunks = []

        self._finished = True
        self.emit('finish')
