"""
Filesystem Exceptions

POSIX-flavored errors raised by the storage-backed filesystem.
Every error is tagged with an ``ErrorKind`` and carries the path (or
descriptor) it concerns, so callers can branch on ``exc.kind`` instead
of matching message text.
"""

import errno
from enum import Enum
from typing import Optional, Any


class ErrorKind(Enum):
    """POSIX error codes emulated by the filesystem."""
    ENOENT = 'ENOENT'
    EEXIST = 'EEXIST'
    ENOTDIR = 'ENOTDIR'
    ENOTEMPTY = 'ENOTEMPTY'
    EBADF = 'EBADF'
    EINVAL = 'EINVAL'
    EPIPE = 'EPIPE'

    @property
    def errno(self) -> int:
        """Numeric errno value of this kind on the running platform."""
        return getattr(errno, self.value)


class FileSystemException(Exception):
    """
    Base exception for all filesystem errors.

    Attributes:
        kind: The emulated POSIX error kind
        message: Human-readable error description
        path: Path the failing operation referred to (if applicable)
        syscall: Name of the emulated call (``open``, ``rmdir``, ...)
        error_code: Numeric errno value
        context: Additional key/value details
    """

    kind: ErrorKind = ErrorKind.EINVAL

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
        syscall: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.syscall = syscall
        self.error_code = error_code or self.kind.errno
        self.context = dict(context or {})
        if path is not None:
            self.context["path"] = path
        if syscall:
            self.context["syscall"] = syscall

    @property
    def code(self) -> str:
        """The POSIX code name, e.g. ``'ENOENT'``."""
        return self.kind.value

    def __str__(self) -> str:
        base = f"{self.code}: {self.message}"
        if self.syscall and self.path is not None:
            base = f"{base}, {self.syscall} '{self.path}'"
        elif self.path is not None:
            base = f"{base} '{self.path}'"
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code!r}, path={self.path!r}, syscall={self.syscall!r})"
        )


class FileNotFoundError(FileSystemException):
    """
    The path has no entry.

    Example:
        >>> raise FileNotFoundError("/missing", syscall="open")
    """

    kind = ErrorKind.ENOENT

    def __init__(
        self,
        path: str,
        syscall: Optional[str] = None,
        message: str = "no such file or directory",
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, path=path, syscall=syscall, context=context)


class FileExistsError(FileSystemException):
    """
    An entry already exists where none is allowed.

    Example:
        >>> raise FileExistsError("/a", syscall="mkdir")
    """

    kind = ErrorKind.EEXIST

    def __init__(
        self,
        path: str,
        syscall: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            "file or directory already exists",
            path=path,
            syscall=syscall,
            context=context
        )


class NotADirectoryError(FileSystemException):
    """The entry exists but is not a directory."""

    kind = ErrorKind.ENOTDIR

    def __init__(
        self,
        path: str,
        syscall: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__("not a directory", path=path, syscall=syscall, context=context)


class DirectoryNotEmptyError(FileSystemException):
    """
    Directory still records children.

    Example:
        >>> raise DirectoryNotEmptyError("/dir", syscall="rmdir")
    """

    kind = ErrorKind.ENOTEMPTY

    def __init__(
        self,
        path: str,
        syscall: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__("directory not empty", path=path, syscall=syscall, context=context)


class BadFileDescriptorError(FileSystemException):
    """The descriptor is not currently open."""

    kind = ErrorKind.EBADF

    def __init__(
        self,
        fd: Any,
        syscall: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = dict(context or {})
        ctx["fd"] = fd
        super().__init__("bad file descriptor", syscall=syscall, context=ctx)
        self.fd = fd

    def __str__(self) -> str:
        base = f"{self.code}: {self.message}"
        if self.syscall:
            base = f"{base}, {self.syscall} '{self.fd}'"
        return base


class UnsupportedEncodingError(FileSystemException):
    """
    Encoding is not ``utf8``/``binary`` or does not match the stored entry.

    Example:
        >>> raise UnsupportedEncodingError("latin1", path="/a")
    """

    kind = ErrorKind.EINVAL

    def __init__(
        self,
        encoding: Any,
        path: Optional[str] = None,
        stored_encoding: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = dict(context or {})
        ctx["encoding"] = encoding
        if stored_encoding is not None:
            ctx["stored_encoding"] = stored_encoding
        super().__init__(f"Unsupported encoding: {encoding}", path=path, context=ctx)
        self.encoding = encoding
        self.stored_encoding = stored_encoding


class StreamClosedError(FileSystemException):
    """A write stream was written to after ``end()``."""

    kind = ErrorKind.EPIPE

    def __init__(
        self,
        path: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__("write after end", path=path, syscall="write", context=context)
