"""
Storage Exceptions

Errors raised by key-value storage backends and by records that cannot
be decoded.
"""

from typing import Optional, Any


class StorageException(Exception):
    """
    Base exception for storage backend errors.

    Attributes:
        message: Human-readable error description
        key: Storage key involved (if applicable)
        context: Additional key/value details
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.key = key
        self.context = dict(context or {})
        if key is not None:
            self.context["key"] = key

    def __str__(self) -> str:
        if self.key is not None:
            return f"{self.message} (key={self.key})"
        return self.message


class StorageBackendError(StorageException):
    """
    The backend could not load or persist its data.

    Example:
        >>> raise StorageBackendError("Cannot read store", context={'file': 'x.json'})
    """
    pass


class CorruptEntryError(StorageException):
    """
    A key under the filesystem prefix does not hold a valid entry record.

    Example:
        >>> raise CorruptEntryError("fakeFs:/a", reason="not JSON")
    """

    def __init__(
        self,
        key: str,
        reason: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = dict(context or {})
        if reason:
            ctx["reason"] = reason
        super().__init__("Corrupt entry record", key=key, context=ctx)
        self.reason = reason
