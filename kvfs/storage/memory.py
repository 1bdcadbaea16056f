"""In-memory key-value storage."""

from typing import Iterator, Optional

from .base import KeyValueStorage


class MemoryStorage(KeyValueStorage):
    """
    Dictionary-backed store that lives as long as the object does.

    Example:
        >>> store = MemoryStorage()
        >>> store.set_item('k', 'v')
        >>> store.get_item('k')
        'v'
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be str, not {type(value).__name__}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"MemoryStorage(items={len(self._items)})"
