"""
Key-Value Storage Interface

The contract every backend offers to the filesystem: string keys mapped
to string values, in the shape of the browser ``localStorage`` API.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional


class KeyValueStorage(ABC):
    """
    Abstract string key-value store.

    Implementations:
    - MemoryStorage: dictionary held for the life of the process
    - JsonFileStorage: dictionary persisted to a JSON file
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or None."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``. Missing keys are ignored."""
        ...

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over every stored key."""
        ...

    def __contains__(self, key: str) -> bool:
        return self.get_item(key) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.keys())
