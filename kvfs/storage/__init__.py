"""
kvfs Storage Module

Key-value backends the filesystem can be mounted on:
- MemoryStorage (default, process-scoped)
- JsonFileStorage (persisted to a JSON file)
"""

from kvfs.core.config_loader import StorageConfig
from kvfs.exceptions import ConfigurationError

from .base import KeyValueStorage
from .memory import MemoryStorage
from .json_file import JsonFileStorage


def create_storage(config: StorageConfig) -> KeyValueStorage:
    """
    Build the backend named in a storage configuration.

    Raises:
        ConfigurationError: If the backend is unknown or lacks a path
    """
    if config.backend == 'memory':
        return MemoryStorage()
    if config.backend == 'json_file':
        if not config.path:
            raise ConfigurationError(
                "The json_file backend needs a path",
                key="storage.path"
            )
        return JsonFileStorage(config.path)
    raise ConfigurationError(
        f"Unknown storage backend: {config.backend}",
        key="storage.backend"
    )


__all__ = [
    'KeyValueStorage',
    'MemoryStorage',
    'JsonFileStorage',
    'create_storage',
]
