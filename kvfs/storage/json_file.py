"""
JSON File Storage

A key-value store whose whole content is rewritten to a single JSON file
after every mutation, so entries survive a restart of the process.
"""

import json
import os
from pathlib import Path
from typing import Iterator, Optional, Union

from kvfs.exceptions import StorageBackendError
from kvfs.logger import get_logger

from .base import KeyValueStorage


class JsonFileStorage(KeyValueStorage):
    """
    Dictionary persisted to a JSON file.

    The file is loaded once on construction. Writes go to a temporary
    file that then replaces the store file.

    Example:
        >>> store = JsonFileStorage('/tmp/kvfs.json')
        >>> store.set_item('fakeFs:/a', '{}')
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._logger = get_logger('storage')
        self._items: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageBackendError(
                f"Invalid JSON in store file: {e}",
                context={'file': str(self._path)}
            )
        except OSError as e:
            raise StorageBackendError(
                f"Cannot read store file: {e}",
                context={'file': str(self._path)}
            )

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise StorageBackendError(
                "Store file must hold a JSON object of strings",
                context={'file': str(self._path)}
            )

        self._logger.debug(
            "Loaded store file",
            context={'file': str(self._path), 'keys': len(data)}
        )
        return data

    def _commit(self, items: dict[str, str]) -> None:
        tmp_path = self._path.with_name(self._path.name + '.tmp')
        try:
            # Write the new content beside the store file, then swap it in
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(items, f)
            os.replace(tmp_path, self._path)
        except OSError as e:
            # Drop a partial temp file; a directory in its place is left alone
            if tmp_path.is_file():
                tmp_path.unlink()
            raise StorageBackendError(
                f"Cannot write store file: {e}",
                context={'file': str(self._path)}
            )

        # Only adopt the new content once it is on disk
        self._items = items

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be str, not {type(value).__name__}")
        self._commit({**self._items, key: value})

    def remove_item(self, key: str) -> None:
        if key not in self._items:
            return
        items = dict(self._items)
        del items[key]
        self._commit(items)

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"JsonFileStorage(path={str(self._path)!r}, items={len(self._items)})"
