"""
Path Resolver Module

Normalizes paths before they are turned into storage keys, so that
``/a//b``, ``/a/./b`` and ``/a/c/../b`` all address the same entry.
"""

from dataclasses import dataclass
from typing import List


@dataclass
class ParsedPath:
    """A parsed path with its components."""
    is_absolute: bool
    components: List[str]

    def __str__(self) -> str:
        if self.is_absolute:
            return '/' + '/'.join(self.components)
        return '/'.join(self.components) if self.components else '.'


class PathResolver:
    """
    Parses and normalizes slash-separated paths.

    Handles:
    - Absolute and relative paths
    - Repeated separators
    - . and .. components
    """

    @staticmethod
    def parse(path: str) -> ParsedPath:
        """
        Parse a path into components.

        Args:
            path: Path string to parse

        Returns:
            ParsedPath with components
        """
        if not isinstance(path, str):
            raise TypeError(f"Path must be str, not {type(path).__name__}")

        # Split and drop empty and current-directory components
        is_absolute = path.startswith('/')
        components = [c for c in path.split('/') if c and c != '.']

        return ParsedPath(is_absolute=is_absolute, components=components)

    @staticmethod
    def normalize(path: str) -> str:
        """
        Normalize a path by resolving . and ..

        ``..`` never climbs above the root of an absolute path; in a
        relative path a leading ``..`` that has nothing to cancel is dropped.

        Args:
            path: Path to normalize

        Returns:
            Normalized path string
        """
        parsed = PathResolver.parse(path)

        # Resolve .. components
        result: List[str] = []
        for component in parsed.components:
            if component == '..':
                if result:
                    result.pop()
            else:
                result.append(component)

        return str(ParsedPath(is_absolute=parsed.is_absolute, components=result))
