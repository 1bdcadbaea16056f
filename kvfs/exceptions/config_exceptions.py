"""
Configuration Exceptions
"""

from typing import Optional, Any


class ConfigurationError(Exception):
    """
    Configuration could not be loaded or holds an invalid value.

    Attributes:
        message: Human-readable error description
        key: Dot-notation configuration key (if applicable)
        context: Additional key/value details

    Example:
        >>> raise ConfigurationError("Unknown backend", key="storage.backend")
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

    def __str__(self) -> str:
        if self.key:
            return f"{self.message} (key={self.key})"
        return self.message
