"""
kvfs Configuration Loader

Configuration management for the filesystem shim:
- JSON configuration file loading
- Validation of known settings
- Default value handling
- Runtime configuration updates
"""

import json
import threading
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional

from kvfs.exceptions import ConfigurationError


STORAGE_BACKENDS = ('memory', 'json_file')
ENCODINGS = ('utf8', 'binary')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class FilesystemConfig:
    """Filesystem shim settings."""
    key_prefix: str = "fakeFs:"
    default_encoding: str = "utf8"
    preserve_created: bool = True


@dataclass
class StreamConfig:
    """Simulated stream settings."""
    high_water_mark: int = 64 * 1024  # 64 KiB


@dataclass
class StorageConfig:
    """Key-value backend settings."""
    backend: str = "memory"
    path: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    log_file: Optional[str] = None
    console_output: bool = True


@dataclass
class Config:
    """
    Main configuration container.

    Holds all configuration settings for the filesystem shim.
    """
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    streams: StreamConfig = field(default_factory=StreamConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """
        Check every section for invalid values.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        if not isinstance(self.filesystem.key_prefix, str):
            raise ConfigurationError(
                "Key prefix must be a string",
                key="filesystem.key_prefix"
            )
        if self.filesystem.default_encoding not in ENCODINGS:
            raise ConfigurationError(
                f"Unsupported default encoding: {self.filesystem.default_encoding}",
                key="filesystem.default_encoding"
            )
        hwm = self.streams.high_water_mark
        if not isinstance(hwm, int) or isinstance(hwm, bool) or hwm <= 0:
            raise ConfigurationError(
                f"High-water mark must be a positive integer: {hwm!r}",
                key="streams.high_water_mark"
            )
        if self.storage.backend not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend: {self.storage.backend}",
                key="storage.backend",
                context={'choices': STORAGE_BACKENDS}
            )
        if self.storage.backend == 'json_file' and not self.storage.path:
            raise ConfigurationError(
                "The json_file backend needs a path",
                key="storage.path"
            )
        if str(self.logging.level).upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.logging.level}",
                key="logging.level"
            )


class ConfigLoader:
    """
    Configuration loader and manager.

    Handles loading configuration from JSON files, validating
    settings, and providing runtime configuration access.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('kvfs.json')
        >>> print(config.filesystem.key_prefix)
        fakeFs:
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigurationError: If the file cannot be loaded, parsed or validated
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a JSON object")

        config = self._parse_config(data)
        config.validate()

        self._config = config
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """
        Parse configuration data into Config object.

        Raises:
            ConfigurationError: If a section is not a JSON object
        """
        config = Config()

        # Every section present must be a JSON object
        for section in ('filesystem', 'streams', 'storage', 'logging'):
            if section in data and not isinstance(data[section], dict):
                raise ConfigurationError(
                    f"Configuration section must be a JSON object: {section}",
                    key=section
                )

        if 'filesystem' in data:
            fs_data = data['filesystem']
            config.filesystem = FilesystemConfig(
                key_prefix=fs_data.get('key_prefix', config.filesystem.key_prefix),
                default_encoding=fs_data.get('default_encoding', config.filesystem.default_encoding),
                preserve_created=fs_data.get('preserve_created', config.filesystem.preserve_created),
            )

        if 'streams' in data:
            stream_data = data['streams']
            config.streams = StreamConfig(
                high_water_mark=stream_data.get('high_water_mark', config.streams.high_water_mark),
            )

        if 'storage' in data:
            storage_data = data['storage']
            config.storage = StorageConfig(
                backend=storage_data.get('backend', config.storage.backend),
                path=storage_data.get('path', config.storage.path),
            )

        if 'logging' in data:
            log_data = data['logging']
            config.logging = LoggingConfig(
                level=log_data.get('level', config.logging.level),
                log_file=log_data.get('log_file', config.logging.log_file),
                console_output=log_data.get('console_output', config.logging.console_output),
            )

        return config

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'streams.high_water_mark')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        obj: Any = self._config

        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        The change is validated but not persisted to disk.

        Args:
            key: Dot-notation key (e.g., 'filesystem.key_prefix')
            value: Value to set

        Raises:
            ConfigurationError: If the key is unknown or the value is invalid
        """
        parts = key.split('.')
        obj: Any = self._config

        # Walk dataclass fields only
        for part in parts:
            if not is_dataclass(obj) or part not in {f.name for f in fields(obj)}:
                raise ConfigurationError(f"Invalid configuration key: {key}", key=key)
            parent, obj = obj, getattr(obj, part)

        if is_dataclass(obj):
            raise ConfigurationError(
                f"Cannot replace configuration section: {key}",
                key=key
            )

        final_key = parts[-1]
        previous = obj
        setattr(parent, final_key, value)
        try:
            self._config.validate()
        except Exception:
            setattr(parent, final_key, previous)
            raise

    def reload(self, config_path: str) -> Config:
        """Reload configuration from file."""
        return self.load(config_path)

    def reset(self) -> None:
        """Restore the default configuration."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, (list, tuple)):
                return [dataclass_to_dict(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: dataclass_to_dict(v) for k, v in obj.items()}
            return obj

        return dataclass_to_dict(self._config)


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    return ConfigLoader().config
