"""
kvfs Core Module

Shared infrastructure: configuration, subsystem lifecycle and the
cooperative event loop that paces streams.
"""

from .config_loader import (
    Config,
    ConfigLoader,
    FilesystemConfig,
    StreamConfig,
    StorageConfig,
    LoggingConfig,
    get_config,
)
from .registry import Subsystem, SubsystemState
from .event_loop import EventLoop, TimerEvent

__all__ = [
    # Configuration
    'Config',
    'ConfigLoader',
    'FilesystemConfig',
    'StreamConfig',
    'StorageConfig',
    'LoggingConfig',
    'get_config',
    # Lifecycle
    'Subsystem',
    'SubsystemState',
    # Event loop
    'EventLoop',
    'TimerEvent',
]
