"""Configuration management system."""
from .manager import (
    ConfigManager,
    Config,
    ConfigurationError,
    DownloadConfig,
    LogLevel,
    DEFAULT_MEMORY_FILE,
    DEFAULT_SOURCES_FILE,
)

__all__ = [
    'ConfigManager',
    'Config',
    'ConfigurationError',
    'DownloadConfig',
    'LogLevel',
    'DEFAULT_MEMORY_FILE',
    'DEFAULT_SOURCES_FILE',
]
