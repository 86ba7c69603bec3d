"""Configuration management with validation."""
import os
import json
from typing import Dict, Any, List, Optional
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum
import logging

logger = logging.getLogger(__name__)

DEFAULT_SOURCES_FILE = "podcast_sources.txt"
DEFAULT_MEMORY_FILE = "podcasts_memory.txt"
DEFAULT_USER_AGENT = "podgrab/0.1 (+https://pypi.org/project/podgrab/)"


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class DownloadConfig:
    """Settings for fetching feeds and episode enclosures."""
    timeout: float = 60.0
    chunk_size: int = 64 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    write_tags: bool = True
    show_progress: bool = True

    def validate(self) -> List[str]:
        """Validate download configuration."""
        errors = []

        if self.timeout <= 0 or self.timeout > 3600:
            errors.append("Download timeout must be between 0 and 3600 seconds")

        if self.chunk_size < 1024:
            errors.append("Download chunk size must be at least 1024 bytes")

        if not self.user_agent.strip():
            errors.append("User agent must not be empty")

        return errors


@dataclass
class Config:
    """Main configuration class."""
    # Files and directories
    sources_file: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_SOURCES_FILE)
    memory_file: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_MEMORY_FILE)
    dump_dir: Path = field(default_factory=lambda: Path.cwd())
    log_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")

    download: DownloadConfig = field(default_factory=DownloadConfig)

    # General settings
    log_level: LogLevel = LogLevel.INFO
    dry_run: bool = False
    profile: str = "default"

    def validate(self) -> List[str]:
        """Validate entire configuration."""
        errors: List[str] = []

        errors.extend(self.download.validate())

        if self.dump_dir.exists() and not self.dump_dir.is_dir():
            errors.append(f"Destination {self.dump_dir} is not a directory")

        if self.memory_file.is_dir():
            errors.append(f"Memory file {self.memory_file} is a directory")

        if self.log_dir.exists() and not self.log_dir.is_dir():
            errors.append(f"Log directory {self.log_dir} is not a directory")

        return errors


class ConfigurationError(Exception):
    """Configuration validation error."""
    pass


_PATH_KEYS = {"sources_file", "memory_file", "dump_dir", "log_dir"}
_BOOL_KEYS = {"dry_run", "write_tags", "show_progress"}


class ConfigManager:
    """Manages configuration loading, validation, and environment overrides."""

    def __init__(self, profile: Optional[str] = None):
        self.profile = profile or os.getenv("PODGRAB_PROFILE", "default")
        self.config = Config(profile=self.profile)
        self._load_configuration()
        self._apply_environment_overrides()
        self._validate_configuration()

    def _load_configuration(self):
        """Load configuration from file if it exists."""
        config_dir = Path.cwd() / "config"

        base_config_file = config_dir / "config.json"
        if base_config_file.exists():
            self._load_from_file(base_config_file)

        if self.profile != "default":
            profile_config_file = config_dir / f"config.{self.profile}.json"
            if profile_config_file.exists():
                self._load_from_file(profile_config_file)

    def _load_from_file(self, config_file: Path):
        """Load configuration from JSON file."""
        try:
            with open(config_file, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, FileNotFoundError) as e:
            logger.warning("Failed to load config from %s: %s", config_file, e)
            return

        try:
            self._update_config_from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Invalid value in {config_file}: {e}") from e
        logger.info("Loaded configuration from %s", config_file)

    def _update_config_from_dict(self, data: Dict[str, Any]):
        """Update configuration from dictionary."""
        if "download" in data:
            for key, value in data["download"].items():
                if hasattr(self.config.download, key):
                    self._set_config_value(self.config.download, key, value)

        for key, value in data.items():
            if key in ("download", "profile"):
                continue
            if hasattr(self.config, key):
                self._set_config_value(self.config, key, value)

    def _apply_environment_overrides(self):
        """Apply environment variable overrides."""
        env_mappings = {
            "PODGRAB_SOURCES": ("", "sources_file"),
            "PODGRAB_MEMORY": ("", "memory_file"),
            "PODGRAB_DUMP_DIR": ("", "dump_dir"),
            "PODGRAB_LOG_DIR": ("", "log_dir"),
            "PODGRAB_LOG_LEVEL": ("", "log_level"),
            "PODGRAB_DRY_RUN": ("", "dry_run"),
            "PODGRAB_TIMEOUT": ("download", "timeout"),
            "PODGRAB_USER_AGENT": ("download", "user_agent"),
            "PODGRAB_WRITE_TAGS": ("download", "write_tags"),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue

            try:
                if section:
                    config_section = getattr(self.config, section)
                    self._set_config_value(config_section, key, value)
                else:
                    self._set_config_value(self.config, key, value)

                logger.info("Applied environment override: %s", env_var)

            except (ValueError, AttributeError) as e:
                logger.warning("Invalid environment variable %s=%s: %s", env_var, value, e)

    def _set_config_value(self, obj, key, value):
        """Set configuration value with type conversion."""
        if key in _PATH_KEYS:
            setattr(obj, key, Path(value).expanduser())
        elif key in _BOOL_KEYS:
            if isinstance(value, bool):
                setattr(obj, key, value)
            else:
                setattr(obj, key, str(value).lower() in ["true", "1", "yes"])
        elif key == "log_level":
            setattr(obj, key, LogLevel(str(value).upper()))
        elif key == "timeout":
            setattr(obj, key, float(value))
        elif key == "chunk_size":
            setattr(obj, key, int(value))
        else:
            setattr(obj, key, value)

    def _validate_configuration(self):
        """Validate configuration and raise errors for critical issues."""
        errors = self.config.validate()

        if errors:
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(errors))

        logger.debug("Configuration validation passed")

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "profile": self.profile,
            "sources_file": str(self.config.sources_file),
            "memory_file": str(self.config.memory_file),
            "dump_dir": str(self.config.dump_dir),
            "log_dir": str(self.config.log_dir),
            "log_level": self.config.log_level.value,
            "dry_run": self.config.dry_run,
            "download": {
                "timeout": self.config.download.timeout,
                "chunk_size": self.config.download.chunk_size,
                "user_agent": self.config.download.user_agent,
                "write_tags": self.config.download.write_tags,
                "show_progress": self.config.download.show_progress,
            },
        }
