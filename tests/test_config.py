"""Tests for configuration management system."""
import pytest
import tempfile
import json
from pathlib import Path
from unittest.mock import patch
import os

from podgrab.config.manager import (
    ConfigManager,
    Config,
    ConfigurationError,
    DownloadConfig,
    LogLevel,
)


class TestConfig:
    def test_config_defaults(self):
        """Test default configuration values."""
        config = Config()

        assert config.sources_file.name == "podcast_sources.txt"
        assert config.memory_file.name == "podcasts_memory.txt"
        assert config.log_level == LogLevel.INFO
        assert config.dry_run is False
        assert config.profile == "default"
        assert config.download.write_tags is True
        assert config.download.chunk_size == 64 * 1024

    def test_download_config_validation(self):
        """Test invalid download settings are reported."""
        settings = DownloadConfig(timeout=0, chunk_size=10, user_agent=" ")
        errors = settings.validate()
        assert len(errors) == 3

    def test_dump_dir_must_be_directory(self, tmp_path):
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("x")
        config = Config(dump_dir=not_a_dir, log_dir=tmp_path / "logs")
        assert any("not a directory" in e for e in config.validate())

    def test_validate_does_not_create_log_dir(self, tmp_path):
        config = Config(dump_dir=tmp_path, log_dir=tmp_path / "logs")
        assert config.validate() == []
        assert not (tmp_path / "logs").exists()

    def test_log_dir_must_be_directory(self, tmp_path):
        not_a_dir = tmp_path / "logs"
        not_a_dir.write_text("x")
        config = Config(dump_dir=tmp_path, log_dir=not_a_dir)
        assert any("Log directory" in e for e in config.validate())


class TestConfigManager:
    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.config_dir = self.temp_dir / "config"
        self.config_dir.mkdir()

    def test_config_manager_initialization(self):
        """Test config manager initializes with defaults."""
        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager()

            assert manager.profile == "default"
            assert isinstance(manager.config, Config)
            assert manager.config.memory_file == self.temp_dir / "podcasts_memory.txt"

    def test_load_configuration_from_file(self):
        """Test loading configuration from JSON file."""
        config_data = {
            "log_level": "DEBUG",
            "dry_run": True,
            "dump_dir": str(self.temp_dir / "episodes"),
            "download": {
                "timeout": 15,
                "write_tags": False,
            },
        }

        config_file = self.config_dir / "config.json"
        with open(config_file, 'w') as f:
            json.dump(config_data, f)

        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager()

            assert manager.config.log_level == LogLevel.DEBUG
            assert manager.config.dry_run is True
            assert manager.config.dump_dir == self.temp_dir / "episodes"
            assert manager.config.download.timeout == 15.0
            assert manager.config.download.write_tags is False

    def test_profile_specific_configuration(self):
        """Test profile-specific configuration loading."""
        base_config = {"download": {"timeout": 30}}
        with open(self.config_dir / "config.json", 'w') as f:
            json.dump(base_config, f)

        dev_config = {"download": {"timeout": 5}, "log_level": "DEBUG"}
        with open(self.config_dir / "config.development.json", 'w') as f:
            json.dump(dev_config, f)

        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager(profile="development")

            assert manager.config.download.timeout == 5.0
            assert manager.config.log_level == LogLevel.DEBUG
            assert manager.config.profile == "development"

    def test_malformed_file_is_ignored(self):
        (self.config_dir / "config.json").write_text("{not json")
        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager()
            assert manager.config.download.timeout == 60.0

    @patch.dict(os.environ, {
        'PODGRAB_MEMORY': '/tmp/podgrab-memory.txt',
        'PODGRAB_LOG_LEVEL': 'error',
        'PODGRAB_DRY_RUN': 'yes',
        'PODGRAB_TIMEOUT': '12.5',
    })
    def test_environment_overrides(self):
        """Test environment variable overrides."""
        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager()

            assert manager.config.memory_file == Path('/tmp/podgrab-memory.txt')
            assert manager.config.log_level == LogLevel.ERROR
            assert manager.config.dry_run is True
            assert manager.config.download.timeout == 12.5

    def test_invalid_environment_variables(self):
        """Test handling of invalid environment variables."""
        with patch.dict(os.environ, {'PODGRAB_TIMEOUT': 'soon'}):
            with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
                manager = ConfigManager()

                assert manager.config.download.timeout == 60.0

    def test_configuration_validation_failure(self):
        """Test configuration validation with invalid values."""
        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager()

            manager.config.download.chunk_size = 1

            with pytest.raises(ConfigurationError):
                manager._validate_configuration()

    def test_invalid_file_values_raise(self):
        with open(self.config_dir / "config.json", 'w') as f:
            json.dump({"download": {"timeout": -1}}, f)

        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            with pytest.raises(ConfigurationError):
                ConfigManager()

    @pytest.mark.parametrize("data", [
        {"log_level": "verbose"},
        {"download": None},
        {"dump_dir": 5},
        {"download": {"timeout": "soon"}},
        ["not", "an", "object"],
    ])
    def test_invalid_file_types_raise(self, data):
        """Test badly typed values in a config file are reported."""
        with open(self.config_dir / "config.json", 'w') as f:
            json.dump(data, f)

        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            with pytest.raises(ConfigurationError, match="Invalid value"):
                ConfigManager()

    def test_to_dict_export(self):
        """Test configuration export to dictionary."""
        with patch('podgrab.config.manager.Path.cwd', return_value=self.temp_dir):
            manager = ConfigManager()

            config_dict = manager.to_dict()

            assert config_dict["profile"] == "default"
            assert config_dict["log_level"] == "INFO"
            assert config_dict["dry_run"] is False
            assert config_dict["download"]["write_tags"] is True
            assert config_dict["memory_file"] == str(self.temp_dir / "podcasts_memory.txt")


class TestConfigurationError:
    def test_configuration_error(self):
        """Test ConfigurationError exception."""
        error = ConfigurationError("Test error message")
        assert str(error) == "Test error message"
        assert isinstance(error, Exception)
