"""
Configuration management for mcpjson.

Settings come from (lowest to highest precedence) built-in defaults,
TOML files, ``MCPJSON_*`` environment variables and explicit overrides
such as the ``--config-dir`` CLI option.
"""

import os
from pathlib import Path
from typing import Any, List, Optional, Union

import toml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcpjson.core.exceptions import FileError, ValidationError
from mcpjson.utils.logging import get_logger

logger = get_logger(__name__)

PROFILES_DIR_NAME = "profiles"
SERVERS_DIR_NAME = "servers"
FILE_EXTENSION = ".json"

DEFAULT_CONFIG_FILES = [
    "~/.config/mcpjson/config.toml",
    "./.mcpjson.toml",
]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="File logging level")
    console_level: str = Field(default="WARNING", description="Console logging level")
    format_type: str = Field(default="text", description="Log format (text/json)")
    file: Optional[str] = Field(default=None, description="Log file path")
    enable_rich: bool = Field(default=True, description="Enable Rich console output")

    @field_validator("level", "console_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("format_type")
    @classmethod
    def validate_format_type(cls, v: str) -> str:
        """Validate format type."""
        if v not in ["text", "json"]:
            raise ValueError(f"Invalid format type: {v}")
        return v


class Settings(BaseSettings):
    """Main configuration class."""

    config_dir: str = Field(default="~/.mcpjson", description="Base configuration directory")
    default_profile: str = Field(default="default", description="Profile used when none is given")
    default_mcp_config: str = Field(
        default="~/.mcp.json",
        description="Target MCP configuration file for apply/save",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="MCPJSON_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    def get_config_dir(self) -> Path:
        """Get configuration directory path."""
        return Path(os.path.expanduser(self.config_dir))

    @property
    def profiles_dir(self) -> Path:
        return self.get_config_dir() / PROFILES_DIR_NAME

    @property
    def servers_dir(self) -> Path:
        return self.get_config_dir() / SERVERS_DIR_NAME

    def get_default_mcp_config_path(self) -> Path:
        return Path(os.path.expanduser(self.default_mcp_config))

    def get_log_file(self) -> Optional[Path]:
        """Get log file path, relative paths resolved against the config dir."""
        if self.logging.file:
            log_path = Path(os.path.expanduser(self.logging.file))
            if not log_path.is_absolute():
                log_path = self.get_config_dir() / log_path
            return log_path
        return None

    def ensure_directories(self) -> None:
        """Create the base, profiles and servers directories."""
        for directory in (self.get_config_dir(), self.profiles_dir, self.servers_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileError(f"Failed to create directory {directory}: {e}", str(directory))


class ConfigManager:
    """Configuration manager with hierarchical loading."""

    def __init__(self):
        self._settings: Optional[Settings] = None

    def load_config(
        self,
        config_files: Optional[List[Union[str, Path]]] = None,
        **overrides: Any,
    ) -> Settings:
        """
        Load configuration from multiple sources.

        Args:
            config_files: List of TOML configuration files to load
            **overrides: Configuration overrides (None values are ignored)

        Returns:
            Loaded settings

        Raises:
            ValidationError: If a setting has an invalid value
        """
        if self._settings is not None and not overrides and config_files is None:
            return self._settings

        if config_files is None:
            config_files = DEFAULT_CONFIG_FILES

        config_data: dict = {}

        for config_file in config_files:
            file_path = Path(os.path.expanduser(str(config_file)))
            if file_path.exists():
                try:
                    config_data.update(toml.load(file_path))
                    logger.debug(f"Loaded configuration from {file_path}")
                except (toml.TomlDecodeError, OSError) as e:
                    logger.warning(f"Failed to load config from {file_path}: {e}")

        config_data.update({k: v for k, v in overrides.items() if v is not None})

        # Environment variables take precedence over file values
        env_settings = self._build_settings()
        env_keys = {key.upper() for key in os.environ}
        for field_name in Settings.model_fields:
            if overrides.get(field_name) is not None:
                continue
            prefix = f"MCPJSON_{field_name}".upper()
            if any(key == prefix or key.startswith(prefix + "__") for key in env_keys):
                config_data[field_name] = getattr(env_settings, field_name)

        self._settings = self._build_settings(**config_data)
        return self._settings

    @staticmethod
    def _build_settings(**values: Any) -> Settings:
        try:
            return Settings(**values)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid configuration: {e}", error_code="INVALID_CONFIG")

    def get_config(self) -> Settings:
        """Get current configuration."""
        if self._settings is None:
            return self.load_config()
        return self._settings

    def reload_config(self, **overrides: Any) -> Settings:
        """Reload configuration."""
        self._settings = None
        return self.load_config(**overrides)


# Global configuration manager
_config_manager = ConfigManager()

# Convenience functions
load_config = _config_manager.load_config
get_config = _config_manager.get_config
reload_config = _config_manager.reload_config
