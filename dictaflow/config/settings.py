"""Configuration for the dictation engine.

Values can be loaded from a YAML file and are validated at startup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from dictaflow.fsm.notifier import DEFAULT_CHANNEL
from dictaflow.utils.result import ConfigError, Err, Ok, Result

CONFIG_FILENAME = "engine.yaml"

VALID_LOG_LEVELS = ("debug", "info", "warn", "warning", "error")
VALID_LOG_FORMATS = ("json", "text")

_CHANNEL_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_:\-./]*$")


@dataclass
class WindowConfig:
    """Main window behavior."""

    # Visibility of the initial idle state
    start_visible: bool = True


@dataclass
class NotificationConfig:
    """State change notification settings."""

    enabled: bool = True
    channel: str = DEFAULT_CHANNEL


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class EngineConfig:
    """
    Complete engine configuration.

    Only the shell around the state machine is configurable; the
    transition table itself is fixed.
    """

    window: WindowConfig = field(default_factory=WindowConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Set at runtime
    config_dir: Optional[Path] = None

    @classmethod
    def from_yaml(cls, path: Path) -> Result["EngineConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field="yaml",
                message=f"Top level must be a mapping, got {type(data).__name__}",
            ))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["EngineConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        for section in ("window", "notifications", "logging"):
            if not isinstance(data.get(section, {}), dict):
                return Err(ConfigError(
                    field=section,
                    message="Must be a mapping",
                ))

        window_data = data.get("window", {})
        window = WindowConfig(
            start_visible=window_data.get("start_visible", True),
        )

        notifications_data = data.get("notifications", {})
        notifications = NotificationConfig(
            enabled=notifications_data.get("enabled", True),
            channel=notifications_data.get("channel", DEFAULT_CHANNEL),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=str(logging_data.get("level", "info")).lower(),
            format=str(logging_data.get("format", "json")).lower(),
        )

        return Ok(cls(
            window=window,
            notifications=notifications,
            logging=logging_config,
        ))

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        for name, value in [
            ("window.start_visible", self.window.start_visible),
            ("notifications.enabled", self.notifications.enabled),
        ]:
            if not isinstance(value, bool):
                return Err(ConfigError(
                    field=name,
                    message=f"Must be true or false, got {value!r}",
                ))

        channel = self.notifications.channel
        if not isinstance(channel, str) or not _CHANNEL_PATTERN.match(channel):
            return Err(ConfigError(
                field="notifications.channel",
                message=f"Invalid channel name: {channel!r}",
            ))

        if self.logging.level not in VALID_LOG_LEVELS:
            return Err(ConfigError(
                field="logging.level",
                message=f"Must be one of {', '.join(VALID_LOG_LEVELS)}, got {self.logging.level}",
            ))
        if self.logging.format not in VALID_LOG_FORMATS:
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be one of {', '.join(VALID_LOG_FORMATS)}, got {self.logging.format}",
            ))

        return Ok(None)


def load_config(config_dir: Path = None) -> Result[EngineConfig, ConfigError]:
    """
    Load configuration from the standard location.

    Reads ``engine.yaml`` from the config directory; defaults are used when
    the file does not exist.

    Args:
        config_dir: Configuration directory (defaults to ./config)

    Returns:
        Result with loaded config or error
    """
    if config_dir is None:
        config_dir = Path("./config")

    config_dir = Path(config_dir)

    config_path = config_dir / CONFIG_FILENAME
    if config_path.exists():
        result = EngineConfig.from_yaml(config_path)
        if result.is_err():
            return result
        config = result.unwrap()
    else:
        config = EngineConfig()

    config.config_dir = config_dir

    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config)
