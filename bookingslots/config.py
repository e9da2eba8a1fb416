"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import Optional

import yaml
from pendulum import FixedTimezone
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.timezone import DEFAULT_UTC_OFFSET_HOURS, governing_timezone

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DefaultWindowConfig(BaseModel):
    """Working hours assumed for users who never configured a weekday."""
    start_hour: int = 9
    end_hour: int = 18

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultWindowConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_start_time(self) -> time:
        return time(hour=self.start_hour, minute=0)

    def get_end_time(self) -> time:
        return time(hour=self.end_hour, minute=0)


class AppConfig(BaseModel):
    """Application configuration."""
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS
    default_window: DefaultWindowConfig = Field(default_factory=DefaultWindowConfig)
    data_file: Optional[Path] = None
    log_level: str = "WARNING"

    @field_validator("utc_offset_hours")
    @classmethod
    def validate_offset(cls, value: int) -> int:
        if not -12 <= value <= 14:
            raise ValueError(f"utc_offset_hours must be between -12 and 14, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value}")
        return level

    def tzinfo(self) -> FixedTimezone:
        """The organisation-wide timezone working hours are read in."""
        return governing_timezone(self.utc_offset_hours)

    def resolve_data_file(self, config_path: Optional[Path] = None) -> Path:
        """
        Resolve the fixture file, relative paths being taken from the config file's folder.

        Raises:
            ValueError: If no data file is configured
        """
        if self.data_file is None:
            raise ValueError("No data_file configured. Set data_file in config.yaml or pass --data.")
        if self.data_file.is_absolute() or config_path is None:
            return self.data_file
        return config_path.parent / self.data_file

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
