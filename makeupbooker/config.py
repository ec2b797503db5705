"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import Literal

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .adapters.message_generator import ConfirmationMessenger, OpenAIMessenger, TemplateMessenger


class MessengerConfig(BaseModel):
    """Confirmation message settings."""
    provider: Literal["template", "openai"] = "template"
    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"


class AppConfig(BaseModel):
    """Application configuration."""
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".makeupbooker")
    timezone: str = "Asia/Taipei"
    school_name: str = "Sesame Street"
    messenger: MessengerConfig = Field(default_factory=MessengerConfig)
    log_level: str = "WARNING"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance; defaults when the file does not exist

        Raises:
            ValueError: If config is invalid
        """
        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def build_messenger(self) -> ConfirmationMessenger:
        """Create the configured confirmation messenger."""
        if self.messenger.provider == "openai":
            return OpenAIMessenger(
                model=self.messenger.model,
                api_key=os.getenv(self.messenger.api_key_env),
                school_name=self.school_name,
            )
        return TemplateMessenger()


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
