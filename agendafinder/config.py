"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
import os
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

API_KEY_ENV_VAR = "AGENDA_RECORD_STORE_KEY"


class DefaultsConfig(BaseModel):
    """Scheduling constants, kept in one place."""
    service_duration_minutes: int = 30
    booking_duration_minutes: int = 30
    lead_time_minutes: int = 30
    advance_booking_days: int = 30
    calendar_max_days: int = 30

    @field_validator(
        "service_duration_minutes",
        "booking_duration_minutes",
        "advance_booking_days",
        "calendar_max_days",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value

    @field_validator("lead_time_minutes")
    @classmethod
    def validate_lead_time(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"lead_time_minutes cannot be negative, got {value}")
        return value


class StatusConfig(BaseModel):
    """Booking status values as stored in the appointments table."""
    booked: str = "agendamento_confirmado"
    cancelled: str = "agendamento_cancelado"
    # Every value treated as cancelled when detecting conflicts
    cancelled_aliases: List[str] = Field(
        default_factory=lambda: ["agendamento_cancelado", "cancelado", "cancelled", "canceled"]
    )
    completed: str = "atendimento_concluido"

    @model_validator(mode="after")
    def include_cancelled(self) -> "StatusConfig":
        """The status written on cancel must itself count as cancelled."""
        aliases = [a.lower() for a in self.cancelled_aliases]
        if self.cancelled.lower() not in aliases:
            aliases.append(self.cancelled.lower())
        self.cancelled_aliases = aliases
        return self


class RecordStoreConfig(BaseModel):
    url: str = ""
    api_key: str = ""
    timeout_seconds: float = 30

    def resolved_api_key(self) -> str:
        """Key from the config file, else from the environment."""
        return self.api_key or os.environ.get(API_KEY_ENV_VAR, "")


class AppConfig(BaseModel):
    """Application configuration."""
    record_store: RecordStoreConfig = Field(default_factory=RecordStoreConfig)
    timezone: str = "America/Sao_Paulo"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    statuses: StatusConfig = Field(default_factory=StatusConfig)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

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
