"""Configuration management for focusbell."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, field_validator

TOKEN_ENV_VAR = "FOCUSBELL_TOKEN"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class TimerSettings(BaseModel):
    """Defaults applied when a session is started without arguments."""

    default_work_minutes: int = Field(default=25)
    default_break_minutes: int = Field(default=5)
    default_cycles: int = Field(default=4)


class VoiceSettings(BaseModel):
    """Audio notification settings. Timeouts are in seconds."""

    join_timeout: float = Field(default=10.0, gt=0)
    ready_recovery_timeout: float = Field(default=3.0, gt=0)
    playback_timeout: float = Field(default=8.0, gt=0)
    reconnect_timeout: float = Field(default=5.0, gt=0)
    volume: float = Field(default=0.4, ge=0, le=1)
    sounds_dir: str | None = Field(default=None)
    sound_extension: str = Field(default=".mp3")


class MaintenanceSettings(BaseModel):
    """Intervals of the background sweeps, in seconds."""

    session_sweep_interval: float = Field(default=5 * 60, gt=0)
    health_check_interval: float = Field(default=2 * 60, gt=0)


class AppConfig(BaseModel):
    """Main configuration."""

    timer: TimerSettings = Field(default_factory=TimerSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    maintenance: MaintenanceSettings = Field(default_factory=MaintenanceSettings)
    log_level: LogLevel = Field(default="INFO")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept level names in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class ConfigManager:
    """Loads and saves the focusbell configuration file."""

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = config_dir or Path(user_config_dir("focusbell"))
        self.config_file = self.config_dir / "config.json"
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, writing defaults on first run."""
        try:
            self._config = AppConfig.model_validate_json(
                self.config_file.read_text(encoding="utf-8")
            )
        except FileNotFoundError:
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e
        return self._config

    def save_config(self) -> None:
        """Save the current configuration to disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(
            self.config.model_dump_json(indent=4), encoding="utf-8"
        )


@lru_cache(maxsize=1)
def get_config_manager() -> ConfigManager:
    """Get the process-wide config manager."""
    return ConfigManager()


def get_token() -> str | None:
    """Return the chat-platform login token, or None when unset or blank."""
    token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    return token or None
