"""
Library settings for botconfig.

Settings are loaded from:
1. Environment variables (highest priority), e.g. BOTCONFIG_IDS__SPACE=512
2. botconfig.yaml file
3. Default values (lowest priority)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
import yaml


class IdSettings(BaseModel):
    """
    Service id allocation.

    Ids are decimal strings of integers in [0, space). Allocation draws at
    random up to max_attempts times before picking from the free ids
    directly, and fails once every id is taken.
    """

    space: int = Field(default=256, ge=1)
    max_attempts: int = Field(default=64, ge=1)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_format: bool = False
    file: str | None = None


class Settings(BaseSettings):
    """Main settings class that combines all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="BOTCONFIG_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    file_extension: str = ".bot"  # Used by folder discovery
    encoding: str = "utf-8"
    indent: int = 2  # JSON indentation of written bot files
    ids: IdSettings = Field(default_factory=IdSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; the environment overrides them
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def load_yaml_config(path: Path | None = None) -> dict:
    """Load settings from a YAML file."""
    if path is None:
        candidates = [
            Path("botconfig.yaml"),
            Path("config/botconfig.yaml"),
            Path.home() / ".botconfig.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path and path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings(**load_yaml_config())


def reload_settings() -> Settings:
    """Force reload of settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
