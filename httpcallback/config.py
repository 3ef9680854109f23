"""
Configuration and settings for the httpcallback service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = "config.toml"


class MongoSettings(BaseModel):
    use_mongo: bool = False
    server_url: str = "mongodb://localhost:27017"
    database_name: str = "httpcallback"
    connect_timeout_ms: int = Field(default=5000, ge=1)


class HostSettings(BaseModel):
    hostname: str = "localhost"


class Settings(BaseSettings):
    """
    Settings from, highest priority first: constructor kwargs, environment
    (HTTPCALLBACK_ prefix, e.g. HTTPCALLBACK_MONGO__USE_MONGO=true), .env,
    then the TOML config file.
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTPCALLBACK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        toml_file=DEFAULT_CONFIG_PATH,
    )

    api_prefix: str = Field(default="")
    log_level: str = Field(default="INFO")

    mongo: MongoSettings = Field(default_factory=MongoSettings)
    host: HostSettings = Field(default_factory=HostSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build settings, reading the TOML file at config_path if it exists."""
    if config_path is None or config_path == DEFAULT_CONFIG_PATH:
        return Settings()

    class FileSettings(Settings):
        model_config = SettingsConfigDict(toml_file=config_path)

    return FileSettings()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
