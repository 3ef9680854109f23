"""
Settings for tests that ignore the developer's environment, .env and config.toml.
"""

import os
from unittest.mock import patch

from pydantic_settings import SettingsConfigDict

from httpcallback.config import Settings

ENV_PREFIX = Settings.model_config["env_prefix"]


class IsolatedSettings(Settings):
    model_config = SettingsConfigDict(env_file=None, toml_file=None)


def clean_environ() -> dict:
    return {k: v for k, v in os.environ.items() if not k.upper().startswith(ENV_PREFIX)}


def isolated_settings(**overrides) -> Settings:
    with patch.dict(os.environ, clean_environ(), clear=True):
        return IsolatedSettings(**overrides)
