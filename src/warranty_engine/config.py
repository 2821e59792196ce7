"""
Runtime configuration.
Settings are read once from environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_BASE_URL = "http://localhost:4000"
DEFAULT_API_TOKEN = "mock-token"
DEFAULT_MODEL_PROVIDER = "chatgpt"


def _get_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_float_env(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


class Settings(BaseModel):
    """Engine settings (API endpoint, credentials, local state)."""

    model_config = ConfigDict(frozen=True)

    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: str = DEFAULT_API_TOKEN
    request_timeout: float = Field(default=10.0, gt=0)
    state_dir: Path = Path(".warranty_engine")
    log_level: str = "INFO"
    ai_provider: str = DEFAULT_MODEL_PROVIDER

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``API_*``, ``WARRANTY_*``, ``LOG_LEVEL`` and ``MODEL_PROVIDER``."""
        return cls(
            api_base_url=_get_str_env("API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            api_token=_get_str_env("API_TOKEN", DEFAULT_API_TOKEN),
            request_timeout=_get_float_env("API_TIMEOUT_SECONDS", 10.0),
            state_dir=Path(_get_str_env("WARRANTY_STATE_DIR", ".warranty_engine")),
            log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
            ai_provider=_get_str_env("MODEL_PROVIDER", DEFAULT_MODEL_PROVIDER),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process settings."""
    return Settings.from_env()
