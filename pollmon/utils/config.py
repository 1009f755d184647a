"""
pollmon Configuration Module.

Centralizes default settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env into os.environ at import time so the nested sections see it
_env_file = Path(__file__).parent.parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


class WatcherSettings(BaseSettings):
    """Default values for a polling watch session."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    delay: float = Field(default=2.0, ge=0.0, description="Seconds between callback invocations")
    recursive: bool = Field(default=True)
    poll_interval: float = Field(default=0.5, ge=0.0, description="Seconds to sleep between passes")
    follow_symlinks: bool = Field(default=True)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Only the two supported renderers are accepted."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError(f"unsupported log format: {v!r}")
        return v


class Settings(BaseSettings):
    """Main settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="pollmon")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")

    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings.

    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    return Settings()
