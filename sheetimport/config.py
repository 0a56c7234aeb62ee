"""
Configuration module
====================

Loads runtime settings from environment variables and an optional ``.env``
file. Every variable carries the ``SHEETIMPORT_`` prefix, e.g.
``SHEETIMPORT_LOG_LEVEL=DEBUG``.
"""

from typing import Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """
    Application settings.

    Attributes:
        LOG_LEVEL: level of the ``sheetimport`` logger
        PROFILES_DIR: extra directory searched for import profile YAML files
            before the bundled ``sheetimport/profiles``
        COUNTRY_FUZZY_THRESHOLD: minimum rapidfuzz ratio (0-100) accepted by
            the fuzzy tier of the country resolver
        RECORD_KEY_SEPARATOR: separator joining record key components
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEETIMPORT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"
    PROFILES_DIR: Optional[str] = None
    COUNTRY_FUZZY_THRESHOLD: float = 88.0
    RECORD_KEY_SEPARATOR: str = "|"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        value = (v or "").strip().upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {v!r}")
        return value

    @field_validator("COUNTRY_FUZZY_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("COUNTRY_FUZZY_THRESHOLD must be between 0 and 100")
        return v

    @field_validator("RECORD_KEY_SEPARATOR")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        if not v:
            raise ValueError("RECORD_KEY_SEPARATOR must not be empty")
        return v


# Cached singleton so the environment is read once per process
_settings_instance = None


def get_settings() -> Settings:
    """Return the cached settings instance, creating it on first use."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_instance
    _settings_instance = None
