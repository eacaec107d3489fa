"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every setting has a working default, so the application runs
without any environment at all; variables only override.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SETTINGS_PATH = Path.home() / ".expense_tracker" / "settings.json"


class StorageSettings(BaseSettings):
    """Local key-value settings area used for persistence."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_STORAGE_",
        extra="ignore"
    )

    settings_path: Path = Field(
        default=DEFAULT_SETTINGS_PATH,
        description="Path of the JSON file holding the key-value settings area"
    )
    storage_key: str = Field(
        default="SavedExpenses",
        min_length=1,
        description="Key under which the expense collection is stored"
    )

    @field_validator('settings_path')
    @classmethod
    def expand_settings_path(cls, v: Path) -> Path:
        """Expand ~ so the path can come straight from the environment."""
        return v.expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown in front of amounts"
    )

    # Form validation limits
    allow_future_dates: bool = Field(
        default=False,
        description="Accept expenses dated after today"
    )
    max_description_length: int = Field(
        default=200,
        ge=1,
        le=1000,
        description="Maximum length of an expense description"
    )
    max_notes_length: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Maximum length of expense notes"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
