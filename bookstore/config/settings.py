"""
Configuration Management for Bookstore Console

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Where the data lives, how loud the logs are and what the bootstrap
account looks like are all visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Record and audit file locations."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKSTORE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".",
        description="Directory holding the record files"
    )
    accounts_file: str = Field(
        default="accounts.json",
        description="File name of the account store"
    )
    books_file: str = Field(
        default="books.json",
        description="File name of the book store"
    )
    finance_file: str = Field(
        default="finance.json",
        description="File name of the ledger"
    )
    audit_file: str = Field(
        default="audit.jsonl",
        description="File name of the append-only audit trail"
    )
    save_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failing write is attempted"
    )

    @field_validator('accounts_file', 'books_file', 'finance_file', 'audit_file')
    @classmethod
    def validate_plain_file_name(cls, v: str) -> str:
        """File names are relative to data_dir and must not escape it."""
        if not v or Path(v).name != v:
            raise ValueError(f"Expected a plain file name, got: {v!r}")
        return v

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOKSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Minimum level written to the structured log (stderr)"
    )

    # Wire contract
    invalid_marker: str = Field(
        default="Invalid",
        min_length=1,
        description="Line printed for every rejected command"
    )

    # Bootstrap account, created when no account store exists yet
    root_user_id: str = Field(
        default="root",
        pattern=r"^[A-Za-z0-9_]{1,30}$",
    )
    root_password: str = Field(
        default="sjtu",
        pattern=r"^[A-Za-z0-9_]{1,30}$",
    )
    root_username: str = Field(
        default="root",
        min_length=1,
        max_length=30,
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
