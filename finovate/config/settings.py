"""
Configuration Management for Finovate

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, document output and the thresholds used by the
aggregation engine are all visible in one place and validated on first use.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINOVATE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".finovate",
        description="Directory holding one JSON file per ledger slot"
    )
    key_prefix: str = Field(
        default="finovate_",
        description="Prefix applied to every slot key"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a slot write is attempted before giving up"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Allow ~ in configured paths."""
        return v.expanduser()


class DocumentSettings(BaseSettings):
    """Receipt / statement / invoice rendering configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINOVATE_DOCUMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    output_dir: Path = Field(
        default=Path.home() / "Finovate",
        description="Where downloaded PDFs are written"
    )
    brand_name: str = Field(
        default="Finovate",
        description="Name printed in document headers and footers"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol prefixed to every amount"
    )
    page_dpi: int = Field(
        default=100,
        ge=72,
        le=300,
        description="Resolution of the rendered A4 pages"
    )
    qr_box_size: int = Field(
        default=8,
        ge=1,
        le=40,
        description="Pixel size of one QR module"
    )

    @field_validator('output_dir')
    @classmethod
    def expand_output_dir(cls, v: Path) -> Path:
        return v.expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINOVATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Upcoming-event projection
    upcoming_horizon_days: int = Field(
        default=30,
        ge=1,
        le=366,
        description="How far ahead upcoming collections/payments are projected"
    )
    urgent_threshold_days: int = Field(
        default=7,
        ge=0,
        description="Events this close are flagged as urgent"
    )

    # Local unlock (not a security control)
    min_password_length: int = Field(
        default=4,
        ge=1,
        description="Minimum length accepted on password reset"
    )

    # Import / export
    export_version: str = Field(
        default="1.0",
        description="Version string written into export documents"
    )

    audit_history_size: int = Field(
        default=500,
        ge=0,
        description="How many audit events are kept in memory"
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

    # Sub-settings are loaded lazily so a broken group only fails its users

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def documents(self) -> DocumentSettings:
        return DocumentSettings()

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

    Returns a dict of {setting_name: is_valid}, plus an
    ``<name>_error`` entry for every group that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "documents", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
