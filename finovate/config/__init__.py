"""Configuration package."""

from finovate.config.settings import (
    AppSettings,
    DocumentSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "DocumentSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
