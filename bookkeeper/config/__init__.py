"""Configuration package."""

from bookkeeper.config.settings import (
    AppSettings,
    LedgerApiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LedgerApiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
