"""Configuration package."""

from balance_track.config.settings import (
    LedgerDefaults,
    LoggingSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "LedgerDefaults",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
