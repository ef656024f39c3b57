"""
Configuration Management for Balance Track

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Configuration only supplies DEFAULTS (currency for new
snapshots, the fallback cutoff day, labels). Per-user billing settings live
inside the snapshot itself so that a snapshot is self-describing.
"""

from functools import cached_property, lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerDefaults(BaseSettings):
    """Defaults used by the projection engine and snapshot editor."""

    model_config = SettingsConfigDict(
        env_prefix="BALANCE_TRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency: str = Field(
        default="TRY",
        min_length=1,
        max_length=10,
        description="Currency label for snapshots that do not set one"
    )
    default_cutoff_day: int = Field(
        default=19,
        ge=1,
        le=31,
        description="Statement cutoff day when the absolute method has no value"
    )
    installment_label_template: str = Field(
        default="{label} (Installment {index}/{months})",
        description="Label annotation for projected installment entries"
    )

    @field_validator('installment_label_template')
    @classmethod
    def validate_label_template(cls, v: str) -> str:
        """Template must be renderable with the installment placeholders."""
        try:
            v.format(label="", index=1, months=2)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Invalid installment label template: {e}") from e
        return v


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BALANCE_TRACK_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Log level for the balance_track loggers"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False = console renderer)"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Each section is read from
    the environment once, on first access, and then reused until
    get_settings.cache_clear() drops this object.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @cached_property
    def ledger(self) -> LedgerDefaults:
        return LedgerDefaults()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for sections that failed to load.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except ValueError as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    try:
        _ = settings.logging
        results["logging"] = True
    except ValueError as e:
        results["logging"] = False
        results["logging_error"] = str(e)

    return results
