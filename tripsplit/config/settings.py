"""
Configuration Management for tripsplit

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine functions accept explicit overrides (e.g. ``epsilon=``) and
fall back to these values when none are given.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Settlement engine and report configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Balances within epsilon of zero count as settled
    epsilon: Decimal = Field(
        default=Decimal("0.01"),
        gt=0,
        le=Decimal("1"),
        description="Tolerance below which a balance is treated as settled"
    )
    currency_symbol: str = Field(
        default="₹",
        max_length=5,
        description="Symbol used when formatting amounts"
    )

    # Display limits
    contributing_events_limit: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Expenses attached to each settlement instruction"
    )
    share_text_expense_limit: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Expense titles listed per settlement line in share text"
    )
    breakdown_notes_limit: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Notes kept per participant in the cost breakdown"
    )

    # Sanity checks
    max_event_amount: Decimal = Field(
        default=Decimal("1000000"),
        gt=0,
        description="Amounts above this are flagged for review"
    )

    date_format: str = Field(
        default="%d %b %Y",
        description="strftime format used in share text"
    )

    @field_validator('currency_symbol')
    @classmethod
    def validate_currency_symbol(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Currency symbol cannot be blank")
        return v


class LoggingSettings(BaseSettings):
    """structlog output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines (False renders for the console)"
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
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
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

    Returns a dict of {setting_name: is_valid}, with an ``<name>_error``
    entry describing each failure.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    try:
        _ = settings.logging
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)

    return results
