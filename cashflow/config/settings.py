"""
Configuration Management for the Cash-Flow Forecast

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Forecast tuning (horizon, caution threshold) and the storage backend
settings live side by side so a deployment can see every knob at once.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForecastSettings(BaseSettings):
    """Forecast engine tuning."""

    model_config = SettingsConfigDict(
        env_prefix="FORECAST_",
        extra="ignore"
    )

    horizon_months: int = Field(
        default=6,
        ge=1,
        le=60,
        description="How many months ahead recurring events are expanded"
    )
    caution_threshold: int = Field(
        default=10000,
        ge=0,
        description="Balances below this (but not negative) are flagged as caution"
    )
    upcoming_payment_count: int = Field(
        default=3,
        ge=1,
        le=20,
        description="How many upcoming payments to surface"
    )
    urgent_payment_days: int = Field(
        default=3,
        ge=0,
        le=31,
        description="A payment due within this many days is urgent"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets ledger source configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to read"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet holding ledger transactions"
    )
    payment_sources_sheet_name: str = Field(
        default="PaymentSources",
        description="Name of the sheet holding accounts and cards"
    )
    recurring_sheet_name: str = Field(
        default="Recurring",
        description="Name of the sheet holding recurring definitions"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running a projection."
            )
        return v


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

    currency_symbol: str = Field(
        default="¥",
        max_length=3,
        description="Symbol used when amounts are rendered into text"
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def forecast(self) -> ForecastSettings:
        return ForecastSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.forecast
        results["forecast"] = True
    except Exception as e:
        results["forecast"] = False
        results["forecast_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
