"""
Application configuration loaded from environment variables.

All configuration is validated at startup to fail fast on misconfiguration.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    All settings are loaded from environment variables with the same name.
    Use .env file for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: PostgresDsn = Field(
        description="PostgreSQL connection string with asyncpg driver"
    )

    # Reporting
    reporting_currency: str = Field(
        default="NGN",
        min_length=3,
        max_length=3,
        description="Currency all revenue figures are reported in",
    )
    reporting_timezone: str = Field(
        default="UTC",
        description="IANA timezone that defines calendar-month boundaries",
    )
    exchange_rates: dict[str, Decimal] = Field(
        default_factory=lambda: {"USD": Decimal("1500")},
        description=(
            "Units of reporting currency per one unit of each source currency, "
            'as JSON, e.g. {"USD": "1500", "GBP": "1900"}'
        ),
    )

    # Activity feed
    activity_feed_limit: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of recent activities on the dashboard",
    )

    # Server
    debug: bool = Field(
        default=False,
        description="Enable debug mode with detailed error messages"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )

    @field_validator("reporting_currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        if not value.isalpha():
            raise ValueError(f"Invalid currency code: {value!r}")
        return value.upper()

    @field_validator("reporting_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value!r}") from e
        return value

    @field_validator("exchange_rates")
    @classmethod
    def _positive_rates(cls, value: dict[str, Decimal]) -> dict[str, Decimal]:
        for code, rate in value.items():
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive")
        return {code.upper(): rate for code, rate in value.items()}

    @property
    def tzinfo(self) -> ZoneInfo:
        """Return the reporting timezone as a tzinfo object."""
        return ZoneInfo(self.reporting_timezone)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once at startup and cached for subsequent calls.
    This ensures consistent configuration across the application lifecycle.
    """
    return Settings()
