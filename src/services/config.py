"""Runtime configuration for the reconciliation services.

Settings are read from environment variables and an optional .env file:

    DATABASE_URL=sqlite:///./rental_ledger.db
    LOG_LEVEL=INFO
    RECEIPT_TOLERANCE=0.01
    LEDGER_WINDOW_MONTHS=24
"""

import logging
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class FinanceSettings(BaseSettings):
    """Settings loaded from environment variables and .env."""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./rental_ledger.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/reconcile.log", description="Log file path")

    # Ledger
    receipt_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        description="Absolute currency tolerance when classifying a month as full",
    )
    ledger_window_months: int = Field(
        default=24, description="Number of trailing months shown in a lease ledger"
    )

    # Settlement
    settlement_window_months: int = Field(
        default=12, description="Trailing window of expense documents in a settlement"
    )

    def validate(self) -> None:
        """Reject values the calculators cannot work with."""
        if self.receipt_tolerance < 0:
            raise ValueError("RECEIPT_TOLERANCE cannot be negative")
        if self.ledger_window_months < 1:
            raise ValueError("LEDGER_WINDOW_MONTHS must be at least 1")
        if self.settlement_window_months < 1:
            raise ValueError("SETTLEMENT_WINDOW_MONTHS must be at least 1")


_settings_instance: Optional[FinanceSettings] = None


def get_settings() -> FinanceSettings:
    """Get or create the settings instance (validated on first load)."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = FinanceSettings()
        _settings_instance.validate()
        logger.debug("Settings loaded: database_url=%s", _settings_instance.database_url)
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached instance so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None


__all__ = ["FinanceSettings", "get_settings", "reset_settings"]
