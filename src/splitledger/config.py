"""Configuration management for SplitLedger."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .splitting import RemainderRule, SplitKind


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Balances within this tolerance count as settled
    epsilon: Decimal = Field(default=Decimal("0.01"), gt=0)

    # Decimal places used for displayed payment amounts
    currency_places: int = Field(default=2, ge=0, le=6)

    # Split settings
    default_split_kind: SplitKind = SplitKind.EQUAL
    remainder_rule: RemainderRule = RemainderRule.NONE


def load_settings(**overrides) -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings(**overrides)
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SPLITLEDGER_* environment "
            f"variables or your .env file.\n"
            f"Error: {e}"
        ) from e
