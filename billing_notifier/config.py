"""
Notifier Configuration using pydantic-settings.

Environment values are read once at the entry point and passed into
the provider and notifier constructors explicitly.
"""

from typing import Any, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from billing_notifier.errors import ConfigurationError

DEFAULT_TELEGRAM_API_URL = "https://api.telegram.org"


class NotifierSettings(BaseSettings):
    """Notifier configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    telegram_token: str = Field(min_length=1, description="Telegram bot token")
    chat_id: str = Field(min_length=1, description="Destination chat identifier")
    telegram_api_url: str = Field(
        default=DEFAULT_TELEGRAM_API_URL, description="Telegram Bot API base URL"
    )

    # Backends
    billing_provider: Literal["real", "mock"] = Field(
        default="real", description="Billing provider (real, mock)"
    )
    notifier_backend: Literal["telegram", "mock"] = Field(
        default="telegram", description="Notification backend (telegram, mock)"
    )

    # AWS
    cost_explorer_region: str = Field(
        default="us-east-1", description="Cost Explorer API region"
    )

    log_level: str = Field(default="INFO", description="Logging level")


def load_settings(**overrides: Any) -> NotifierSettings:
    """Load settings, converting validation failures to ConfigurationError.

    Args:
        **overrides: Explicit values taking precedence over the environment

    Returns:
        Validated NotifierSettings

    Raises:
        ConfigurationError: If a required value is missing or invalid
    """
    try:
        return NotifierSettings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"]).upper()
            problems.append(f"{name} ({error['msg']})")
        raise ConfigurationError(
            "Invalid or missing environment values: " + ", ".join(problems)
        ) from e
