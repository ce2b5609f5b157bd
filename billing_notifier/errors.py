"""
Billing Notifier Exceptions.

Every failure carries the pipeline stage it happened in so the
invoking host can report which step of the run broke.
"""

from typing import Optional


class BillingNotifierError(Exception):
    """Base class for all notifier failures."""

    stage = "unknown"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class ConfigurationError(BillingNotifierError):
    """Required environment values are missing or invalid."""

    stage = "configuration"


# =============================================================================
# Billing API
# =============================================================================


class BillingError(BillingNotifierError):
    """Cost Explorer / STS failure."""


class IdentityError(BillingError):
    """GetCallerIdentity call failed."""

    stage = "identity"


class MissingIdentity(IdentityError):
    """GetCallerIdentity response carried no account field."""


class DateIntervalError(BillingError):
    """Month-to-date interval could not be built."""

    stage = "cost_query"


class CostQueryError(BillingError):
    """GetCostAndUsage call failed."""

    stage = "cost_query"


class DataProcessingError(BillingError):
    """Cost response had an unexpected shape."""

    stage = "cost_query"


# =============================================================================
# Formatting
# =============================================================================


class ParseError(BillingNotifierError):
    """Amount string is not a valid decimal."""

    stage = "formatting"


# =============================================================================
# Messaging API
# =============================================================================


class TelegramError(BillingNotifierError):
    """sendMessage delivery failure."""

    stage = "delivery"


class UrlConstructionError(TelegramError):
    """Request URL or query parameters could not be encoded."""


class TransportError(TelegramError):
    """Network-level failure talking to the Bot API."""


class ApiError(TelegramError):
    """Bot API answered with a non-200 status."""

    def __init__(self, status_code: int, description: Optional[str] = None):
        message = f"Telegram API returned status {status_code}"
        if description:
            message = f"{message}: {description}"
        super().__init__(message)
        self.status_code = status_code
        self.description = description
