"""
Telegram Bot API Notifier.

Delivers one pre-escaped MarkdownV2 message per call through
GET {base_url}/bot{token}/sendMessage.

Reference:
- https://core.telegram.org/bots/api#sendmessage
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

import requests

from billing_notifier.errors import (
    ApiError,
    TransportError,
    UrlConstructionError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.telegram.org"


class BaseNotifier(ABC):
    """Message delivery base class."""

    @abstractmethod
    def send(self, message: str) -> None:
        """Deliver a single formatted message.

        Args:
            message: Escaped message text
        """
        pass


class TelegramNotifier(BaseNotifier):
    """
    Telegram sendMessage notifier.

    Exactly one HTTP attempt per send(); any failure raises a TelegramError.

    Usage:
        notifier = TelegramNotifier(token="123:ABC", chat_id="12345")
        notifier.send(escape_markdown("Hello!"))
    """

    PARSE_MODE = "MarkdownV2"

    def __init__(
        self,
        token: str,
        chat_id: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize notifier.

        Args:
            token: Bot token
            chat_id: Destination chat ID
            base_url: Bot API host, overridable for a local mock server
            session: HTTP session to reuse
            timeout: Request timeout in seconds, None keeps the requests default
        """
        self.token = token
        self.chat_id = chat_id
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/bot{self.token}/sendMessage"

    def _redact(self, text: str) -> str:
        """Keep the bot token out of logs and error messages."""
        if self.token:
            return text.replace(self.token, "<token>")
        return text

    def build_request(self, message: str) -> requests.PreparedRequest:
        """Prepare the sendMessage GET request.

        Args:
            message: Escaped message text

        Returns:
            Prepared request with encoded query string

        Raises:
            UrlConstructionError: If the URL or parameters cannot be encoded
        """
        params: Dict[str, str] = {
            "chat_id": self.chat_id,
            "parse_mode": self.PARSE_MODE,
            "text": message,
        }

        try:
            prepared = self.session.prepare_request(
                requests.Request("GET", self.endpoint, params=params)
            )
        except (requests.exceptions.RequestException, ValueError, UnicodeError) as e:
            raise UrlConstructionError(
                self._redact(f"There was an error building the sendMessage URL: {e}")
            ) from e

        # requests passes URLs it considers non-HTTP through unparsed
        if urlsplit(prepared.url).scheme not in ("http", "https"):
            raise UrlConstructionError(
                self._redact(f"sendMessage URL must use http or https: {self.endpoint}")
            )

        return prepared

    def send(self, message: str) -> None:
        """Send the message.

        Args:
            message: Escaped message text

        Raises:
            UrlConstructionError: If the request URL cannot be built
            TransportError: If the HTTP call fails at the network layer
            ApiError: If the Bot API answers with a non-200 status
        """
        prepared = self.build_request(message)
        settings = self.session.merge_environment_settings(
            prepared.url, {}, None, None, None
        )

        try:
            response = self.session.send(prepared, timeout=self.timeout, **settings)
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ) as e:
            raise UrlConstructionError(
                self._redact(f"There was an error building the sendMessage URL: {e}")
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(
                self._redact(f"Failed to reach Telegram API: {e}")
            ) from e

        if response.status_code != requests.codes.ok:
            description = self._error_description(response)
            logger.error(
                f"Telegram message returned unexpected status: {response.status_code}"
            )
            raise ApiError(response.status_code, description)

        logger.info(f"Telegram message sent successfully to chat {self.chat_id}")

    @staticmethod
    def _error_description(response: requests.Response) -> Optional[str]:
        """Extract the Bot API 'description' field from an error body."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get("description")
        return None


class MockNotifier(BaseNotifier):
    """Mock notifier that keeps messages in memory."""

    def __init__(self):
        self.sent_messages: List[str] = []

    def send(self, message: str) -> None:
        self.sent_messages.append(message)
        logger.info(f"[MOCK] Message recorded ({len(message)} chars)")

    def clear(self) -> None:
        self.sent_messages.clear()


def create_notifier(backend: str = "telegram", **kwargs: Any) -> BaseNotifier:
    """Factory function to create appropriate notifier.

    Args:
        backend: Notifier backend (telegram, mock)
        **kwargs: TelegramNotifier arguments

    Returns:
        Notifier instance
    """
    if backend == "mock":
        return MockNotifier()
    elif backend == "telegram":
        return TelegramNotifier(**kwargs)
    raise ValueError(f"Unknown notifier backend: {backend}")
