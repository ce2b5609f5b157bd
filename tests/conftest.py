"""
Pytest Configuration and Fixtures.

Shared fixtures for the billing notifier test suite.
"""

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import List
from urllib.parse import parse_qs, urlsplit

import pytest

from billing_notifier.config import NotifierSettings, load_settings
from billing_notifier.services.models import ServiceCostEntry

TEST_TOKEN = "123456789:ABCDEFGHIJKLMNOPQRSTUVWXYZ"
TEST_CHAT_ID = "12345"
TEST_ACCOUNT_ID = "123456789012"


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory so a local .env is never read."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ============================================================================
# Telegram Mock Server
# ============================================================================


class _TelegramMockHandler(BaseHTTPRequestHandler):
    """Records sendMessage calls and answers with the configured response."""

    def do_GET(self):
        parsed = urlsplit(self.path)
        self.server.received.append(
            {"path": parsed.path, "query": parse_qs(parsed.query)}
        )

        body = self.server.response_body
        if not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")

        self.send_response(self.server.response_status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def telegram_server(monkeypatch):
    """Local Bot API stand-in on a free port.

    Set ``response_status`` / ``response_body`` to change the reply;
    ``received`` holds the parsed requests.
    """
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    server = HTTPServer(("127.0.0.1", 0), _TelegramMockHandler)
    server.received = []
    server.response_status = 200
    server.response_body = {
        "ok": True,
        "result": {
            "message_id": 123,
            "date": 1234567890,
            "chat": {"id": 12345, "type": "private"},
        },
    }
    server.url = f"http://127.0.0.1:{server.server_port}"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def sample_entries() -> List[ServiceCostEntry]:
    """Raw service groups: EC2 and Lambda billed, S3 rounds to zero."""
    return [
        ServiceCostEntry("Amazon EC2", "123.456", "USD"),
        ServiceCostEntry("Amazon S3", "0.001", "USD"),
        ServiceCostEntry("AWS Lambda", "50.00", "USD"),
    ]


@pytest.fixture
def sample_results_by_time():
    """GetCostAndUsage ResultsByTime payload."""
    return [
        {
            "TimePeriod": {"Start": "2026-10-01", "End": "2026-10-17"},
            "Total": {},
            "Groups": [
                {
                    "Keys": ["Amazon EC2"],
                    "Metrics": {"UnblendedCost": {"Amount": "123.456", "Unit": "USD"}},
                },
                {
                    "Keys": ["Amazon S3"],
                    "Metrics": {"UnblendedCost": {"Amount": "0.001", "Unit": "USD"}},
                },
                {
                    "Keys": ["AWS Lambda"],
                    "Metrics": {"UnblendedCost": {"Amount": "50.00", "Unit": "USD"}},
                },
            ],
            "Estimated": True,
        }
    ]


@pytest.fixture
def mock_settings() -> NotifierSettings:
    """Settings with mock provider and notifier backends."""
    return load_settings(
        telegram_token=TEST_TOKEN,
        chat_id=TEST_CHAT_ID,
        billing_provider="mock",
        notifier_backend="mock",
    )


@pytest.fixture
def lambda_context():
    """Minimal Lambda context object."""
    return type("Context", (), {"aws_request_id": "test-123"})()
