"""
Billing report CLI.

Usage:
    python -m billing_notifier
    python -m billing_notifier --dry-run --provider mock
"""

import argparse
import sys
from typing import List, Optional

from billing_notifier.config import load_settings
from billing_notifier.errors import BillingNotifierError
from billing_notifier.handler import BillingNotifierHandler
from billing_notifier.services.telegram_notifier import MockNotifier


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="billing_notifier",
        description="Send this month's AWS cost by service to Telegram.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the formatted message instead of sending it",
    )
    parser.add_argument(
        "--provider",
        choices=["real", "mock"],
        help="Billing provider (overrides BILLING_PROVIDER)",
    )
    parser.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """메인 실행 함수."""
    args = parse_args(argv)

    overrides = {}
    if args.provider:
        overrides["billing_provider"] = args.provider
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        settings = load_settings(**overrides)
        notifier = MockNotifier() if args.dry_run else None
        handler = BillingNotifierHandler(settings=settings, notifier=notifier)
        response = handler.handle({}, None)
    except BillingNotifierError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        print(notifier.sent_messages[-1])
    else:
        print(response["body"])

    return 0


if __name__ == "__main__":
    sys.exit(main())
