"""
Billing Notifier Handler.

Lambda handler - Cost Explorer 월간 누적 비용을 서비스별로 조회하여
Telegram으로 발송. Invoked once per schedule trigger with no payload.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from billing_notifier.common.handlers.base_handler import BaseHandler
from billing_notifier.config import NotifierSettings, load_settings
from billing_notifier.errors import ConfigurationError
from billing_notifier.services.cost_explorer_provider import (
    BaseCostExplorerProvider,
    create_provider,
)
from billing_notifier.services.report_formatter import ReportFormatter
from billing_notifier.services.telegram_notifier import BaseNotifier, create_notifier

logger = logging.getLogger(__name__)


class BillingNotifierHandler(BaseHandler):
    """
    Month-to-date billing report handler.

    Pipeline (strictly sequential, all-or-nothing):
    1. Resolve account identity (STS)
    2. Fetch cost by service (Cost Explorer)
    3. Build and escape the report
    4. Send exactly one Telegram message
    """

    def __init__(
        self,
        settings: Optional[NotifierSettings] = None,
        provider: Optional[BaseCostExplorerProvider] = None,
        notifier: Optional[BaseNotifier] = None,
        formatter: Optional[ReportFormatter] = None,
    ):
        """Initialize handler.

        Args:
            settings: Loaded settings, read from the environment if omitted
            provider: Billing provider override
            notifier: Notifier override
            formatter: Report formatter override

        Raises:
            ConfigurationError: If required environment values are missing
        """
        self.settings = settings or load_settings()
        super().__init__("BillingNotifierHandler", log_level=self.settings.log_level)
        self._init_services(provider, notifier, formatter)

    def _init_services(
        self,
        provider: Optional[BaseCostExplorerProvider],
        notifier: Optional[BaseNotifier],
        formatter: Optional[ReportFormatter],
    ) -> None:
        """서비스 컴포넌트 초기화."""
        settings = self.settings

        if provider is None:
            provider_kwargs: Dict[str, Any] = {}
            if settings.billing_provider == "real":
                provider_kwargs["region"] = settings.cost_explorer_region
            provider = create_provider(settings.billing_provider, **provider_kwargs)
        self.provider = provider

        if notifier is None:
            notifier_kwargs: Dict[str, Any] = {}
            if settings.notifier_backend == "telegram":
                notifier_kwargs = {
                    "token": settings.telegram_token,
                    "chat_id": settings.chat_id,
                    "base_url": settings.telegram_api_url,
                }
            notifier = create_notifier(settings.notifier_backend, **notifier_kwargs)
        self.notifier = notifier

        self.formatter = formatter or ReportFormatter()

        self.logger.info(
            f"BillingNotifierHandler initialized: provider={settings.billing_provider}, "
            f"notifier={settings.notifier_backend}"
        )

    def process(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """Build the month-to-date report and send it.

        Args:
            event: Lambda event (ignored)
            context: Lambda context

        Returns:
            Run summary
        """
        # 1. 계정 조회
        account_id = self.provider.resolve_account_identity()

        # 2. 비용 데이터 조회
        entries = self.provider.fetch_cost_by_service()
        self.logger.info(f"Fetched {len(entries)} service groups for account {account_id}")

        # 3. 리포트 생성 (escape는 전체 메시지에 한 번만 적용)
        report, message = self.formatter.build_message(account_id, entries)

        # 4. 발송
        self.notifier.send(message)

        return {
            "account_id": account_id,
            "services_reported": len(report.lines),
            "total": f"{report.total:.2f}",
            "message_sent": True,
            "report_timestamp": datetime.now(timezone.utc).isoformat(),
        }


# Lambda entry point, built on first invocation
_handler_instance: Optional[BillingNotifierHandler] = None


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda function entry point."""
    global _handler_instance

    if _handler_instance is None:
        try:
            _handler_instance = BillingNotifierHandler()
        except ConfigurationError as e:
            logger.error(str(e))
            raise

    return _handler_instance.handle(event, context)
