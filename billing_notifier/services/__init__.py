"""
Billing Notifier Services.

Cost provider, report formatting and message delivery.
"""

from billing_notifier.services.cost_explorer_provider import (
    BaseCostExplorerProvider,
    CostExplorerProvider,
    MockCostExplorerProvider,
    build_date_interval,
    create_provider,
    extract_service_costs,
)
from billing_notifier.services.markdown import escape_markdown
from billing_notifier.services.models import (
    AccountIdentity,
    CostReport,
    ReportLine,
    ServiceCostEntry,
)
from billing_notifier.services.report_formatter import (
    ReportFormatter,
    normalize_amount,
    parse_amount,
    truncate_service_name,
)
from billing_notifier.services.telegram_notifier import (
    BaseNotifier,
    MockNotifier,
    TelegramNotifier,
    create_notifier,
)

__all__ = [
    "BaseCostExplorerProvider",
    "CostExplorerProvider",
    "MockCostExplorerProvider",
    "build_date_interval",
    "create_provider",
    "extract_service_costs",
    "escape_markdown",
    "AccountIdentity",
    "CostReport",
    "ReportLine",
    "ServiceCostEntry",
    "ReportFormatter",
    "normalize_amount",
    "parse_amount",
    "truncate_service_name",
    "BaseNotifier",
    "MockNotifier",
    "TelegramNotifier",
    "create_notifier",
]
