"""
Month-to-date Cost Report Formatter.

Turns raw Cost Explorer service groups into a column-aligned,
MarkdownV2-escaped message. Pure transformation, no I/O.

Rendered layout (before escaping):

    ```text
    Your AWS Account 123456789012 costs in this month

    Amazon EC2 -- 123.46 USD
    AWS Lambda --- 50.00 USD

    Total: 173.46 USD
    ```
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Tuple

from billing_notifier.errors import ParseError
from billing_notifier.services.markdown import escape_markdown
from billing_notifier.services.models import (
    AccountIdentity,
    CostReport,
    ReportLine,
    ServiceCostEntry,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
# ASCII decimal literal with an optional exponent; no underscores, NaN or Infinity
_AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
ZERO_AMOUNT = "0.00"


def parse_amount(raw: str) -> Decimal:
    """Parse a decimal string and round it half away from zero to cents.

    Args:
        raw: Amount string as returned by Cost Explorer (e.g. "123.456")

    Returns:
        Decimal with exactly two fractional digits

    Raises:
        ParseError: If raw is not a finite decimal number
    """
    text = str(raw).strip()
    if not _AMOUNT_PATTERN.fullmatch(text):
        raise ParseError(f"Invalid amount string: {raw!r}")

    try:
        rounded = Decimal(text).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise ParseError(f"Invalid amount string: {raw!r}") from e

    # -0.00 after rounding a tiny credit
    if rounded == 0:
        return Decimal(ZERO_AMOUNT)
    return rounded


def normalize_amount(raw: str) -> str:
    """Normalize an amount string to two decimals ("10" -> "10.00")."""
    return f"{parse_amount(raw):.2f}"


def truncate_service_name(name: str, max_length: int = 30) -> str:
    """Cut names longer than max_length and mark them with an ellipsis."""
    if len(name) > max_length:
        return name[:max_length] + "..."
    return name


class ReportFormatter:
    """Cost report builder and renderer."""

    HEADER_TEMPLATE = "Your AWS Account {account_id} costs in this month"
    EMPTY_MESSAGE = "No costs found for this month."
    FENCE_OPEN = "```text"
    FENCE_CLOSE = "```"
    TOTAL_CURRENCY = "USD"

    def __init__(self, max_service_name_length: int = 30, dash_padding: int = 2):
        """Initialize the formatter.

        Args:
            max_service_name_length: Longer service names are truncated
            dash_padding: Dashes added on top of the alignment gap
        """
        self.max_service_name_length = max_service_name_length
        self.dash_padding = dash_padding

    def build_report(
        self,
        account_id: AccountIdentity,
        entries: Iterable[ServiceCostEntry],
    ) -> CostReport:
        """Normalize, filter and sort cost entries.

        Args:
            account_id: Billed account
            entries: Raw service groups from the cost provider

        Returns:
            CostReport with zero-cost services removed, highest cost first
        """
        lines: List[ReportLine] = []

        for entry in entries:
            amount = parse_amount(entry.amount)
            formatted_amount = f"{amount:.2f}"

            if formatted_amount == ZERO_AMOUNT:
                continue

            lines.append(
                ReportLine(
                    service_name=truncate_service_name(
                        entry.service_name, self.max_service_name_length
                    ),
                    amount=amount,
                    formatted_amount=formatted_amount,
                    unit=entry.currency_unit,
                )
            )

        # sorted() keeps input order for equal amounts, also with reverse=True
        lines = sorted(lines, key=lambda line: line.amount, reverse=True)
        total = sum((line.amount for line in lines), Decimal(ZERO_AMOUNT))

        return CostReport(account_id=account_id, lines=lines, total=total)

    def render_table(self, lines: List[ReportLine]) -> List[str]:
        """Render service rows with dash leaders so amounts line up on the right."""
        max_width = max(len(line.text) for line in lines)

        rendered = []
        for line in lines:
            dashes = "-" * (max_width - len(line.text) + self.dash_padding)
            rendered.append(
                f"{line.service_name} {dashes} {line.formatted_amount} {line.unit}"
            )
        return rendered

    def render(self, report: CostReport) -> str:
        """Render the unescaped message body including the code fence.

        Args:
            report: Built cost report

        Returns:
            Plain message text
        """
        parts = [
            self.FENCE_OPEN,
            self.HEADER_TEMPLATE.format(account_id=report.account_id),
            "",
        ]

        if report.is_empty:
            parts.append(self.EMPTY_MESSAGE)
        else:
            parts.extend(self.render_table(report.lines))
            parts.append("")
            parts.append(f"Total: {report.total:.2f} {self.TOTAL_CURRENCY}")

        parts.append(self.FENCE_CLOSE)
        return "\n".join(parts)

    def build_message(
        self,
        account_id: AccountIdentity,
        entries: Iterable[ServiceCostEntry],
    ) -> Tuple[CostReport, str]:
        """Build the report and its escaped message.

        Escaping runs once over the whole rendered text.

        Args:
            account_id: Billed account
            entries: Raw service groups from the cost provider

        Returns:
            Tuple of (built report, MarkdownV2-safe message for sendMessage)

        Raises:
            ParseError: If any amount is not a decimal number
        """
        report = self.build_report(account_id, entries)
        logger.info(
            f"Report built: account={account_id}, services={len(report.lines)}, "
            f"total={report.total:.2f}"
        )
        return report, escape_markdown(self.render(report))

    def format_message(
        self,
        account_id: AccountIdentity,
        entries: Iterable[ServiceCostEntry],
    ) -> str:
        """Return only the escaped message text."""
        return self.build_message(account_id, entries)[1]
