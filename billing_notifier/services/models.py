"""
Billing report models.

Data classes passed between the cost provider, report formatter and notifier.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

AccountIdentity = str


@dataclass
class ServiceCostEntry:
    """One service group from GetCostAndUsage, amount still a raw decimal string."""

    service_name: str
    amount: str
    currency_unit: str = "USD"


@dataclass
class ReportLine:
    """Normalized service row ready for rendering."""

    service_name: str
    amount: Decimal
    formatted_amount: str
    unit: str

    @property
    def text(self) -> str:
        return f"{self.service_name} {self.formatted_amount} {self.unit}"


@dataclass
class CostReport:
    """Month-to-date cost report for one account."""

    account_id: AccountIdentity
    lines: List[ReportLine] = field(default_factory=list)
    total: Decimal = Decimal("0.00")

    @property
    def is_empty(self) -> bool:
        return not self.lines
