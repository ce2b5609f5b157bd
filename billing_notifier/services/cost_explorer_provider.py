"""
Month-to-date Cost Explorer Provider.

Resolves the caller account through STS and fetches the current month's
UnblendedCost grouped by SERVICE. Credentials and region come from the
ambient AWS environment (Lambda execution role, profile, env vars).
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from billing_notifier.errors import (
    ConfigurationError,
    CostQueryError,
    DataProcessingError,
    DateIntervalError,
    IdentityError,
    MissingIdentity,
)
from billing_notifier.services.models import AccountIdentity, ServiceCostEntry

logger = logging.getLogger(__name__)

COST_METRIC = "UnblendedCost"
GROUP_BY_DIMENSION = "SERVICE"
DEFAULT_UNIT = "USD"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_date_interval(now: Optional[datetime] = None) -> Tuple[str, str]:
    """Build the [first-of-month, today] interval as YYYY-MM-DD strings.

    Args:
        now: Reference time, defaults to the current UTC time

    Returns:
        (start, end) tuple for GetCostAndUsage TimePeriod

    Raises:
        DateIntervalError: If the interval is empty (run on the 1st of a month)
    """
    now = now or _utcnow()

    try:
        start_of_month = now.replace(day=1)
        start = start_of_month.strftime("%Y-%m-%d")
        end = now.strftime("%Y-%m-%d")
    except ValueError as e:
        raise DateIntervalError(f"Could not build date interval from {now!r}: {e}") from e

    # Cost Explorer treats End as exclusive and rejects Start == End
    if start >= end:
        raise DateIntervalError(
            f"Empty date interval {start}..{end}: no full billing day "
            f"has elapsed this month yet"
        )

    return start, end


def extract_service_costs(results_by_time: Iterable[Dict[str, Any]]) -> List[ServiceCostEntry]:
    """Flatten ResultsByTime groups into ServiceCostEntry rows.

    Groups without an UnblendedCost metric are skipped.

    Args:
        results_by_time: ResultsByTime list from GetCostAndUsage

    Returns:
        Service cost entries in response order

    Raises:
        DataProcessingError: If a group lacks its key, metrics or amount
    """
    entries: List[ServiceCostEntry] = []

    for period in results_by_time:
        for group in period.get("Groups", []):
            keys = group.get("Keys")
            if not keys:
                raise DataProcessingError("No service name found in cost group")

            metrics = group.get("Metrics")
            if metrics is None:
                raise DataProcessingError(f"No metrics found for service {keys[0]!r}")

            value = metrics.get(COST_METRIC)
            if value is None:
                continue

            amount = value.get("Amount")
            if amount is None or str(amount).strip() == "":
                raise DataProcessingError(
                    f"Error getting {COST_METRIC} amount for service {keys[0]!r}"
                )

            entries.append(
                ServiceCostEntry(
                    service_name=keys[0],
                    amount=str(amount),
                    currency_unit=value.get("Unit") or DEFAULT_UNIT,
                )
            )

    return entries


class BaseCostExplorerProvider(ABC):
    """Abstract base class for billing providers."""

    @abstractmethod
    def resolve_account_identity(self) -> AccountIdentity:
        """Get the billed account ID.

        Returns:
            AWS account ID
        """
        pass

    @abstractmethod
    def fetch_cost_by_service(self) -> List[ServiceCostEntry]:
        """Get month-to-date cost grouped by service.

        Returns:
            Raw (unformatted, unfiltered) service cost entries
        """
        pass


class CostExplorerProvider(BaseCostExplorerProvider):
    """
    Single-Account Cost Explorer Provider.

    Uses the current credentials (Lambda execution role) directly,
    one API call per request with no retries beyond botocore's defaults.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        session: Optional[Any] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize provider.

        Args:
            region: AWS region for Cost Explorer (must be us-east-1)
            session: boto3 Session, created from the environment if omitted
            clock: Returns the current UTC time

        Raises:
            ConfigurationError: If the AWS session cannot be created
                (e.g. AWS_PROFILE names an unknown profile)
        """
        if session is None:
            import boto3

            try:
                session = boto3.Session(region_name=region)
            except BotoCoreError as e:
                raise ConfigurationError(f"Could not create AWS session: {e}") from e

        self.region = region
        self._session = session
        self._clock = clock or _utcnow

        logger.info(f"CostExplorerProvider initialized: region={region}")

    def resolve_account_identity(self) -> AccountIdentity:
        """Get current account ID from STS GetCallerIdentity.

        Raises:
            IdentityError: If the STS call fails
            MissingIdentity: If the response has no Account field
        """
        sts_client = self._session.client("sts", region_name=self.region)

        try:
            response = sts_client.get_caller_identity()
        except (BotoCoreError, ClientError) as e:
            raise IdentityError(f"There was a problem getting the caller identity: {e}") from e

        account_id = response.get("Account")
        if not account_id:
            raise MissingIdentity("Caller identity response has no Account field")

        logger.info(f"Resolved account ID: {account_id}")
        return account_id

    def fetch_cost_by_service(self) -> List[ServiceCostEntry]:
        """Get month-to-date UnblendedCost grouped by SERVICE.

        Follows NextPageToken until every page has been read.

        Raises:
            DateIntervalError: If the month-to-date interval is empty
            CostQueryError: If a GetCostAndUsage call fails
            DataProcessingError: If the response has an unexpected shape
        """
        start, end = build_date_interval(self._clock())

        ce_client = self._session.client("ce", region_name=self.region)

        request: Dict[str, Any] = {
            "TimePeriod": {"Start": start, "End": end},
            "Granularity": "MONTHLY",
            "Metrics": [COST_METRIC],
            "GroupBy": [{"Type": "DIMENSION", "Key": GROUP_BY_DIMENSION}],
        }

        results_by_time: List[Dict[str, Any]] = []
        while True:
            try:
                response = ce_client.get_cost_and_usage(**request)
            except (BotoCoreError, ClientError) as e:
                raise CostQueryError(f"There was an error getting the cost and usage: {e}") from e

            results_by_time.extend(response.get("ResultsByTime", []))

            next_token = response.get("NextPageToken")
            if not next_token:
                break
            request["NextPageToken"] = next_token

        entries = extract_service_costs(results_by_time)
        logger.info(f"Retrieved {len(entries)} service groups for {start}..{end}")
        return entries


class MockCostExplorerProvider(BaseCostExplorerProvider):
    """Mock provider for local runs and unit testing."""

    DEFAULT_ENTRIES = [
        ServiceCostEntry("Amazon Elastic Compute Cloud - Compute", "123.456", "USD"),
        ServiceCostEntry("Amazon Simple Storage Service", "0.001", "USD"),
        ServiceCostEntry("AWS Lambda", "50.00", "USD"),
        ServiceCostEntry("Amazon CloudWatch", "3.215", "USD"),
        ServiceCostEntry("AWS Key Management Service", "1", "USD"),
    ]

    def __init__(
        self,
        account_id: str = "123456789012",
        mock_data: Optional[List[ServiceCostEntry]] = None,
    ):
        """Initialize mock provider.

        Args:
            account_id: Mock account ID
            mock_data: Pre-configured entries, DEFAULT_ENTRIES if omitted
        """
        self.account_id = account_id
        self.mock_data = mock_data
        self.call_history: List[Dict[str, Any]] = []

        logger.info(f"MockCostExplorerProvider initialized: account_id={account_id}")

    def resolve_account_identity(self) -> AccountIdentity:
        self.call_history.append({"method": "resolve_account_identity"})
        return self.account_id

    def fetch_cost_by_service(self) -> List[ServiceCostEntry]:
        self.call_history.append({"method": "fetch_cost_by_service"})
        if self.mock_data is not None:
            return list(self.mock_data)
        return list(self.DEFAULT_ENTRIES)


def create_provider(
    provider_type: str = "real",
    **kwargs: Any,
) -> BaseCostExplorerProvider:
    """Factory function to create appropriate provider.

    Args:
        provider_type: Provider type (real, mock)
        **kwargs: Additional provider-specific arguments

    Returns:
        Provider instance
    """
    if provider_type == "mock":
        return MockCostExplorerProvider(**kwargs)
    elif provider_type == "real":
        return CostExplorerProvider(**kwargs)
    raise ValueError(f"Unknown billing provider: {provider_type}")
