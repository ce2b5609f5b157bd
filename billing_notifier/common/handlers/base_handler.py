"""
Base Handler for Lambda Functions.

Common functionality for scheduled notifier handlers.
"""

import json
import logging
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from billing_notifier.errors import BillingNotifierError

PACKAGE_LOGGER = "billing_notifier"


@dataclass
class LambdaResponse:
    """Standardized Lambda response structure."""

    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.headers:
            self.headers = {"Content-Type": "application/json"}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Lambda response format."""
        return {
            "statusCode": self.status_code,
            "headers": self.headers,
            "body": json.dumps(self.body),
        }


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure the package logger once and return it."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


class BaseHandler(ABC):
    """
    Abstract base handler for Lambda functions.

    Provides common functionality:
    - Logging setup
    - Request timing
    - Response formatting

    Failures are logged with their stage and re-raised so the
    invocation is reported as failed to the scheduler.
    """

    def __init__(self, logger_name: Optional[str] = None, log_level: str = "INFO"):
        setup_logging(log_level)
        self.logger = logging.getLogger(
            f"{PACKAGE_LOGGER}.{logger_name or self.__class__.__name__}"
        )

    def handle(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """
        Main entry point for Lambda handler.

        Args:
            event: Lambda event payload
            context: Lambda context object

        Returns:
            Lambda response dictionary

        Raises:
            BillingNotifierError: If any stage of the run fails
        """
        request_id = getattr(context, "aws_request_id", "local")
        start_time = datetime.now(timezone.utc)

        self.logger.info(f"Request {request_id} started")

        try:
            result = self.process(event, context)

        except BillingNotifierError as e:
            self.logger.error(
                f"Request {request_id} failed at stage '{e.stage}': {e.message}"
            )
            raise

        except Exception as e:
            self.logger.error(f"Unhandled error: {e}")
            self.logger.error(traceback.format_exc())
            raise

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        self.logger.info(f"Request {request_id} completed in {duration:.2f}s")

        return self._success_response(result, request_id).to_dict()

    @abstractmethod
    def process(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """
        Process the Lambda event.

        Override in subclasses.

        Args:
            event: Lambda event payload
            context: Lambda context object

        Returns:
            Processing result dictionary
        """
        pass

    def _success_response(
        self, result: Dict[str, Any], request_id: str
    ) -> LambdaResponse:
        """Create success response."""
        return LambdaResponse(
            status_code=200,
            body={
                "success": True,
                "request_id": request_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": result,
            },
        )
