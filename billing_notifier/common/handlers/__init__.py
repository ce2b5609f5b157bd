"""Lambda handler base classes."""

from billing_notifier.common.handlers.base_handler import BaseHandler, LambdaResponse

__all__ = ["BaseHandler", "LambdaResponse"]
