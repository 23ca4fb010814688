"""
Error handling utilities for aggregated read operations.

This module provides the exception hierarchy shared by the codec, the
multicall batcher and the pair resolution pipeline, plus an ErrorHandler
that classifies failures for logging.
"""

import logging
from typing import Any, Dict, Optional

from ..models import ErrorKind

logger = logging.getLogger(__name__)


class BatchError(Exception):
    """Root of every error raised while preparing or running a fetch."""

    kind: Optional[ErrorKind] = None


class ValidationError(BatchError):
    """Raised when a caller-supplied value is unusable."""

    kind = ErrorKind.INPUT_VALIDATION


class ConfigurationError(BatchError):
    """Raised when the aggregator or provider configuration is unusable."""

    kind = ErrorKind.CONFIGURATION


class ProviderUnavailableError(BatchError):
    """Raised when no connection to a node can be acquired."""

    kind = ErrorKind.PROVIDER_UNAVAILABLE


class AggregationError(BatchError):
    """Raised when an aggregated call fails on the wire or reverts."""

    kind = ErrorKind.NETWORK_OR_AGGREGATION


class MalformedResponseError(AggregationError):
    """Raised when the aggregator returns a result list of the wrong shape."""

    def __init__(self, message: str, expected: int = 0, received: Optional[int] = None):
        super().__init__(message)
        self.expected = expected
        self.received = received


class DecodeError(BatchError):
    """Raised when a return payload does not match the method's output types."""

    def __init__(self, method: str, message: str):
        super().__init__(f"Failed to decode {method}: {message}")
        self.method = method


class ErrorHandler:
    """
    Sorts batch failures into categories for logging.

    Single attempt per batch: the handler only decides how loudly a failure
    gets logged, it never schedules a retry.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """Map an exception to one of rate_limit, network, contract, validation or unknown."""
        if isinstance(error, (ValidationError, ConfigurationError)):
            return "validation"

        text = str(error).lower()

        if any(keyword in text for keyword in ["rate limit", "too many requests", "429"]):
            return "rate_limit"

        if any(keyword in text for keyword in ["connection", "timeout", "network", "dns"]):
            return "network"

        if any(keyword in text for keyword in ["revert", "execution reverted", "out of gas"]):
            return "contract"

        if any(keyword in text for keyword in ["invalid", "bad request", "400"]):
            return "validation"

        return "unknown"

    def log_error(self, error: Exception, context: Dict[str, Any]) -> str:
        """
        Log ``error`` at the level its category calls for.

        ``context`` is attached to the record as extra fields.

        Returns:
            The category the error was filed under
        """
        category = self.classify_error(error)
        fields = {
            "error_type": type(error).__name__,
            "error_category": category,
            "error_message": str(error),
            **context,
        }

        if category == "validation":
            self.logger.warning(f"Validation error occurred: {error}", extra=fields)
        elif category == "contract":
            self.logger.error(f"Contract execution failed: {error}", extra=fields)
        elif category == "rate_limit":
            self.logger.info(f"Rate limit encountered: {error}", extra=fields)
        else:
            self.logger.warning(f"Batch operation error: {error}", extra=fields)

        return category
