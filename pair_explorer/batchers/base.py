"""
Base classes for aggregated contract reads.

This module provides the abstract interface for batching read-only calls
into a single RPC round trip.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from eth_utils import (
    is_checksum_address,
    is_hex_address,
    remove_0x_prefix,
    to_checksum_address,
)
from web3 import AsyncWeb3

from ..models import CallDescriptor
from .errors import ErrorHandler, ValidationError

logger = logging.getLogger(__name__)


def is_valid_address(value) -> bool:
    """
    Check that ``value`` is a 20-byte hex address.

    All-lowercase and all-uppercase hex are accepted as is; mixed case must
    carry a valid EIP-55 checksum.
    """
    if not isinstance(value, str) or not is_hex_address(value):
        return False
    digits = remove_0x_prefix(value)
    return digits in (digits.lower(), digits.upper()) or is_checksum_address(value)


@dataclass
class BatchResult:
    """Result from a batch operation."""

    success: bool
    data: List[bytes] = field(default_factory=list)
    block_number: Optional[int] = None
    timestamp: Optional[datetime] = None
    error: Optional[str] = None
    error_category: Optional[str] = None

    @property
    def failed(self) -> bool:
        """Check if batch failed."""
        return not self.success


class BaseBatcher(ABC):
    """
    Abstract base class for aggregated read operations.

    Each batch is attempted exactly once; failures are classified and
    logged by the ErrorHandler and then surfaced to the caller.
    """

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger)

    @abstractmethod
    async def batch_call(
        self, calls: Sequence[CallDescriptor], block_identifier="latest"
    ) -> BatchResult:
        """
        Execute a batch of calls in one request.

        Args:
            calls: Ordered call descriptors
            block_identifier: Block to call at

        Returns:
            BatchResult whose data is aligned with ``calls``
        """
        pass

    @staticmethod
    def _validate_address(address: str) -> str:
        """Validate and normalize one Ethereum address."""
        if not is_valid_address(address):
            raise ValidationError(f"Invalid address: {address!r}")
        return to_checksum_address(address)

    def _validate_calls(self, calls: Sequence[CallDescriptor]) -> List[CallDescriptor]:
        if not calls:
            raise ValidationError("At least one call is required")
        return [
            CallDescriptor(self._validate_address(call.target), bytes(call.call_data))
            for call in calls
        ]
