"""
Multicall aggregator client.

Routes a list of read-only calls through the Multicall ``aggregate``
method with a single ``eth_call``. Nothing is signed and no gas is paid.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional, Sequence

from eth_utils import to_checksum_address
from web3 import AsyncWeb3

from ..models import CallDescriptor
from .base import BaseBatcher, BatchResult, is_valid_address
from .errors import (
    AggregationError,
    BatchError,
    ConfigurationError,
    MalformedResponseError,
)

MULTICALL_ABI = [
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "address", "name": "target", "type": "address"},
                    {"internalType": "bytes", "name": "callData", "type": "bytes"},
                ],
                "internalType": "struct Multicall.Call[]",
                "name": "calls",
                "type": "tuple[]",
            }
        ],
        "name": "aggregate",
        "outputs": [
            {"internalType": "uint256", "name": "blockNumber", "type": "uint256"},
            {"internalType": "bytes[]", "name": "returnData", "type": "bytes[]"},
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    }
]


def validate_aggregator_address(address: Optional[str]) -> str:
    """
    Check the configured aggregator address.

    Returns:
        The checksummed address

    Raises:
        ConfigurationError: If the address is missing or malformed
    """
    if not address:
        raise ConfigurationError("Multicall address not configured")
    if not is_valid_address(address):
        raise ConfigurationError("Invalid multicall address configuration")
    return to_checksum_address(address)


@dataclass
class AggregateResult:
    """Decoded output of one ``aggregate`` call."""

    block_number: int
    return_data: List[bytes]


class MulticallBatcher(BaseBatcher):
    """
    Batcher backed by a deployed Multicall contract.

    ``aggregate`` reverts as a whole when any inner call reverts, so callers
    that can tolerate missing data must handle AggregationError themselves.
    """

    def __init__(self, w3: AsyncWeb3, aggregator_address: Optional[str]):
        """
        Initialize the multicall batcher.

        Args:
            w3: AsyncWeb3 instance
            aggregator_address: Address of the Multicall contract

        Raises:
            ConfigurationError: If the aggregator address is missing or invalid
        """
        self.aggregator_address = validate_aggregator_address(aggregator_address)
        super().__init__(w3)
        self.contract = w3.eth.contract(address=self.aggregator_address, abi=MULTICALL_ABI)

    async def aggregate(
        self, calls: Sequence[CallDescriptor], block_identifier="latest"
    ) -> AggregateResult:
        """
        Execute ``calls`` in one static call.

        Args:
            calls: Ordered, non-empty call descriptors
            block_identifier: Block to call at

        Returns:
            AggregateResult with one raw payload per call, in call order

        Raises:
            ValidationError: If ``calls`` is empty or holds a bad target
            AggregationError: If the request fails or reverts
            MalformedResponseError: If the result count differs from the call count
        """
        validated = self._validate_calls(calls)
        payload = [call.as_tuple() for call in validated]

        self.logger.debug(f"Aggregating {len(payload)} calls via {self.aggregator_address}")

        try:
            response = await self.contract.functions.aggregate(payload).call(
                block_identifier=block_identifier
            )
        except Exception as e:
            raise AggregationError(f"Multicall aggregate failed: {e}") from e

        return self._parse_response(response, len(validated))

    async def batch_call(
        self, calls: Sequence[CallDescriptor], block_identifier="latest"
    ) -> BatchResult:
        """Run ``aggregate`` and report the outcome as a BatchResult."""
        try:
            result = await self.aggregate(calls, block_identifier)
        except BatchError as e:
            category = self.error_handler.log_error(
                e, {"operation": "aggregate", "call_count": len(calls)}
            )
            return BatchResult(success=False, error=str(e), error_category=category)

        return BatchResult(
            success=True,
            data=result.return_data,
            block_number=result.block_number,
            timestamp=datetime.now(timezone.utc),
        )

    @staticmethod
    def _parse_response(response, expected: int) -> AggregateResult:
        if not response or len(response) != 2:
            raise MalformedResponseError(
                "Failed to fetch data - invalid response", expected=expected
            )

        block_number, return_data = response
        if return_data is None or len(return_data) != expected:
            received = None if return_data is None else len(return_data)
            raise MalformedResponseError(
                f"Failed to fetch data - invalid response "
                f"(expected {expected} results, got {received})",
                expected=expected,
                received=received,
            )

        return AggregateResult(
            block_number=int(block_number),
            return_data=[bytes(item) for item in return_data],
        )
