"""
Aggregated contract read utilities.

This package builds call payloads, routes them through a Multicall
contract in a single RPC round trip and decodes what comes back.
"""

from .base import BaseBatcher, BatchResult, is_valid_address
from .codec import (
    PAIR_METHODS,
    TOKEN_METHODS,
    ContractInterface,
    ContractMethod,
    pair_interface,
    token_interface,
)
from .errors import (
    AggregationError,
    BatchError,
    ConfigurationError,
    DecodeError,
    ErrorHandler,
    MalformedResponseError,
    ProviderUnavailableError,
    ValidationError,
)
from .multicall import (
    MULTICALL_ABI,
    AggregateResult,
    MulticallBatcher,
    validate_aggregator_address,
)

__all__ = [
    'BaseBatcher',
    'BatchResult',
    'is_valid_address',
    'ContractInterface',
    'ContractMethod',
    'PAIR_METHODS',
    'TOKEN_METHODS',
    'pair_interface',
    'token_interface',
    'BatchError',
    'ValidationError',
    'ConfigurationError',
    'ProviderUnavailableError',
    'AggregationError',
    'MalformedResponseError',
    'DecodeError',
    'ErrorHandler',
    'MULTICALL_ABI',
    'AggregateResult',
    'MulticallBatcher',
    'validate_aggregator_address',
]
