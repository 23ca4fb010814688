"""
Data model for pair exploration.

Records produced by a fetch are frozen: a new fetch replaces the previous
record wholesale instead of updating it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

NOT_AVAILABLE = "N/A"
DEFAULT_DECIMALS = 18


class ErrorKind(str, Enum):
    """Fatal error categories for a single fetch attempt."""

    INPUT_VALIDATION = "input_validation"
    CONFIGURATION = "configuration"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NETWORK_OR_AGGREGATION = "network_or_aggregation"


@dataclass(frozen=True)
class CallDescriptor:
    """One call to be routed through the aggregator."""

    target: str
    call_data: bytes

    def as_tuple(self) -> Tuple[str, bytes]:
        return (self.target, self.call_data)


@dataclass(frozen=True)
class DecodedField:
    """
    Outcome of decoding one return payload.

    ``ok`` is False when the value is a substituted default, in which case
    ``reason`` says why decoding failed.
    """

    value: Any
    ok: bool = True
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> "DecodedField":
        return cls(value=value)

    @classmethod
    def default(cls, value: Any, reason: str) -> "DecodedField":
        return cls(value=value, ok=False, reason=reason)

    @property
    def is_default(self) -> bool:
        return not self.ok


@dataclass(frozen=True)
class TokenRecord:
    """ERC20 metadata for one side of the pair."""

    address: str
    name: str = NOT_AVAILABLE
    symbol: str = NOT_AVAILABLE
    decimals: int = DEFAULT_DECIMALS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class ReserveRecord:
    """Raw and human-readable reserves."""

    reserve0: str
    reserve1: str
    formatted_reserve0: str
    formatted_reserve1: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reserve0": self.reserve0,
            "reserve1": self.reserve1,
            "formattedReserve0": self.formatted_reserve0,
            "formattedReserve1": self.formatted_reserve1,
        }


@dataclass(frozen=True)
class PairRecord:
    """Everything one successful fetch knows about a pair."""

    pair_address: str
    token0: TokenRecord
    token1: TokenRecord
    reserves: ReserveRecord
    total_supply: str
    block_number: Optional[int] = None

    @property
    def price(self) -> str:
        """Price of token0 expressed in token1, or N/A for an empty pool."""
        # normalizer imports this module
        from .processors.normalizer import price_ratio

        return price_ratio(
            self.reserves.formatted_reserve0, self.reserves.formatted_reserve1
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pairAddress": self.pair_address,
            "token0": self.token0.to_dict(),
            "token1": self.token1.to_dict(),
            "reserves": self.reserves.to_dict(),
            "totalSupply": self.total_supply,
            "price": self.price,
            "blockNumber": self.block_number,
        }


@dataclass(frozen=True)
class PairFetchResult:
    """Result from a pair fetch: either a record or an error kind and message."""

    success: bool
    record: Optional[PairRecord] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, record: PairRecord, **metadata: Any) -> "PairFetchResult":
        return cls(success=True, record=record, metadata=metadata)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, **metadata: Any) -> "PairFetchResult":
        return cls(success=False, error_kind=kind, error=message, metadata=metadata)

    @property
    def failed(self) -> bool:
        """Check if fetch failed."""
        return not self.success
