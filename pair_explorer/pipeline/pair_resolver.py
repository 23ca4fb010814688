"""
Pair resolution pipeline.

Resolves a Uniswap V2 style pair in two aggregated round trips:
1. Pair batch - token0, token1, getReserves, totalSupply
2. Token batch - name, symbol, decimals for both tokens

The pair batch is load-bearing and any failure there ends the fetch. The
token batch is cosmetic: if it fails as a whole, every metadata field falls
back to its default and the fetch still succeeds.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from eth_utils import to_checksum_address

from ..batchers.base import is_valid_address
from ..batchers.codec import pair_interface, token_interface
from ..batchers.errors import (
    AggregationError,
    BatchError,
    DecodeError,
    ProviderUnavailableError,
    ValidationError,
)
from ..batchers.multicall import MulticallBatcher, validate_aggregator_address
from ..core.provider import ProviderFactory, provider_factory
from ..models import DecodedField, ErrorKind, PairFetchResult, PairRecord, TokenRecord
from ..processors.normalizer import normalize_reserves, normalize_total_supply

logger = logging.getLogger(__name__)

PAIR_CALLS = ("token0", "token1", "getReserves", "totalSupply")
TOKEN_CALLS = ("name", "symbol", "decimals")


class ResolverState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ACQUIRING_PROVIDER = "acquiring_provider"
    FETCHING_PAIR_BATCH = "fetching_pair_batch"
    FETCHING_TOKEN_BATCH = "fetching_token_batch"
    NORMALIZING = "normalizing"
    READY = "ready"
    FAILED = "failed"


TRANSITIONS: Dict[ResolverState, Tuple[ResolverState, ...]] = {
    ResolverState.IDLE: (ResolverState.VALIDATING,),
    ResolverState.VALIDATING: (ResolverState.ACQUIRING_PROVIDER, ResolverState.FAILED),
    ResolverState.ACQUIRING_PROVIDER: (ResolverState.FETCHING_PAIR_BATCH, ResolverState.FAILED),
    ResolverState.FETCHING_PAIR_BATCH: (ResolverState.FETCHING_TOKEN_BATCH, ResolverState.FAILED),
    # Token batch failures degrade to placeholder data instead of failing
    ResolverState.FETCHING_TOKEN_BATCH: (ResolverState.NORMALIZING,),
    ResolverState.NORMALIZING: (ResolverState.READY,),
    ResolverState.READY: (),
    ResolverState.FAILED: (),
}


class FetchTrace:
    """State path walked by a single resolve call."""

    def __init__(self):
        self.states: List[ResolverState] = [ResolverState.IDLE]

    @property
    def state(self) -> ResolverState:
        return self.states[-1]

    def enter(self, state: ResolverState) -> None:
        if state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal resolver transition {self.state.value} -> {state.value}")
        self.states.append(state)


@dataclass
class PairSnapshot:
    """Decoded output of the pair batch."""

    token0: str
    token1: str
    reserve0: int
    reserve1: int
    total_supply: int
    block_number: int


class PairResolver:
    """
    Two-phase pair fetcher built on a Multicall aggregator.

    Resolvers hold configuration only, so one instance can serve any number
    of concurrent resolve calls.
    """

    def __init__(
        self,
        multicall_address: Optional[str],
        provider: ProviderFactory,
    ):
        """
        Initialize the resolver.

        Args:
            multicall_address: Aggregator contract address (validated per fetch)
            provider: Zero-argument callable returning an AsyncWeb3 connection
        """
        self.multicall_address = multicall_address
        self.provider = provider
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_config(cls, config=None) -> "PairResolver":
        """Build a resolver from the global ConfigManager."""
        if config is None:
            from ..config import get_config

            config = get_config()
        return cls(
            multicall_address=config.chains.MULTICALL_ADDRESS,
            provider=provider_factory(config.chains.RPC_URL),
        )

    async def resolve(self, pair_address: Optional[str]) -> PairFetchResult:
        """
        Fetch and assemble everything known about ``pair_address``.

        Args:
            pair_address: Pair contract address as hex text

        Returns:
            PairFetchResult holding either the PairRecord or the error kind
            and a user-facing message
        """
        trace = FetchTrace()
        trace.enter(ResolverState.VALIDATING)

        try:
            address, aggregator = self.validate(pair_address)
        except BatchError as e:
            return self._fail(trace, e, str(e))

        trace.enter(ResolverState.ACQUIRING_PROVIDER)
        try:
            batcher = self._connect(aggregator)
        except ProviderUnavailableError as e:
            return self._fail(trace, e, f"Error: {e}")

        trace.enter(ResolverState.FETCHING_PAIR_BATCH)
        self.logger.info(f"Fetching pair data for {address} via {aggregator}")
        try:
            snapshot = await self._fetch_pair_batch(batcher, address)
        except BatchError as e:
            error = e if isinstance(e, AggregationError) else AggregationError(str(e))
            return self._fail(trace, error, f"Error: {error}")

        trace.enter(ResolverState.FETCHING_TOKEN_BATCH)
        token0, token1, fallbacks = await self._fetch_token_batch(
            batcher, snapshot.token0, snapshot.token1
        )

        trace.enter(ResolverState.NORMALIZING)
        record = PairRecord(
            pair_address=address,
            token0=token0,
            token1=token1,
            reserves=normalize_reserves(snapshot.reserve0, snapshot.reserve1, token0, token1),
            total_supply=normalize_total_supply(snapshot.total_supply),
            block_number=snapshot.block_number,
        )

        trace.enter(ResolverState.READY)
        self.logger.info(
            f"Resolved {record.token0.symbol}/{record.token1.symbol} pair {address} "
            f"at block {snapshot.block_number}"
        )
        return PairFetchResult.ok(record, transitions=list(trace.states), fallbacks=fallbacks)

    def validate(self, pair_address: Optional[str]) -> Tuple[str, str]:
        """
        Check the pair address and the aggregator configuration.

        Returns:
            Checksummed pair and aggregator addresses

        Raises:
            ValidationError: If the pair address is empty or malformed
            ConfigurationError: If the aggregator address is missing or malformed
        """
        return self._validate_pair_address(pair_address), validate_aggregator_address(
            self.multicall_address
        )

    @staticmethod
    def _validate_pair_address(pair_address: Optional[str]) -> str:
        if not pair_address or not str(pair_address).strip():
            raise ValidationError("Please enter a pair address")
        pair_address = str(pair_address).strip()
        if not is_valid_address(pair_address):
            raise ValidationError("Invalid Ethereum address format")
        return to_checksum_address(pair_address)

    def _connect(self, aggregator: str) -> MulticallBatcher:
        try:
            w3 = self.provider()
        except ProviderUnavailableError:
            raise
        except Exception as e:
            raise ProviderUnavailableError(f"Failed to initialize provider: {e}") from e

        if w3 is None:
            raise ProviderUnavailableError("Failed to initialize provider")
        try:
            return MulticallBatcher(w3, aggregator)
        except Exception as e:
            raise ProviderUnavailableError(f"Failed to initialize multicall contract: {e}") from e

    async def _fetch_pair_batch(self, batcher: MulticallBatcher, address: str) -> PairSnapshot:
        calls = pair_interface.build_calls(address, PAIR_CALLS)
        result = await batcher.aggregate(calls)
        token0_raw, token1_raw, reserves_raw, supply_raw = result.return_data

        try:
            token0 = pair_interface.decode_result("token0", token0_raw)
            token1 = pair_interface.decode_result("token1", token1_raw)
            reserve0, reserve1 = pair_interface.decode_result("getReserves", reserves_raw)
            total_supply = pair_interface.decode_result("totalSupply", supply_raw)
        except DecodeError as e:
            raise AggregationError(f"Failed to fetch pair data - {e}") from e

        return PairSnapshot(
            token0=token0,
            token1=token1,
            reserve0=reserve0,
            reserve1=reserve1,
            total_supply=total_supply,
            block_number=result.block_number,
        )

    async def _fetch_token_batch(
        self, batcher: MulticallBatcher, token0: str, token1: str
    ) -> Tuple[TokenRecord, TokenRecord, List[str]]:
        calls = token_interface.build_calls(token0, TOKEN_CALLS) + token_interface.build_calls(
            token1, TOKEN_CALLS
        )

        try:
            results: Sequence[bytes] = (await batcher.aggregate(calls)).return_data
        except BatchError as e:
            self.logger.warning(f"Token data fetch failed, using defaults: {e}")
            results = [b""] * len(calls)

        size = len(TOKEN_CALLS)
        record0, fallbacks0 = self._decode_token(token0, results[:size])
        record1, fallbacks1 = self._decode_token(token1, results[size:])
        return record0, record1, fallbacks0 + fallbacks1

    @staticmethod
    def _decode_token(address: str, results: Sequence[bytes]) -> Tuple[TokenRecord, List[str]]:
        fields: Dict[str, DecodedField] = {
            method: token_interface.decode_with_fallback(method, data)
            for method, data in zip(TOKEN_CALLS, results)
        }
        record = TokenRecord(
            address=address,
            name=fields["name"].value,
            symbol=fields["symbol"].value,
            decimals=fields["decimals"].value,
        )
        fallbacks = [f"{address}.{method}" for method, f in fields.items() if f.is_default]
        return record, fallbacks

    def _fail(self, trace: FetchTrace, error: BatchError, message: str) -> PairFetchResult:
        failed_in = trace.state
        trace.enter(ResolverState.FAILED)
        kind = error.kind or ErrorKind.NETWORK_OR_AGGREGATION

        if kind in (ErrorKind.INPUT_VALIDATION, ErrorKind.CONFIGURATION):
            self.logger.warning(f"Fetch rejected during {failed_in.value}: {error}")
        else:
            self.logger.error(f"Error fetching data during {failed_in.value}: {error}")

        return PairFetchResult.fail(kind, message, transitions=list(trace.states))
