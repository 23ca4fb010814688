"""Test configuration for the pair resolution pipeline."""

import asyncio
from typing import Dict, List, Optional, Set, Tuple
from unittest.mock import MagicMock

import pytest
from eth_abi import encode
from web3.exceptions import ContractLogicError

from pair_explorer.batchers.codec import pair_interface, token_interface
from pair_explorer.pipeline import PairExplorerSession, PairResolver

MULTICALL = "0xeefBa1e63905eF1D7ACbA5a8513c70307C1cE441"

ETH_USDC_PAIR = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"
ETH_USDT_PAIR = "0x0d4a11d5EEaaC28EC3F61d100daF4d40471f1852"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class FakeMulticallNode:
    """
    In-memory node answering Multicall ``aggregate`` calls.

    Responses are keyed by (target, call data); unknown calls return empty
    bytes, which is what a missing method looks like to the decoder.
    """

    def __init__(self, block_number: int = 19_000_000):
        self.block_number = block_number
        self.responses: Dict[Tuple[str, bytes], bytes] = {}
        self.requests: List[List[Tuple[str, bytes]]] = []
        self.revert_batches: Set[int] = set()
        self.truncate_batches: Dict[int, int] = {}
        self.gates: Dict[str, asyncio.Event] = {}

        self.w3 = MagicMock()
        self.w3.eth.contract.return_value.functions.aggregate = self._aggregate

    def add_pair(self, pair: str, token0: str, token1: str, reserve0: int, reserve1: int, supply: int):
        self._set(pair, pair_interface, "token0", encode(["address"], [token0]))
        self._set(pair, pair_interface, "token1", encode(["address"], [token1]))
        self._set(
            pair,
            pair_interface,
            "getReserves",
            encode(["uint112", "uint112", "uint32"], [reserve0, reserve1, 1_700_000_000]),
        )
        self._set(pair, pair_interface, "totalSupply", encode(["uint256"], [supply]))

    def add_token(self, token: str, name: Optional[str], symbol: Optional[str], decimals: Optional[int]):
        if name is not None:
            self._set(token, token_interface, "name", encode(["string"], [name]))
        if symbol is not None:
            self._set(token, token_interface, "symbol", encode(["string"], [symbol]))
        if decimals is not None:
            self._set(token, token_interface, "decimals", encode(["uint8"], [decimals]))

    def hold(self, pair: str) -> asyncio.Event:
        """Block pair batches for ``pair`` until the returned event is set."""
        gate = asyncio.Event()
        self.gates[pair.lower()] = gate
        return gate

    @property
    def request_count(self) -> int:
        return len(self.requests)

    def _set(self, target, interface, method, data):
        self.responses[(target.lower(), interface.encode_call(method))] = data

    def _aggregate(self, payload):
        node = self
        calls = [(target, bytes(data)) for target, data in payload]

        class _Call:
            async def call(self, block_identifier="latest"):
                return await node._respond(calls)

        return _Call()

    async def _respond(self, calls):
        index = len(self.requests)
        self.requests.append(calls)

        gate = self.gates.get(calls[0][0].lower())
        if gate is not None:
            await gate.wait()

        if index in self.revert_batches:
            raise ContractLogicError("execution reverted: Multicall aggregate: call failed")

        data = [self.responses.get((target.lower(), call_data), b"") for target, call_data in calls]
        if index in self.truncate_batches:
            data = data[: self.truncate_batches[index]]
        return [self.block_number, data]


@pytest.fixture
def node():
    """Node serving the ETH/USDC and ETH/USDT mainnet pairs."""
    node = FakeMulticallNode()
    node.add_pair(ETH_USDC_PAIR, USDC, WETH, 33_512_004_221_503, 17_020 * 10**18 + 5 * 10**17, 123 * 10**15)
    node.add_pair(ETH_USDT_PAIR, WETH, USDT, 15_000 * 10**18, 30_123_456_789_012, 456 * 10**15)
    node.add_token(USDC, "USD Coin", "USDC", 6)
    node.add_token(WETH, "Wrapped Ether", "WETH", 18)
    node.add_token(USDT, "Tether USD", "USDT", 6)
    return node


@pytest.fixture
def resolver(node):
    return PairResolver(MULTICALL, lambda: node.w3)


@pytest.fixture
def session(resolver):
    return PairExplorerSession(resolver)
