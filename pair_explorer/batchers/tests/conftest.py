"""Test configuration for batchers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

MULTICALL = "0xeefBa1e63905eF1D7ACbA5a8513c70307C1cE441"


@pytest.fixture
def multicall_address():
    return MULTICALL


@pytest.fixture
def mock_w3():
    """AsyncWeb3 stand-in whose aggregate().call() is an AsyncMock."""
    w3 = MagicMock()
    aggregate_call = AsyncMock(return_value=[19_000_000, []])
    w3.eth.contract.return_value.functions.aggregate.return_value.call = aggregate_call
    return w3


@pytest.fixture
def aggregate_call(mock_w3):
    return mock_w3.eth.contract.return_value.functions.aggregate.return_value.call
