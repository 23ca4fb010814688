"""Tests for the explorer session state container."""

import asyncio

import pytest

from pair_explorer.models import ErrorKind
from pair_explorer.pipeline import PairExplorerSession, PairResolver

MULTICALL = "0xeefBa1e63905eF1D7ACbA5a8513c70307C1cE441"
ETH_USDC_PAIR = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"
ETH_USDT_PAIR = "0x0d4a11d5EEaaC28EC3F61d100daF4d40471f1852"


async def wait_for_requests(node, count: int) -> None:
    for _ in range(100):
        if node.request_count >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} aggregate requests, saw {node.request_count}")


@pytest.fixture
def events(session):
    seen = []
    session.subscribe(seen.append)
    return seen


class TestFetch:
    @pytest.mark.asyncio
    async def test_successful_fetch(self, session, events):
        session.pair_address = ETH_USDC_PAIR

        result = await session.fetch_pair_data()

        assert result.success
        assert session.data.token0.symbol == "USDC"
        assert session.error == ""
        assert not session.loading
        assert [e.loading for e in events] == [False, True, False]
        assert events[-1].data is session.data

    @pytest.mark.asyncio
    async def test_loading_is_set_while_in_flight(self, node, session):
        gate = node.hold(ETH_USDC_PAIR)
        task = asyncio.create_task(session.fetch_pair_data(ETH_USDC_PAIR))

        await wait_for_requests(node, 1)
        assert session.loading
        assert session.error == ""

        gate.set()
        await task
        assert not session.loading

    @pytest.mark.asyncio
    async def test_explicit_address_overrides_field(self, session):
        session.pair_address = ETH_USDT_PAIR

        await session.fetch_pair_data(ETH_USDC_PAIR)

        assert session.data.pair_address == ETH_USDC_PAIR
        assert session.pair_address == ETH_USDT_PAIR

    def test_pair_address_is_trimmed(self, session, events):
        session.pair_address = f"  {ETH_USDC_PAIR}\n"

        assert session.pair_address == ETH_USDC_PAIR
        assert events[-1].pair_address == ETH_USDC_PAIR


class TestErrors:
    @pytest.mark.asyncio
    async def test_validation_error_does_not_toggle_loading(self, node, session, events):
        result = await session.fetch_pair_data("0x1234")

        assert result.error_kind is ErrorKind.INPUT_VALIDATION
        assert session.error == "Invalid Ethereum address format"
        assert all(not e.loading for e in events)
        assert node.request_count == 0

    @pytest.mark.asyncio
    async def test_missing_address(self, session):
        await session.fetch_pair_data()
        assert session.error == "Please enter a pair address"

    @pytest.mark.asyncio
    async def test_configuration_error(self, node):
        session = PairExplorerSession(PairResolver(None, lambda: node.w3))

        result = await session.fetch_pair_data(ETH_USDC_PAIR)

        assert result.error_kind is ErrorKind.CONFIGURATION
        assert session.error == "Multicall address not configured"
        assert not session.loading

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_previous_record(self, node, session):
        await session.fetch_pair_data(ETH_USDC_PAIR)
        previous = session.data
        node.revert_batches.add(node.request_count)

        result = await session.fetch_pair_data(ETH_USDT_PAIR)

        assert result.failed
        assert session.error.startswith("Error: ")
        assert session.data is previous
        assert not session.loading

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, session):
        await session.fetch_pair_data("nope")
        assert session.error

        await session.fetch_pair_data(ETH_USDC_PAIR)
        assert session.error == ""


class TestOverlappingFetches:
    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self, node, session):
        gate = node.hold(ETH_USDC_PAIR)
        first = asyncio.create_task(session.fetch_pair_data(ETH_USDC_PAIR))
        await wait_for_requests(node, 1)

        second = await session.fetch_pair_data(ETH_USDT_PAIR)
        assert second.success
        assert session.loading

        gate.set()
        stale = await first

        assert stale.success
        assert session.data.pair_address == ETH_USDT_PAIR
        assert session.data.token1.symbol == "USDT"
        assert not session.loading

    @pytest.mark.asyncio
    async def test_last_write_wins_without_guard(self, node, resolver):
        session = PairExplorerSession(resolver, discard_stale=False)
        gate = node.hold(ETH_USDC_PAIR)
        first = asyncio.create_task(session.fetch_pair_data(ETH_USDC_PAIR))
        await wait_for_requests(node, 1)

        await session.fetch_pair_data(ETH_USDT_PAIR)
        assert session.data.pair_address == ETH_USDT_PAIR

        gate.set()
        await first

        record = session.data
        assert record.pair_address == ETH_USDC_PAIR
        assert (record.token0.symbol, record.token1.symbol) == ("USDC", "WETH")
        assert record.reserves.formatted_reserve0 == "33512004.221503"
        assert not session.loading

    @pytest.mark.asyncio
    async def test_loading_clears_once_after_all_fetches(self, node, session, events):
        gate = node.hold(ETH_USDC_PAIR)
        first = asyncio.create_task(session.fetch_pair_data(ETH_USDC_PAIR))
        await wait_for_requests(node, 1)
        await session.fetch_pair_data(ETH_USDT_PAIR)
        gate.set()
        await first

        assert [e.loading for e in events] == [True, True, True, False]


class TestListeners:
    @pytest.mark.asyncio
    async def test_unsubscribe(self, session):
        seen = []
        unsubscribe = session.subscribe(seen.append)
        session.pair_address = ETH_USDC_PAIR
        unsubscribe()

        await session.fetch_pair_data()

        assert len(seen) == 1
        unsubscribe()

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stick_loading(self, session, events, caplog):
        def fail_while_loading(snapshot):
            if snapshot.loading:
                raise RuntimeError("render failed")

        session.subscribe(fail_while_loading)

        result = await session.fetch_pair_data(ETH_USDC_PAIR)

        assert result.success
        assert not session.loading
        assert session.data.token0.symbol == "USDC"
        assert [e.loading for e in events] == [True, False]
        assert "render failed" in caplog.text

    def test_snapshot_to_dict(self, session):
        session.pair_address = ETH_USDC_PAIR

        assert session.snapshot().to_dict() == {
            "pairAddress": ETH_USDC_PAIR,
            "data": None,
            "loading": False,
            "error": "",
        }
