"""
Test suite for EndpointPool.

Covers failover ordering, timeouts, caching, revert handling and statistics
using in-process fake clients.
"""

import asyncio

import pytest
from web3.exceptions import ContractLogicError

from riskscan.config.chains import Endpoint
from riskscan.rpc.errors import ErrorHandler, EndpointTimeoutError, UnsupportedMethodError
from riskscan.rpc.pool import EndpointPool, RpcMethod


class ScriptedEth:
    """Fake ``eth`` namespace whose behaviour is chosen per endpoint."""

    def __init__(self, behaviour, counter):
        self.behaviour = behaviour
        self.counter = counter

    async def _run(self, value):
        self.counter.append(self.behaviour)
        if self.behaviour == "slow":
            await asyncio.sleep(5)
        if self.behaviour == "error":
            raise ConnectionError("connection refused")
        if self.behaviour == "revert":
            raise ContractLogicError("execution reverted")
        return value

    async def get_code(self, address):
        return await self._run(b"\x60\x80")

    async def call(self, tx):
        return await self._run(b"\x00" * 31 + b"\x01")

    async def get_storage_at(self, address, slot):
        return await self._run(b"\x00" * 32)

    @property
    def block_number(self):
        return self._run(123)

    async def get_logs(self, params):
        return await self._run([])


class ScriptedClient:
    def __init__(self, behaviour, counter):
        self.eth = ScriptedEth(behaviour, counter)


def make_pool(behaviours, timeouts=None):
    """Build a pool whose endpoints behave as listed, in config order."""
    endpoints = []
    contacted = {}
    for i, behaviour in enumerate(behaviours):
        timeout = timeouts[i] if timeouts else 0.05
        endpoints.append(Endpoint(f"https://node{i}.example", 1, timeout, f"node{i}"))
        contacted[f"node{i}"] = []
    by_name = dict(zip([e.name for e in endpoints], behaviours))
    pool = EndpointPool(
        endpoints,
        client_factory=lambda endpoint: ScriptedClient(by_name[endpoint.name], contacted[endpoint.name]),
    )
    return pool, endpoints, contacted


class TestFailover:
    """Test endpoint ordering and the two-attempt failover."""

    @pytest.mark.asyncio
    async def test_timeout_then_success_uses_second_endpoint(self):
        """First endpoint times out, second answers."""
        pool, endpoints, contacted = make_pool(["slow", "ok"])

        result = await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,))

        assert result.success
        assert result.attempts == 2
        assert result.endpoint == "node1"
        assert pool.get_failure_count(endpoints[0]) == 1
        assert pool.get_failure_count(endpoints[1]) == 0

    @pytest.mark.asyncio
    async def test_at_most_two_endpoints_attempted(self):
        """A third healthy endpoint is never reached within one call."""
        pool, endpoints, contacted = make_pool(["error", "error", "ok"])

        result = await pool.call(RpcMethod.CALL, ({"to": "0x" + "11" * 20, "data": "0x"},))

        assert not result.success
        assert result.attempts == 2
        assert "connection refused" in result.error
        assert contacted["node2"] == []
        assert pool.get_stats().failed_calls == 1

    @pytest.mark.asyncio
    async def test_failed_endpoint_is_deprioritised(self):
        """After a failure the healthy endpoint of the same tier goes first."""
        pool, endpoints, contacted = make_pool(["error", "ok"])

        await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,))
        second = await pool.call(RpcMethod.GET_CODE, ("0x" + "22" * 20,))

        assert second.attempts == 1
        assert second.endpoint == "node1"
        assert len(contacted["node0"]) == 1

    @pytest.mark.asyncio
    async def test_tier_beats_configuration_order(self):
        """Lower tier numbers are tried first regardless of position."""
        counter = {"primary": [], "backup": []}
        endpoints = [
            Endpoint("https://backup.example", 3, 0.5, "backup"),
            Endpoint("https://primary.example", 1, 0.5, "primary"),
        ]
        pool = EndpointPool(
            endpoints,
            client_factory=lambda endpoint: ScriptedClient("ok", counter[endpoint.name]),
        )

        result = await pool.call(RpcMethod.BLOCK_NUMBER)

        assert result.data == 123
        assert result.endpoint == "primary"
        assert counter["backup"] == []

    @pytest.mark.asyncio
    async def test_success_resets_failure_counter(self):
        """A success on an endpoint clears its consecutive failures."""
        behaviour = {"value": "error"}
        counter = []

        class Flaky:
            @property
            def eth(self):
                return ScriptedEth(behaviour["value"], counter)

        endpoint = Endpoint("https://flaky.example", 1, 0.5, "flaky")
        pool = EndpointPool([endpoint], client_factory=lambda e: Flaky())

        await pool.call(RpcMethod.BLOCK_NUMBER)
        assert pool.get_failure_count(endpoint) == 1

        behaviour["value"] = "ok"
        result = await pool.call(RpcMethod.BLOCK_NUMBER)
        assert result.success
        assert result.attempts == 1
        assert pool.get_failure_count(endpoint) == 0


class TestCache:
    """Test response caching."""

    @pytest.mark.asyncio
    async def test_cache_hit_short_circuits(self):
        """Second call with the same key contacts no endpoint."""
        pool, endpoints, contacted = make_pool(["ok", "ok"])

        first = await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,), cache_key="code:a")
        second = await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,), cache_key="code:a")

        assert first.attempts == 1
        assert second.success
        assert second.attempts == 0
        assert second.data == first.data
        assert len(contacted["node0"]) == 1
        assert pool.get_stats().total_calls == 1

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self):
        pool, endpoints, contacted = make_pool(["error", "error"])

        await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,), cache_key="code:a")
        again = await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,), cache_key="code:a")

        assert again.attempts == 2
        assert pool.get_detailed_stats()["cache_size"] == 0

    @pytest.mark.asyncio
    async def test_clear_cache(self):
        pool, endpoints, contacted = make_pool(["ok"])

        await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,), cache_key="code:a")
        pool.clear_cache()
        result = await pool.call(RpcMethod.GET_CODE, ("0x" + "11" * 20,), cache_key="code:a")

        assert result.attempts == 1


class TestReverts:
    """Execution reverts are answers, not endpoint failures."""

    @pytest.mark.asyncio
    async def test_revert_is_success_with_flag(self):
        pool, endpoints, contacted = make_pool(["revert", "ok"])

        result = await pool.call(RpcMethod.CALL, ({"to": "0x" + "11" * 20, "data": "0x12345678"},))

        assert result.success
        assert result.reverted
        assert result.data is None
        assert result.attempts == 1
        assert pool.get_failure_count(endpoints[0]) == 0
        assert contacted["node1"] == []


class TestStatsAndErrors:
    """Test statistics and programmer errors."""

    @pytest.mark.asyncio
    async def test_unsupported_method_raises(self):
        pool, endpoints, contacted = make_pool(["ok"])

        with pytest.raises(UnsupportedMethodError):
            await pool.call("eth_sendRawTransaction", ("0xdead",))

        assert pool.get_stats().total_calls == 0
        assert contacted["node0"] == []

    @pytest.mark.asyncio
    async def test_stats_track_successes_and_failures(self):
        good, _, _ = make_pool(["ok"])
        await good.call(RpcMethod.BLOCK_NUMBER)
        await good.call(RpcMethod.BLOCK_NUMBER)

        stats = good.get_stats()
        assert stats.total_calls == 2
        assert stats.successful_calls == 2
        assert stats.failed_calls == 0
        assert stats.average_response_time == pytest.approx(stats.total_elapsed / 2)

    @pytest.mark.asyncio
    async def test_concurrent_calls_keep_counts_consistent(self):
        pool, endpoints, contacted = make_pool(["ok", "ok"])

        results = await asyncio.gather(*[pool.call(RpcMethod.BLOCK_NUMBER) for _ in range(25)])

        assert all(r.success for r in results)
        assert pool.get_stats().successful_calls == 25
        assert pool.get_stats().total_calls == 25

    def test_detailed_stats_lists_endpoints(self):
        pool, endpoints, contacted = make_pool(["ok", "ok"])
        detailed = pool.get_detailed_stats()

        assert [e["name"] for e in detailed["endpoints"]] == ["node0", "node1"]
        assert detailed["cache_size"] == 0

    def test_timeout_classified_as_network(self):
        handler = ErrorHandler()
        assert handler.classify_error(EndpointTimeoutError("node0", 1.0)) == "network"
        assert handler.classify_error(Exception("429 Too Many Requests")) == "rate_limit"
        assert handler.classify_error(Exception("something odd")) == "unknown"


class TestClose:
    """Test releasing client connections."""

    @pytest.mark.asyncio
    async def test_close_disconnects_created_clients(self, pool, fake_chain):
        await pool.call(RpcMethod.BLOCK_NUMBER)

        await pool.close()

        assert fake_chain.disconnects == 1

    @pytest.mark.asyncio
    async def test_pool_reconnects_after_close(self, pool, fake_chain):
        await pool.call(RpcMethod.BLOCK_NUMBER)
        await pool.close()

        result = await pool.call(RpcMethod.BLOCK_NUMBER)
        await pool.close()

        assert result.success and result.data == fake_chain.block_number
        assert fake_chain.disconnects == 2

    @pytest.mark.asyncio
    async def test_clients_without_provider_are_skipped(self):
        pool, endpoints, contacted = make_pool(["ok"])
        await pool.call(RpcMethod.BLOCK_NUMBER)

        await pool.close()

        assert contacted["node0"] == ["ok"]
