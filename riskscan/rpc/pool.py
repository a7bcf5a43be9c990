"""
Multi-endpoint call layer.

The EndpointPool executes one logical JSON-RPC call with bounded failover
across tiered endpoints, a per-endpoint timeout, a response cache and
per-endpoint health tracking. Remote failures never escape as exceptions;
callers always receive an RpcCallResult.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError

from ..config.chains import Endpoint
from .errors import EndpointTimeoutError, ErrorHandler, UnsupportedMethodError

logger = logging.getLogger(__name__)

# Endpoints tried per logical call
MAX_ATTEMPTS = 2


class RpcMethod(Enum):
    """Closed set of remote methods the pool will execute."""
    GET_CODE = "eth_getCode"
    CALL = "eth_call"
    GET_STORAGE_AT = "eth_getStorageAt"
    BLOCK_NUMBER = "eth_blockNumber"
    GET_LOGS = "eth_getLogs"


@dataclass
class RpcCallResult:
    """
    Outcome of one logical call.

    Attributes:
        success: Whether any endpoint answered
        data: Decoded response (None on failure or revert)
        endpoint: Name of the endpoint that answered (or last tried)
        attempts: Endpoints contacted; 0 for a cache hit
        elapsed: Seconds from call start to outcome
        error: Last error message when the call failed
        reverted: The node answered but execution reverted
    """

    success: bool
    data: Any = None
    endpoint: Optional[str] = None
    attempts: int = 0
    elapsed: float = 0.0
    error: Optional[str] = None
    reverted: bool = False


@dataclass
class RpcPoolStats:
    """Aggregate statistics for non-cached calls."""

    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_elapsed: float = 0.0
    average_response_time: float = 0.0


def default_client_factory(endpoint: Endpoint) -> AsyncWeb3:
    """Build an async web3 client for an endpoint."""
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(endpoint.url))


class EndpointPool:
    """
    Tiered endpoint pool with failover, caching and health tracking.

    Endpoints are ordered per call by (tier, consecutive failures, config
    order); at most two are tried, strictly one after the other.
    """

    def __init__(
        self,
        endpoints: Sequence[Endpoint],
        client_factory: Optional[Callable[[Endpoint], Any]] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Initialize the endpoint pool.

        Args:
            endpoints: Configured endpoints, in configuration order
            client_factory: Builds a web3-like client per endpoint
            error_handler: Classifier/logger for endpoint failures
        """
        self.endpoints: List[Endpoint] = list(endpoints)
        self.client_factory = client_factory or default_client_factory
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._clients: Dict[int, Any] = {}
        self._failures: List[int] = [0] * len(self.endpoints)
        self._cache: Dict[str, RpcCallResult] = {}
        self._stats = RpcPoolStats()

    def _ordered_indexes(self) -> List[int]:
        return sorted(
            range(len(self.endpoints)),
            key=lambda i: (self.endpoints[i].tier, self._failures[i], i),
        )

    def _client(self, index: int) -> Any:
        if index not in self._clients:
            self._clients[index] = self.client_factory(self.endpoints[index])
        return self._clients[index]

    @staticmethod
    async def _dispatch(client: Any, method: RpcMethod, params: Sequence[Any]) -> Any:
        eth = client.eth
        if method is RpcMethod.GET_CODE:
            return await eth.get_code(*params)
        if method is RpcMethod.CALL:
            return await eth.call(*params)
        if method is RpcMethod.GET_STORAGE_AT:
            return await eth.get_storage_at(*params)
        if method is RpcMethod.BLOCK_NUMBER:
            return await eth.block_number
        return await eth.get_logs(*params)

    async def call(
        self,
        method: RpcMethod,
        params: Sequence[Any] = (),
        cache_key: Optional[str] = None,
    ) -> RpcCallResult:
        """
        Execute one logical call.

        Args:
            method: One of RpcMethod
            params: Positional arguments for the web3 ``eth`` method
            cache_key: Optional key; successful answers are cached under it

        Returns:
            RpcCallResult; never raises for remote failures

        Raises:
            UnsupportedMethodError: If method is not an RpcMethod
        """
        if not isinstance(method, RpcMethod):
            raise UnsupportedMethodError(method)

        if cache_key is not None and cache_key in self._cache:
            cached = self._cache[cache_key]
            return RpcCallResult(
                success=True,
                data=cached.data,
                endpoint=cached.endpoint,
                attempts=0,
                elapsed=0.0,
                reverted=cached.reverted,
            )

        start = time.perf_counter()
        self._stats.total_calls += 1
        last_error: Optional[str] = None
        last_endpoint: Optional[str] = None
        attempts = 0

        for index in self._ordered_indexes()[:MAX_ATTEMPTS]:
            endpoint = self.endpoints[index]
            attempts += 1
            last_endpoint = endpoint.name
            reverted = False
            try:
                data = await asyncio.wait_for(
                    self._dispatch(self._client(index), method, params),
                    timeout=endpoint.timeout,
                )
            except asyncio.TimeoutError:
                error = EndpointTimeoutError(endpoint.name, endpoint.timeout)
                self._record_failure(index, error, method)
                last_error = str(error)
                continue
            except ContractLogicError as e:
                # A revert is a valid answer from a healthy node
                data = None
                reverted = True
                self.logger.debug(f"{method.value} reverted on {endpoint.name}: {e}")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._record_failure(index, e, method)
                last_error = str(e) or type(e).__name__
                continue

            elapsed = time.perf_counter() - start
            result = RpcCallResult(
                success=True,
                data=data,
                endpoint=endpoint.name,
                attempts=attempts,
                elapsed=elapsed,
                reverted=reverted,
            )
            self._failures[index] = 0
            self._stats.successful_calls += 1
            self._stats.total_elapsed += elapsed
            self._stats.average_response_time = self._stats.total_elapsed / self._stats.successful_calls
            if cache_key is not None:
                self._cache[cache_key] = result
            return result

        self._stats.failed_calls += 1
        if last_error is None:
            last_error = "No endpoints configured"
        self.logger.warning(f"❌ {method.value} failed after {attempts} attempt(s): {last_error}")
        return RpcCallResult(
            success=False,
            endpoint=last_endpoint,
            attempts=attempts,
            elapsed=time.perf_counter() - start,
            error=last_error,
        )

    def _record_failure(self, index: int, error: Exception, method: RpcMethod):
        self._failures[index] += 1
        self.error_handler.log_error(
            error,
            {
                "endpoint": self.endpoints[index].name,
                "rpc_method": method.value,
                "consecutive_failures": self._failures[index],
            },
        )

    def get_stats(self) -> RpcPoolStats:
        """Get a snapshot of the aggregate call statistics."""
        return RpcPoolStats(**vars(self._stats))

    def get_detailed_stats(self) -> Dict[str, Any]:
        """Get statistics plus per-endpoint failure counts and cache size."""
        return {
            **vars(self._stats),
            "cache_size": len(self._cache),
            "endpoints": [
                {
                    "name": endpoint.name,
                    "url": endpoint.url,
                    "tier": endpoint.tier,
                    "timeout": endpoint.timeout,
                    "consecutive_failures": self._failures[i],
                }
                for i, endpoint in enumerate(self.endpoints)
            ],
        }

    def get_failure_count(self, endpoint: Endpoint) -> int:
        """Consecutive failures recorded for a configured endpoint."""
        return self._failures[self.endpoints.index(endpoint)]

    def clear_cache(self):
        """Drop every cached response."""
        self._cache.clear()
        self.logger.debug("Cache cleared")

    async def close(self):
        """Disconnect every client created so far; the pool can be reused afterwards."""
        clients, self._clients = self._clients, {}
        for index, client in clients.items():
            provider = getattr(client, "provider", None)
            disconnect = getattr(provider, "disconnect", None)
            if disconnect is None:
                continue
            try:
                await disconnect()
            except Exception as e:
                self.logger.warning(f"⚠️ Could not disconnect {self.endpoints[index].name}: {e}")
