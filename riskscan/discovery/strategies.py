"""
Independent liquidity discovery strategies.

Each strategy takes a token address and returns the venues it could
confirm on-chain plus the number of lookups it performed. Strategies share
nothing but the ContractReader (and through it the endpoint pool).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from web3 import Web3

from ..config.manager import ChainSettings
from ..config.protocols import FactorySpec
from ..rpc.reader import ContractReader
from .venue_types import LiquidityVenue, ProtocolFamily

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Event-log scan window behind the head, and the largest span per eth_getLogs
DEFAULT_LOOKBACK_BLOCKS = 50_000
DEFAULT_CHUNK_BLOCKS = 10_000


@dataclass
class StrategyOutcome:
    """Venues found by one strategy, plus lookups it could not complete."""

    venues: List[LiquidityVenue] = field(default_factory=list)
    checked: int = 0
    errors: List[str] = field(default_factory=list)


def _address_topic(address: str) -> str:
    return "0x" + "0" * 24 + address.lower()[2:]


def _topic_to_address(topic: Any) -> str:
    raw = bytes(topic) if not isinstance(topic, str) else bytes.fromhex(topic[2:])
    return Web3.to_checksum_address(raw[-20:])


def _hex(value: Any) -> str:
    if isinstance(value, str):
        return value.lower()
    return "0x" + bytes(value).hex()


def _data_bytes(data: Any) -> bytes:
    if isinstance(data, str):
        return bytes.fromhex(data[2:] if data.startswith("0x") else data)
    return bytes(data)


class VenueConfirmer:
    """Confirms candidate venues are live by reading their state."""

    def __init__(self, reader: ContractReader, settings: ChainSettings):
        self.reader = reader
        self.settings = settings

    def quote_symbol(self, quote: Optional[str]) -> str:
        stable = self.settings.get_stablecoin(quote)
        if stable:
            return stable.symbol
        if quote and self.settings.is_wrapped_native(quote):
            return "NATIVE"
        return "UNKNOWN"

    async def confirm_v2(self, pair: str, token: str, quote: Optional[str], dex: str,
                         evidence: List[str], source: str) -> Optional[LiquidityVenue]:
        """Read reserves and token order; drop pairs with no reserves."""
        reserves, token0 = await asyncio.gather(
            self.reader.read(pair, "getReserves()", ["uint112", "uint112", "uint32"]),
            self.reader.read_address(pair, "token0()"),
        )
        if reserves is None or token0 is None:
            return None
        reserve0, reserve1, _ = reserves
        if reserve0 == 0 and reserve1 == 0:
            return None

        is_token0 = token0.lower() == token.lower()
        token_reserve, quote_reserve = (reserve0, reserve1) if is_token0 else (reserve1, reserve0)
        explorer = self.settings.explorer_url
        return LiquidityVenue(
            family=ProtocolFamily.V2,
            address=Web3.to_checksum_address(pair),
            dex=f"{dex} V2",
            token=token,
            quote_token=quote,
            quote_symbol=self.quote_symbol(quote),
            reserve_token=token_reserve,
            reserve_quote=quote_reserve,
            evidence=evidence + [
                f"Pair contract: {explorer}/address/{pair}",
                f"getReserves(): {explorer}/address/{pair}#readContract",
            ],
            sources=[source],
        )

    async def confirm_v3(self, pool: str, token: str, quote: Optional[str], fee: Optional[int], dex: str,
                         evidence: List[str], source: str) -> Optional[LiquidityVenue]:
        """Read liquidity and slot0; drop pools with zero liquidity or price."""
        liquidity, slot0 = await asyncio.gather(
            self.reader.read_uint(pool, "liquidity()"),
            self.reader.read(pool, "slot0()", ["uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool"]),
        )
        if liquidity is None or slot0 is None:
            return None
        sqrt_price = slot0[0]
        if liquidity == 0 or sqrt_price == 0:
            return None

        explorer = self.settings.explorer_url
        return LiquidityVenue(
            family=ProtocolFamily.V3,
            address=Web3.to_checksum_address(pool),
            dex=f"{dex} V3",
            token=token,
            quote_token=quote,
            quote_symbol=self.quote_symbol(quote),
            liquidity=liquidity,
            sqrt_price_x96=sqrt_price,
            fee=fee,
            evidence=evidence + [
                f"Pool contract: {explorer}/address/{pool}",
                f"slot0(): {explorer}/address/{pool}#readContract",
                f"liquidity(): {liquidity}",
                "WARNING: V3 USD depth estimation is NOT RELIABLE without tick range analysis",
            ],
            sources=[source],
        )


class DiscoveryStrategy(ABC):
    """A single independent way of locating venues."""

    name = "strategy"

    def __init__(self, reader: ContractReader, settings: ChainSettings):
        self.reader = reader
        self.settings = settings
        self.confirmer = VenueConfirmer(reader, settings)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def discover(self, token: str) -> StrategyOutcome:
        """Find venues for token."""
        pass


class FactoryLookupStrategy(DiscoveryStrategy):
    """Ask every known factory for a venue between the token and each quote token."""

    name = "factory"

    async def discover(self, token: str) -> StrategyOutcome:
        lookups = []
        quotes = [q for q in self.settings.quote_tokens if q.lower() != token.lower()]
        for factory in self.settings.factories:
            for quote in quotes:
                if factory.family == "v2":
                    lookups.append(self._lookup_v2(factory, token, quote))
                else:
                    for fee in self.settings.v3_fee_tiers:
                        lookups.append(self._lookup_v3(factory, token, quote, fee))

        results = await asyncio.gather(*lookups)
        venues = [venue for venue in results if venue is not None]
        self.logger.debug(f"Factory lookup: {len(venues)} venue(s) from {len(lookups)} lookups")
        return StrategyOutcome(venues=venues, checked=len(lookups))

    async def _lookup_v2(self, factory: FactorySpec, token: str, quote: str) -> Optional[LiquidityVenue]:
        pair = await self.reader.read_address(
            factory.address, "getPair(address,address)", ["address", "address"],
            [Web3.to_checksum_address(token), Web3.to_checksum_address(quote)],
        )
        if not pair or pair == ZERO_ADDRESS:
            return None
        evidence = [f"Factory getPair(): {self.settings.explorer_url}/address/{factory.address}#readContract"]
        return await self.confirmer.confirm_v2(pair, token, quote, factory.dex, evidence, self.name)

    async def _lookup_v3(self, factory: FactorySpec, token: str, quote: str, fee: int) -> Optional[LiquidityVenue]:
        pool = await self.reader.read_address(
            factory.address, "getPool(address,address,uint24)", ["address", "address", "uint24"],
            [Web3.to_checksum_address(token), Web3.to_checksum_address(quote), fee],
        )
        if not pool or pool == ZERO_ADDRESS:
            return None
        evidence = [f"Factory getPool(): {self.settings.explorer_url}/address/{factory.address}#readContract"]
        return await self.confirmer.confirm_v3(pool, token, quote, fee, factory.dex, evidence, self.name)


class EventLogStrategy(DiscoveryStrategy):
    """
    Scan venue-creation events for the token on either side.

    V2 PairCreated and V3 PoolCreated matches are confirmed live. V4
    Initialize events on the singleton pool manager are kept as venues
    keyed by pool id, explicitly marked as not verifiable.

    Logs are requested in windows of at most ``chunk_blocks`` blocks, ending
    at the chain head read once per discovery. A contract whose logs could
    not be read is reported in ``StrategyOutcome.errors``.
    """

    name = "events"

    def __init__(self, reader: ContractReader, settings: ChainSettings,
                 lookback_blocks: int = DEFAULT_LOOKBACK_BLOCKS, chunk_blocks: int = DEFAULT_CHUNK_BLOCKS):
        super().__init__(reader, settings)
        self.lookback_blocks = lookback_blocks
        self.chunk_blocks = max(1, chunk_blocks)

    def block_windows(self, deployment_block: int, latest: int) -> List[Tuple[int, int]]:
        """Inclusive (from, to) ranges covering the scan window; empty when the contract postdates head."""
        start = deployment_block
        if self.lookback_blocks:
            start = max(start, latest - self.lookback_blocks + 1)

        windows = []
        while start <= latest:
            end = min(start + self.chunk_blocks - 1, latest)
            windows.append((start, end))
            start = end + 1
        return windows

    async def _logs_for(self, address: str, topic0: str, token: str, windows: Sequence[Tuple[int, int]],
                        positions=(1, 2)) -> List[Dict[str, Any]]:
        """Fetch logs with the token in each indexed position, one window at a time."""
        token_topic = _address_topic(token)
        logs = []
        for from_block, to_block in windows:
            queries = []
            for position in positions:
                topics: List[Optional[str]] = [topic0] + [None] * position
                topics[position] = token_topic
                queries.append(self.reader.get_logs({
                    "address": Web3.to_checksum_address(address),
                    "fromBlock": from_block,
                    "toBlock": to_block,
                    "topics": topics,
                }))
            for batch in await asyncio.gather(*queries):
                if batch is None:
                    raise RuntimeError(f"eth_getLogs failed for blocks {from_block}-{to_block}")
                logs.extend(batch)
        return logs

    async def discover(self, token: str) -> StrategyOutcome:
        latest = await self.reader.get_block_number()
        if latest is None:
            raise RuntimeError("eth_blockNumber failed, creation events not searched")

        labels = [factory.label for factory in self.settings.factories]
        tasks = [self._scan_factory(factory, token, latest) for factory in self.settings.factories]
        if self.settings.pool_manager:
            labels.append(f"{self.settings.pool_manager.dex} V4")
            tasks.append(self._scan_pool_manager(token, latest))

        outcome = StrategyOutcome()
        for label, scanned in zip(labels, await asyncio.gather(*tasks, return_exceptions=True)):
            if isinstance(scanned, Exception):
                self.logger.warning(f"Event scan failed for {label}: {scanned}")
                outcome.errors.append(f"{label}: {scanned}")
                continue
            outcome.venues.extend(scanned)
        return outcome

    async def _scan_factory(self, factory: FactorySpec, token: str, latest: int) -> List[LiquidityVenue]:
        windows = self.block_windows(factory.deployment_block, latest)
        topic0 = self.settings.pair_created_topic if factory.family == "v2" else self.settings.pool_created_topic
        logs = await self._logs_for(factory.address, topic0, token, windows)

        confirmations = []
        for log in logs:
            topics = log["topics"]
            token0 = _topic_to_address(topics[1])
            token1 = _topic_to_address(topics[2])
            quote = token1 if token0.lower() == token.lower() else token0
            data = _data_bytes(log["data"])
            evidence = [f"Creation event on {self.settings.explorer_url}/address/{factory.address}"]
            if factory.family == "v2":
                pair = Web3.to_checksum_address(data[12:32])
                confirmations.append(
                    self.confirmer.confirm_v2(pair, token, quote, factory.dex, evidence, self.name)
                )
            else:
                fee = int.from_bytes(_data_bytes(topics[3])[-3:], "big") if len(topics) > 3 else None
                pool = Web3.to_checksum_address(data[44:64])
                confirmations.append(
                    self.confirmer.confirm_v3(pool, token, quote, fee, factory.dex, evidence, self.name)
                )
        return [venue for venue in await asyncio.gather(*confirmations) if venue is not None]

    async def _scan_pool_manager(self, token: str, latest: int) -> List[LiquidityVenue]:
        manager = self.settings.pool_manager
        windows = self.block_windows(manager.deployment_block, latest)
        logs = await self._logs_for(
            manager.address, self.settings.v4_initialize_topic, token, windows, positions=(2, 3)
        )

        venues = []
        explorer = self.settings.explorer_url
        for log in logs:
            topics = log["topics"]
            pool_id = _hex(topics[1])
            currency0 = _topic_to_address(topics[2])
            currency1 = _topic_to_address(topics[3])
            quote = currency1 if currency0.lower() == token.lower() else currency0
            data = _data_bytes(log["data"])
            fee = int.from_bytes(data[29:32], "big") if len(data) >= 32 else None
            venues.append(LiquidityVenue(
                family=ProtocolFamily.V4,
                address=pool_id,
                dex=f"{manager.dex} V4",
                token=token,
                quote_token=quote,
                quote_symbol=self.confirmer.quote_symbol(quote),
                fee=fee,
                evidence=[
                    f"V4 PoolManager: {explorer}/address/{manager.address}",
                    f"Initialize pool id: {pool_id}",
                    "WARNING: V4 liquidity amount is NOT VERIFIABLE on-chain",
                ],
                sources=[self.name],
            ))
        return venues


class KnownPairStrategy(DiscoveryStrategy):
    """Fallback table of major-token venues, confirmed via reserves."""

    name = "known_pairs"

    async def discover(self, token: str) -> StrategyOutcome:
        candidates = [p for p in self.settings.known_pairs if p.token.lower() == token.lower()]
        confirmations = [
            self.confirmer.confirm_v2(
                pair.pair, token, pair.quote, pair.dex,
                [f"Known pair table: {pair.dex} {pair.family.upper()}"], self.name,
            )
            for pair in candidates
        ]
        venues = [venue for venue in await asyncio.gather(*confirmations) if venue is not None]
        return StrategyOutcome(venues=venues)
