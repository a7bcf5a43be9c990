"""
Liquidity discovery engine.

Runs every discovery strategy concurrently, merges and deduplicates the
venues they report, estimates depth, selects the primary venue, checks LP
burn/lock status and derives the three liquidity sub-risks.
"""

import asyncio
import dataclasses
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from web3 import Web3

from ..config.manager import ChainSettings
from ..rpc.reader import ContractReader
from ..types import Confidence, RiskLevel
from .depth import estimate_depth
from .strategies import (
    DEFAULT_CHUNK_BLOCKS,
    DEFAULT_LOOKBACK_BLOCKS,
    DiscoveryStrategy,
    EventLogStrategy,
    FactoryLookupStrategy,
    KnownPairStrategy,
    StrategyOutcome,
)
from .venue_types import (
    LiquidityResult,
    LiquidityRiskBreakdown,
    LiquidityVenue,
    LpProtection,
    ProtocolFamily,
)

logger = logging.getLogger(__name__)

# Percent thresholds
PROTECTION_THRESHOLD = 50.0
BURN_LOW_RISK_THRESHOLD = 90.0

# USD depth thresholds
DEPTH_HIGH_RISK = Decimal(1_000)
DEPTH_MEDIUM_RISK = Decimal(10_000)


def merge_venues(venues: Sequence[LiquidityVenue]) -> List[LiquidityVenue]:
    """
    Deduplicate venues by case-insensitive address.

    The first-seen record wins for conflicting fields; evidence and sources
    of later duplicates are appended.
    """
    merged: Dict[str, LiquidityVenue] = {}
    for venue in venues:
        existing = merged.get(venue.key)
        if existing is None:
            merged[venue.key] = dataclasses.replace(
                venue, evidence=list(venue.evidence), sources=list(venue.sources)
            )
            continue
        existing.evidence.extend(e for e in venue.evidence if e not in existing.evidence)
        existing.sources.extend(s for s in venue.sources if s not in existing.sources)
    return list(merged.values())


def select_primary(venues: Sequence[LiquidityVenue]) -> Optional[LiquidityVenue]:
    """Verifiable depth first, then deepest; ties keep discovery order."""
    if not venues:
        return None
    return sorted(
        venues,
        key=lambda v: (not v.depth_verifiable, -(v.estimated_depth_usd or Decimal(0))),
    )[0]


def derive_risks(result: LiquidityResult, protection: Optional[LpProtection]) -> LiquidityRiskBreakdown:
    """Map discovery facts onto control, depth and verifiability risks."""
    if not result.found:
        return LiquidityRiskBreakdown(RiskLevel.HIGH, RiskLevel.HIGH, RiskLevel.HIGH)

    family = result.dominant_family
    if protection is not None and not protection.supply_readable:
        control = RiskLevel.UNKNOWN
    elif protection is not None and (
        protection.burned_percent > BURN_LOW_RISK_THRESHOLD
        or protection.locked_percent > PROTECTION_THRESHOLD
    ):
        control = RiskLevel.LOW
    elif family in (ProtocolFamily.V3, ProtocolFamily.V4):
        control = RiskLevel.UNVERIFIABLE
    else:
        control = RiskLevel.HIGH

    depth = result.total_depth_usd
    if not result.depth_verifiable or depth is None:
        depth_risk = RiskLevel.UNVERIFIABLE
    elif depth < DEPTH_HIGH_RISK:
        depth_risk = RiskLevel.HIGH
    elif depth < DEPTH_MEDIUM_RISK:
        depth_risk = RiskLevel.MEDIUM
    else:
        depth_risk = RiskLevel.LOW

    if result.depth_verifiable:
        verifiability = RiskLevel.LOW
    elif family in (ProtocolFamily.V3, ProtocolFamily.V4):
        verifiability = RiskLevel.UNVERIFIABLE
    else:
        verifiability = RiskLevel.UNKNOWN

    return LiquidityRiskBreakdown(control, depth_risk, verifiability)


class LiquidityDiscovery:
    """
    Multi-strategy liquidity discovery for a single chain.

    Strategies are independent: an exception from any one of them is logged
    and treated as an empty result. Both those exceptions and the lookups a
    strategy reports as incomplete end up in ``strategy_errors``.
    """

    def __init__(
        self,
        reader: ContractReader,
        settings: ChainSettings,
        lookback_blocks: int = DEFAULT_LOOKBACK_BLOCKS,
        chunk_blocks: int = DEFAULT_CHUNK_BLOCKS,
        strategies: Optional[Sequence[DiscoveryStrategy]] = None,
    ):
        self.reader = reader
        self.settings = settings
        self.strategies: List[DiscoveryStrategy] = list(strategies) if strategies is not None else [
            FactoryLookupStrategy(reader, settings),
            EventLogStrategy(reader, settings, lookback_blocks=lookback_blocks, chunk_blocks=chunk_blocks),
            KnownPairStrategy(reader, settings),
        ]
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def discover(self, token_address: str) -> LiquidityResult:
        """
        Discover and assess liquidity venues for a token.

        Args:
            token_address: Target token contract address

        Returns:
            LiquidityResult with venues, LP protection and sub-risks
        """
        token = Web3.to_checksum_address(token_address)
        result = LiquidityResult()

        outcomes = await asyncio.gather(
            *[strategy.discover(token) for strategy in self.strategies],
            return_exceptions=True,
        )

        found: List[LiquidityVenue] = []
        for strategy, outcome in zip(self.strategies, outcomes):
            if isinstance(outcome, Exception):
                self.logger.warning(f"⚠️ Discovery strategy '{strategy.name}' failed: {outcome}")
                result.strategy_errors.append(f"{strategy.name}: {outcome}")
                outcome = StrategyOutcome()
            result.total_checked += outcome.checked
            result.strategy_errors.extend(f"{strategy.name}: {error}" for error in outcome.errors)
            found.extend(outcome.venues)

        venues = []
        for venue in merge_venues(found):
            depth, verifiable = estimate_depth(venue, self.settings)
            venues.append(dataclasses.replace(venue, estimated_depth_usd=depth, depth_verifiable=verifiable))
            if verifiable:
                stable = self.settings.get_stablecoin(venue.quote_token)
                venues[-1].evidence.append(
                    f"Quote reserve: {Decimal(venue.reserve_quote) / (Decimal(10) ** stable.decimals)} {stable.symbol}"
                )

        result.venues = venues
        result.found = bool(venues)

        protection = None
        if result.found:
            self._summarize_venues(result)
            if result.primary_venue.family is ProtocolFamily.V2:
                protection = await self.check_lp_protection(result.primary_venue.address)
                self._apply_protection(result, protection)
            elif result.primary_venue.family is ProtocolFamily.V3:
                result.facts.append("V3 liquidity: NFT position ownership NOT verifiable on-chain")
                result.evidence.append("V3 LP positions are NFTs - individual position ownership requires indexer")
            elif result.primary_venue.family is ProtocolFamily.V4:
                result.facts.append("V4 liquidity: Amount is NOT VERIFIABLE")
                result.evidence.append(
                    "V4 uses singleton PoolManager - liquidity depth cannot be reliably determined"
                )

            if result.depth_verifiable:
                result.facts.append(f"Estimated total liquidity depth: ${result.total_depth_usd:,}")
            else:
                result.facts.append("Liquidity depth: UNVERIFIABLE (V3/V4 or no stablecoin pair)")
        else:
            result.facts.append("No liquidity pools detected through standard discovery methods")
            result.facts.append(f"No liquidity detected ({result.total_checked} pairs checked)")
            result.evidence.append("Searched major DEX factories and events but found no pairs")

        result.risk_breakdown = derive_risks(result, protection)
        result.confidence = Confidence.VERIFIED if result.depth_verifiable else Confidence.PARTIAL

        self.logger.info(
            f"💧 Liquidity for {token}: {len(venues)} venue(s), "
            f"depth={result.total_depth_usd}, confidence={result.confidence.value}"
        )
        return result

    def _summarize_venues(self, result: LiquidityResult):
        result.primary_venue = select_primary(result.venues)
        result.dominant_family = result.primary_venue.family

        verifiable = [v.estimated_depth_usd for v in result.venues if v.depth_verifiable]
        if verifiable:
            result.total_depth_usd = sum(verifiable, Decimal(0))
            result.depth_verifiable = True

        dex_names = list(dict.fromkeys(v.dex for v in result.venues))
        result.facts.append(f"Liquidity found on {len(result.venues)} pool(s): {', '.join(dex_names)}")
        for venue in result.venues:
            result.evidence.extend(venue.evidence)

    def _apply_protection(self, result: LiquidityResult, protection: LpProtection):
        pair = result.primary_venue.address
        explorer = self.settings.explorer_url
        if not protection.supply_readable:
            result.facts.append("LP token supply could not be read; burn/lock status unknown")
            return

        result.is_burned = protection.is_burned
        result.is_locked = protection.is_locked
        result.burned_percent = protection.burned_percent
        result.locked_percent = protection.locked_percent

        if protection.burned_percent > BURN_LOW_RISK_THRESHOLD:
            result.facts.append(f"LP tokens {protection.burned_percent}% burned")
            result.evidence.append(
                f"LP burn check: {explorer}/token/{pair}?a={self.settings.burn_addresses[0]}"
            )
        elif protection.is_locked:
            result.facts.append(f"LP tokens {protection.locked_percent}% locked")
            result.evidence.append(f"LP lock: Check locker contract on {explorer}")
        elif protection.is_burned:
            result.facts.append(f"LP tokens {protection.burned_percent}% burned (below 90% for full protection)")
        else:
            result.facts.append("LP tokens NOT burned/locked or protection <50%")

    async def check_lp_protection(self, pair: str) -> LpProtection:
        """
        Measure the share of LP supply held by burn addresses and lockers.

        Burn and lock are asserted only above 50% of supply.
        """
        burn_addresses = list(self.settings.burn_addresses)
        lockers = list(self.settings.lockers)

        total_supply, *balances = await asyncio.gather(
            self.reader.read_uint(pair, "totalSupply()"),
            *[self.reader.balance_of(pair, holder) for holder in burn_addresses + lockers],
        )
        if not total_supply:
            return LpProtection(supply_readable=False, total_supply=total_supply)

        burned = sum(b or 0 for b in balances[:len(burn_addresses)])
        locked = sum(b or 0 for b in balances[len(burn_addresses):])
        burned_percent = round(burned * 100 / total_supply, 2)
        locked_percent = round(locked * 100 / total_supply, 2)
        return LpProtection(
            supply_readable=True,
            total_supply=total_supply,
            burned_percent=burned_percent,
            locked_percent=locked_percent,
            is_burned=burned_percent > PROTECTION_THRESHOLD,
            is_locked=locked_percent > PROTECTION_THRESHOLD,
        )
