"""
Liquidity discovery: locate a token's trading venues across protocol
families and report honestly what can and cannot be verified.
"""

from .depth import estimate_depth
from .engine import LiquidityDiscovery, derive_risks, merge_venues, select_primary
from .strategies import (
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

__all__ = [
    "LiquidityDiscovery",
    "estimate_depth",
    "derive_risks",
    "merge_venues",
    "select_primary",
    "DiscoveryStrategy",
    "FactoryLookupStrategy",
    "EventLogStrategy",
    "KnownPairStrategy",
    "StrategyOutcome",
    "LiquidityResult",
    "LiquidityRiskBreakdown",
    "LiquidityVenue",
    "LpProtection",
    "ProtocolFamily",
]
