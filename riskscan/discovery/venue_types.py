"""
Core types for liquidity discovery.

Domain models used across the discovery module for representing trading
venues, LP protection and the aggregate liquidity assessment.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from ..types import Confidence, RiskLevel


class ProtocolFamily(Enum):
    """Liquidity venue architecture."""
    V2 = "v2"  # constant-product pair
    V3 = "v3"  # concentrated liquidity
    V4 = "v4"  # singleton pool manager
    UNKNOWN = "unknown"


@dataclass
class LiquidityVenue:
    """
    A trading venue pairing the target token with a quote asset.

    Attributes:
        family: Protocol family of the venue
        address: Pair/pool contract address (V4: pool id)
        dex: DEX display name
        token: Target token address
        quote_token: Other side of the venue
        quote_symbol: Stablecoin symbol, "NATIVE" for the wrapped native asset, else "UNKNOWN"
        reserve_token: V2 raw reserve of the target token
        reserve_quote: V2 raw reserve of the quote token
        liquidity: V3 in-range liquidity
        sqrt_price_x96: V3 current price
        fee: V3/V4 fee tier
        estimated_depth_usd: USD depth, only for stablecoin-quoted V2 venues
        depth_verifiable: True when estimated_depth_usd is backed by reserves
        evidence: Supporting evidence strings
        sources: Discovery strategies that reported this venue
    """

    family: ProtocolFamily
    address: str
    dex: str
    token: str
    quote_token: Optional[str] = None
    quote_symbol: str = "UNKNOWN"
    reserve_token: Optional[int] = None
    reserve_quote: Optional[int] = None
    liquidity: Optional[int] = None
    sqrt_price_x96: Optional[int] = None
    fee: Optional[int] = None
    estimated_depth_usd: Optional[Decimal] = None
    depth_verifiable: bool = False
    evidence: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Identity used for deduplication."""
        return self.address.lower()


@dataclass
class LiquidityRiskBreakdown:
    """The three liquidity sub-risks consumed by scoring."""

    control_risk: RiskLevel = RiskLevel.UNKNOWN
    depth_risk: RiskLevel = RiskLevel.UNKNOWN
    verifiability_risk: RiskLevel = RiskLevel.UNKNOWN


@dataclass
class LpProtection:
    """
    Burn/lock status of a constant-product venue's LP supply.

    ``supply_readable`` is False when totalSupply() could not be read, in
    which case no percentage is meaningful.
    """

    supply_readable: bool = False
    total_supply: Optional[int] = None
    burned_percent: float = 0.0
    locked_percent: float = 0.0
    is_burned: bool = False
    is_locked: bool = False


@dataclass
class LiquidityResult:
    """Aggregate output of liquidity discovery."""

    found: bool = False
    venues: List[LiquidityVenue] = field(default_factory=list)
    primary_venue: Optional[LiquidityVenue] = None
    total_checked: int = 0
    is_burned: Optional[bool] = None
    is_locked: Optional[bool] = None
    burned_percent: Optional[float] = None
    locked_percent: Optional[float] = None
    total_depth_usd: Optional[Decimal] = None
    depth_verifiable: bool = False
    dominant_family: ProtocolFamily = ProtocolFamily.UNKNOWN
    facts: List[str] = field(default_factory=list)
    evidence: List[str] = field(default_factory=list)
    risk_breakdown: LiquidityRiskBreakdown = field(default_factory=LiquidityRiskBreakdown)
    confidence: Confidence = Confidence.PARTIAL
    strategy_errors: List[str] = field(default_factory=list)
