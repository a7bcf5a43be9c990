"""
USD depth estimation per protocol family.

Only constant-product venues quoted in a known stablecoin get a number:
depth = 2 x quote-side reserve (50/50 pool approximation). Every other
venue reports ``None`` and is marked not verifiable; price is never inferred
from a non-stable quote.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Optional, Tuple

from ..config.manager import ChainSettings
from .venue_types import LiquidityVenue, ProtocolFamily

DepthEstimate = Tuple[Optional[Decimal], bool]

WHOLE_DOLLAR = Decimal(1)


def _constant_product_depth(venue: LiquidityVenue, settings: ChainSettings) -> DepthEstimate:
    stable = settings.get_stablecoin(venue.quote_token)
    if stable is None or venue.reserve_quote is None:
        return None, False
    quote_value = Decimal(venue.reserve_quote) / (Decimal(10) ** stable.decimals)
    return (quote_value * 2).quantize(WHOLE_DOLLAR, rounding=ROUND_HALF_UP), True


def _not_estimable(venue: LiquidityVenue, settings: ChainSettings) -> DepthEstimate:
    # Concentrated and singleton depth needs tick-range analysis
    return None, False


_ESTIMATORS: Dict[ProtocolFamily, Callable[[LiquidityVenue, ChainSettings], DepthEstimate]] = {
    ProtocolFamily.V2: _constant_product_depth,
    ProtocolFamily.V3: _not_estimable,
    ProtocolFamily.V4: _not_estimable,
    ProtocolFamily.UNKNOWN: _not_estimable,
}


def estimate_depth(venue: LiquidityVenue, settings: ChainSettings) -> DepthEstimate:
    """
    Estimate a venue's USD depth.

    Args:
        venue: Venue to estimate
        settings: Chain settings providing the stablecoin table

    Returns:
        (depth in whole dollars or None, verifiable flag)
    """
    return _ESTIMATORS[venue.family](venue, settings)
