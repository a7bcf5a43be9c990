"""
Contextual patterns that change how the other findings should be read.

The notes are informational: they never change a category risk.
"""

import logging
from typing import Optional

from ..discovery.venue_types import LiquidityResult
from ..types import RiskLevel
from .analysis_types import (
    ConstraintResult,
    ContextNote,
    ContextResult,
    ContextType,
    HolderResult,
    OwnershipInfo,
    TokenIdentity,
)
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

KNOWN_STABLECOIN_SYMBOLS = ("USDT", "USDC", "DAI", "BUSD", "TUSD", "USDP", "FRAX", "LUSD", "GUSD")

MINTER_SIGNATURES = ("addMinter(address)", "isMinter(address)")
REBASE_SIGNATURES = ("rebase()", "scalingFactor()")
PROXY_ADMIN_SIGNATURES = ("implementation()", "admin()")
VESTING_SIGNATURES = ("release()", "vestedAmount(address,uint64)")


class ContextAnalyzer(BaseAnalyzer):
    """Detects legacy, stablecoin, rebasing, proxy and vesting patterns."""

    async def analyze(
        self,
        address: str,
        identity: TokenIdentity,
        ownership: OwnershipInfo,
        liquidity: LiquidityResult,
        constraints: ConstraintResult,
        holders: HolderResult,
    ) -> ContextResult:
        result = ContextResult()
        signatures = MINTER_SIGNATURES + REBASE_SIGNATURES + PROXY_ADMIN_SIGNATURES + VESTING_SIGNATURES
        probes = await self.probe_signatures(address, signatures)

        if not identity.name and not identity.symbol:
            result.is_legacy_token = True
            self._note(result, ContextType.LEGACY_TOKEN,
                       "Legacy or non-standard ERC20 implementation detected. "
                       "Risk interpretation may differ from modern token standards.")

        symbol: Optional[str] = identity.symbol.upper() if identity.symbol else None
        stable_symbol = symbol in KNOWN_STABLECOIN_SYMBOLS
        mint_authority = self.first_found(probes, MINTER_SIGNATURES) is not None
        admin_pattern = constraints.has_blacklist and mint_authority and liquidity.found
        if stable_symbol or (admin_pattern and liquidity.risk_breakdown.depth_risk is not RiskLevel.HIGH):
            result.is_centralized_stablecoin = True
            self._note(result, ContextType.CENTRALIZED_STABLECOIN,
                       "Centralized stablecoin design detected. Administrative controls are expected by design.")

        if self.first_found(probes, REBASE_SIGNATURES):
            result.is_rebasing_token = True
            self._note(result, ContextType.REBASING_TOKEN,
                       "Rebasing mechanics detected. Supply and holder distribution may change dynamically.")

        if ownership.is_proxy and not self.first_found(probes, PROXY_ADMIN_SIGNATURES):
            result.is_non_standard_proxy = True
            self._note(result, ContextType.NON_STANDARD_PROXY,
                       "Non-standard upgrade pattern detected. Upgradeable behavior may not be fully observable.")

        if holders.risk in (RiskLevel.HIGH, RiskLevel.MEDIUM) and self.first_found(probes, VESTING_SIGNATURES):
            result.has_vesting_pattern = True
            self._note(result, ContextType.VESTING_PATTERN,
                       "Vesting or treasury contract patterns detected. Holder concentration may be overstated.")

        if ownership.ownership_renounced:
            self._note(result, ContextType.OWNERSHIP_RENOUNCED,
                       "Contract ownership has been renounced. Administrative functions are permanently disabled.")
        return result

    @staticmethod
    def _note(result: ContextResult, kind: ContextType, note: str):
        result.notes.append(ContextNote(type=kind, note=note))
