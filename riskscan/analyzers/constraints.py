"""
Transfer-constraint detection.

Looks for cooldowns, blacklists, whitelists/fee exclusions, anti-whale
limits, trading taxes (fixed and modifiable) and DEX-router integration,
then classifies the result by a single weighted factor count.
"""

import asyncio
import logging
from typing import Dict, Optional, Tuple

from ..types import Confidence, RiskLevel
from .analysis_types import ConstraintResult, OwnershipInfo, OwnerType
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

PROBE_GROUPS: Dict[str, Tuple[str, ...]] = {
    "cooldown": ("cooldownEnabled()", "setCooldown(uint256)", "tradingCooldown()"),
    "blacklist": ("isBlacklisted(address)", "blacklist(address)", "addToBlacklist(address)"),
    "whitelist": (
        "isWhitelisted(address)",
        "whitelist(address)",
        "addToWhitelist(address)",
        "excludeFromFees(address,bool)",
        "isExcludedFromFees(address)",
    ),
    "limit_setters": ("setMaxTxAmount(uint256)", "setMaxWallet(uint256)"),
    "tax_setters": ("setBuyTax(uint256)", "setSellTax(uint256)", "setFees(uint256,uint256)", "updateFees(uint256,uint256)"),
    "dex": ("uniswapV2Router()", "uniswapV2Pair()"),
}

MAX_TX_GETTERS = ("_maxTxAmount()", "maxTransactionAmount()")
MAX_WALLET_GETTERS = ("maxWallet()", "_maxWalletSize()")
TAX_GETTERS = ("buyTax()", "sellTax()", "totalFees()")

HIGH_RISK_FACTORS = 3
RENOUNCED_REDUCTION = 3
CONTRACT_OWNER_REDUCTION = 1


class ConstraintAnalyzer(BaseAnalyzer):
    """Detects trading restrictions a token can impose on holders."""

    async def analyze(self, address: str, ownership: Optional[OwnershipInfo] = None) -> ConstraintResult:
        """
        Probe for transfer constraints and classify them.

        Args:
            address: Token contract
            ownership: Owner detection result; renounced or contract owners reduce risk

        Returns:
            ConstraintResult
        """
        owner_type = ownership.owner_type if ownership else OwnerType.NOT_FOUND
        renounced = owner_type is OwnerType.ZERO_ADDRESS
        result = ConstraintResult()

        signatures = [sig for group in PROBE_GROUPS.values() for sig in group]
        getters = MAX_TX_GETTERS + MAX_WALLET_GETTERS + TAX_GETTERS
        probes, values = await asyncio.gather(
            self.probe_signatures(address, signatures),
            asyncio.gather(*[self.reader.read_uint(address, getter) for getter in getters]),
        )
        reads = dict(zip(getters, values))

        if all(not probe.conclusive for probe in probes.values()):
            result.risk = RiskLevel.UNKNOWN
            result.confidence = Confidence.UNVERIFIABLE
            result.findings.append("Constraint probes failed; trading restrictions could not be checked")
            return result

        def found(group: str) -> bool:
            return self.first_found(probes, PROBE_GROUPS[group]) is not None

        if found("cooldown"):
            result.has_cooldown = True
            result.findings.append("Trading cooldown mechanism detected")
        if found("blacklist"):
            result.has_blacklist = True
            result.findings.append("Blacklist capability detected - addresses can be blocked from trading")
        if found("whitelist"):
            result.has_whitelist = True
            result.findings.append("Whitelist or fee exclusion mechanism detected")

        limits = []
        if any(reads[getter] for getter in MAX_TX_GETTERS):
            limits.append("max transaction")
        if any(reads[getter] for getter in MAX_WALLET_GETTERS):
            limits.append("max wallet")
        if limits:
            result.has_anti_whale = True
            result.findings.append(f"Anti-whale limits detected: {', '.join(limits)}")
            if found("limit_setters"):
                result.has_modifiable_limits = True
                result.findings.append("Anti-whale limits can be modified by owner")

        result.buy_tax = reads["buyTax()"]
        result.sell_tax = reads["sellTax()"]
        if any(reads[getter] is not None for getter in TAX_GETTERS):
            result.has_tax = True
            details = []
            if result.buy_tax is not None:
                details.append(f"buy: {result.buy_tax}%")
            if result.sell_tax is not None:
                details.append(f"sell: {result.sell_tax}%")
            if details:
                result.findings.append(f"Trading tax detected ({', '.join(details)})")
            else:
                result.findings.append("Trading tax mechanism detected")
        if found("tax_setters"):
            result.has_dynamic_tax = True
            result.findings.append("Tax rates can be modified by owner")

        if found("dex"):
            result.has_dex_integration = True
            result.findings.append("Contract integrates with DEX router for swap operations")

        if renounced:
            result.findings.append("Contract ownership has been renounced")
        elif owner_type is OwnerType.EOA:
            result.findings.append("Contract is controlled by a single wallet (EOA)")
        elif owner_type is OwnerType.CONTRACT:
            result.findings.append("Contract is controlled by another contract (possibly multisig)")

        result.risk_factors = self._count_factors(result, owner_type)
        if result.risk_factors >= HIGH_RISK_FACTORS:
            result.risk = RiskLevel.HIGH
        elif result.risk_factors >= 1:
            result.risk = RiskLevel.MEDIUM
        else:
            result.risk = RiskLevel.LOW

        inconclusive = sum(1 for probe in probes.values() if not probe.conclusive)
        result.confidence = Confidence.VERIFIED if inconclusive == 0 else Confidence.PARTIAL
        result.evidence.append(f"Contract functions: {self.settings.address_url(address)}#code")

        if not result.findings:
            result.findings.append("No significant transfer or trading constraints detected")
        return result

    def _count_factors(self, result: ConstraintResult, owner_type: OwnerType) -> int:
        renounced = owner_type is OwnerType.ZERO_ADDRESS
        factors = 0

        if result.has_blacklist and result.has_dynamic_tax:
            factors += 3
            result.findings.append("Combination of blacklist and modifiable tax creates elevated risk")
        if result.has_blacklist and not renounced:
            factors += 2
        if result.has_dynamic_tax and not renounced:
            factors += 2

        factors += sum(1 for flag in (result.has_cooldown, result.has_anti_whale, result.has_whitelist) if flag)
        if result.has_tax and not result.has_dynamic_tax:
            factors += 1

        if renounced and factors > 0:
            factors = max(0, factors - RENOUNCED_REDUCTION)
            result.findings.append("Ownership renounced - controls are immutable")
        elif owner_type is OwnerType.CONTRACT:
            factors = max(0, factors - CONTRACT_OWNER_REDUCTION)
        return factors
