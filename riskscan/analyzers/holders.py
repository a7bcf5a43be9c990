"""
Holder concentration over the holders that can be identified on-chain.

Full holder enumeration needs an indexer, so this analyzer inspects the
addresses it can name (deployer, owner, the token contract itself and its
liquidity venues) against circulating supply. When none of them can be
identified the risk is UNKNOWN rather than a guessed level.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..types import Confidence, RiskLevel
from .analysis_types import HolderResult, OwnershipInfo
from .base import BaseAnalyzer, percent_of

logger = logging.getLogger(__name__)

DEPLOYER_SIGNATURES = ("deployer()", "creator()")

CRITICAL_HOLDER_PERCENT = 70
HIGH_KEY_HOLDER_PERCENT = 30
HIGH_ANY_HOLDER_PERCENT = 50
MEDIUM_KEY_HOLDER_PERCENT = 5
MEDIUM_ANY_HOLDER_PERCENT = 25
LIKELY_KEY_HOLDER_PERCENT = 5


class HolderAnalyzer(BaseAnalyzer):
    """Estimates supply concentration among identifiable holders."""

    async def analyze(
        self,
        address: str,
        ownership: Optional[OwnershipInfo] = None,
        lp_addresses: Sequence[str] = (),
    ) -> HolderResult:
        """
        Measure deployer, owner, self and LP holdings against circulating supply.

        Args:
            address: Token contract
            ownership: Owner detection result
            lp_addresses: Liquidity venue contracts holding the token

        Returns:
            HolderResult
        """
        result = HolderResult()
        token_url = self.settings.token_url(address)
        owner = ownership.owner_address if ownership else None

        total_supply = await self.reader.read_uint(address, "totalSupply()")
        if not total_supply:
            result.risk = RiskLevel.UNKNOWN
            result.confidence = Confidence.UNVERIFIABLE
            result.findings.append("Total supply could not be retrieved or is zero")
            result.evidence.append("Evidence unavailable: totalSupply() call failed or returned 0")
            return result

        result.total_supply = total_supply
        result.evidence.append(f"totalSupply(): {self.settings.address_url(address)}#readContract")

        burn_addresses = list(self.settings.burn_addresses)
        burn_balances = await asyncio.gather(*[self.reader.balance_of(address, b) for b in burn_addresses])
        burned = sum(b or 0 for b in burn_balances)
        circulating = total_supply - burned
        result.circulating_supply = circulating
        result.burned_percent = percent_of(burned, total_supply)

        if circulating <= 0:
            result.risk = RiskLevel.HIGH
            result.findings.append("Circulating supply appears to be zero or negative")
            return result

        deployer = await self._find_deployer(address)
        if deployer is None and owner and not self.is_system_address(owner):
            owner_balance = await self.reader.balance_of(address, owner)
            if owner_balance and percent_of(owner_balance, circulating) > LIKELY_KEY_HOLDER_PERCENT:
                deployer = owner
                result.findings.append(f"Likely deployer/key holder identified: {owner[:10]}...")
        result.deployer_address = deployer

        # Largest identified holder: (percent, address)
        largest = (0.0, None)

        if deployer:
            balance = await self.reader.balance_of(address, deployer)
            result.deployer_percent = percent_of(balance or 0, circulating)
            if result.deployer_percent > largest[0] and not self.is_system_address(deployer):
                largest = (result.deployer_percent, deployer)
            if result.deployer_percent > 0.5:
                result.findings.append(f"Deployer holds {result.deployer_percent}% of circulating supply")
                result.evidence.append(f"Deployer balance: {token_url}?a={deployer}")
            elif result.deployer_percent > 0:
                result.findings.append("Deployer holds <1% of circulating supply")
            else:
                result.findings.append("Deployer holds 0% of circulating supply")
        else:
            result.findings.append("Deployer address could not be identified")
            result.evidence.append("Evidence unavailable: deployer() / creator() not found")

        if owner and owner != deployer and not self.is_system_address(owner):
            balance = await self.reader.balance_of(address, owner)
            if balance:
                result.owner_percent = percent_of(balance, circulating)
                if result.owner_percent > largest[0]:
                    largest = (result.owner_percent, owner)
                if result.owner_percent > 0.5:
                    result.findings.append(f"Contract owner holds {result.owner_percent}% of circulating supply")
                    result.evidence.append(f"Owner balance: {token_url}?a={owner}")

        await self._apply_lp_holdings(result, address, lp_addresses, circulating)

        self_balance = await self.reader.balance_of(address, address)
        if self_balance:
            result.contract_held_percent = percent_of(self_balance, circulating)
            if result.contract_held_percent > largest[0]:
                largest = (result.contract_held_percent, address)
            if result.contract_held_percent > 1:
                result.findings.append(f"Token contract itself holds {result.contract_held_percent}% of supply")
                result.evidence.append(f"Contract self-balance: {token_url}?a={address}")

        if largest[1] is not None:
            result.max_single_holder_percent, result.max_single_holder_address = largest
            result.findings.append(f"Largest identified holder: {round(largest[0])}% of supply")
        else:
            result.findings.append("No significant holders identified in basic scan")
        result.evidence.append(f"Token holders page: {token_url}#balances")

        await self._classify(result)

        if result.burned_percent > 1:
            result.findings.append(f"{round(result.burned_percent)}% of total supply has been burned")
            for burn in burn_addresses:
                result.evidence.append(f"Burn address: {token_url}?a={burn}")
        return result

    async def _find_deployer(self, address: str) -> Optional[str]:
        candidates = await asyncio.gather(*[self.reader.read_address(address, sig) for sig in DEPLOYER_SIGNATURES])
        for candidate in candidates:
            if candidate and not self.is_system_address(candidate):
                return candidate
        return None

    async def _apply_lp_holdings(self, result: HolderResult, address: str, lp_addresses: Sequence[str], circulating: int):
        token_url = self.settings.token_url(address)
        balances = await asyncio.gather(*[self.reader.balance_of(address, lp) for lp in lp_addresses])
        funded: List[str] = [lp for lp, balance in zip(lp_addresses, balances) if balance]
        lp_total = sum(balance or 0 for balance in balances)

        if funded:
            result.lp_held_percent = percent_of(lp_total, circulating)
            result.findings.append(f"{round(result.lp_held_percent)}% of supply is in {len(funded)} liquidity pool(s)")
            for lp in funded:
                result.evidence.append(f"LP holdings: {token_url}?a={lp}")
        elif lp_addresses:
            result.findings.append("Liquidity pools found but appear empty")
            result.evidence.append("Warning: LP addresses exist but hold no tokens")
        else:
            result.findings.append("Liquidity pools not detected (may exist but not identified)")
            result.evidence.append("Note: Full LP analysis requires DEX aggregation")

    async def _classify(self, result: HolderResult):
        largest = result.max_single_holder_percent or 0.0
        deployer = result.deployer_percent
        owner = result.owner_percent
        holder = result.max_single_holder_address

        def key_above(threshold: float) -> bool:
            return (deployer is not None and deployer > threshold) or (owner is not None and owner > threshold)

        if largest >= CRITICAL_HOLDER_PERCENT and holder and not self.is_system_address(holder):
            result.risk = RiskLevel.CRITICAL
            kind = await self.reader.is_contract(holder)
            label = "CONTRACT" if kind else "EOA" if kind is False else "holder"
            result.findings.append(f"CRITICAL: Single {label} holds {round(largest)}% of supply")
            result.evidence.append(f"High concentration: {self.settings.address_url(holder)}")
        elif key_above(HIGH_KEY_HOLDER_PERCENT) or largest > HIGH_ANY_HOLDER_PERCENT:
            result.risk = RiskLevel.HIGH
            result.findings.append("High concentration: Key addresses control significant supply")
        elif key_above(MEDIUM_KEY_HOLDER_PERCENT) or largest > MEDIUM_ANY_HOLDER_PERCENT:
            result.risk = RiskLevel.MEDIUM
            result.findings.append("Moderate concentration detected")
        elif deployer is not None or owner is not None or largest > 0:
            result.risk = RiskLevel.LOW
            result.findings.append("Holder distribution appears reasonable from available data")
        else:
            result.risk = RiskLevel.UNKNOWN
            result.confidence = Confidence.UNVERIFIABLE
            result.findings.append("Holder concentration could not be verified - no identifiable holders")
            return
        result.confidence = Confidence.PARTIAL
