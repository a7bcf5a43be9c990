"""
Dangerous-function detection by selector probing.
"""

import logging
from typing import Dict, Tuple

from ..types import Confidence, RiskLevel
from .analysis_types import DangerousFunctions
from .base import BaseAnalyzer
from .ownership import IMPLEMENTATION_SLOT, implementation_from_slot

logger = logging.getLogger(__name__)

# Capability -> signatures that grant it
DANGEROUS_FUNCTIONS: Dict[str, Tuple[str, ...]] = {
    "mint": ("mint(address,uint256)", "mint(uint256)"),
    "pause": ("pause()",),
    "blacklist": ("blacklist(address)", "addToBlacklist(address)"),
    "set_fee": ("setFee(uint256)",),
}

FINDINGS = {
    "mint": "Mint function detected",
    "pause": "Pause function detected",
    "blacklist": "Blacklist function detected",
    "set_fee": "Fee modification detected",
}


class FunctionAnalyzer(BaseAnalyzer):
    """Probes for privileged functions, against the implementation of a proxy."""

    async def analyze(self, address: str) -> DangerousFunctions:
        """Resolve the EIP-1967 implementation, then scan it (or the contract itself)."""
        slot_value = await self.reader.get_storage_at(address, IMPLEMENTATION_SLOT)
        return await self.scan(implementation_from_slot(slot_value) or address)

    async def scan(self, target: str) -> DangerousFunctions:
        """
        Run every dangerous-function probe concurrently.

        Args:
            target: Contract whose code is probed (implementation for proxies)

        Returns:
            DangerousFunctions with detected signatures per capability
        """
        signatures = [sig for group in DANGEROUS_FUNCTIONS.values() for sig in group]
        probes = await self.probe_signatures(target, signatures)

        result = DangerousFunctions(target=target, probes_total=len(probes))
        result.probes_inconclusive = sum(1 for probe in probes.values() if not probe.conclusive)

        for capability, group in DANGEROUS_FUNCTIONS.items():
            found = [sig for sig in group if probes[sig].exists]
            result.detected[capability] = found
            for sig in found:
                result.evidence.append(f"{sig}: {self.settings.address_url(target)}#writeContract")
            if found:
                result.findings.append(FINDINGS[capability])

        if result.all_inconclusive:
            result.risk = RiskLevel.UNKNOWN
            result.confidence = Confidence.UNVERIFIABLE
            result.findings.append("Function probes failed; capabilities could not be checked")
        else:
            result.risk = RiskLevel.MEDIUM if any(result.detected.values()) else RiskLevel.LOW
            result.confidence = Confidence.VERIFIED if result.probes_inconclusive == 0 else Confidence.PARTIAL

        self.logger.debug(
            f"🔍 {target}: {sum(len(v) for v in result.detected.values())} dangerous function(s), "
            f"{result.probes_inconclusive}/{result.probes_total} inconclusive"
        )
        return result
