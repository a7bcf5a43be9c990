"""
Token identity: bytecode presence and basic ERC-20 metadata.
"""

import asyncio
import logging

from ..types import Confidence, RiskLevel
from .analysis_types import TokenIdentity
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

MAX_DECIMALS = 77


class IdentityAnalyzer(BaseAnalyzer):
    """Reads name, symbol, decimals and totalSupply."""

    async def analyze(self, address: str) -> TokenIdentity:
        """
        Establish whether the address is a contract and what it calls itself.

        ``has_code`` is False both for accounts without bytecode and when
        the bytecode could not be fetched; the finding says which.
        """
        result = TokenIdentity()
        code = await self.reader.get_code(address)

        if code is None:
            result.confidence = Confidence.UNVERIFIABLE
            result.findings.append("Contract code could not be fetched from any endpoint")
            result.evidence.append(f"Evidence unavailable: eth_getCode failed for {address}")
            return result
        if not code:
            result.risk = RiskLevel.HIGH
            result.confidence = Confidence.VERIFIED
            result.findings.append("No contract code found at this address")
            result.evidence.append(f"Evidence: {self.settings.address_url(address)}")
            return result

        result.has_code = True
        name, symbol, decimals, total_supply = await asyncio.gather(
            self.reader.read_string(address, "name()"),
            self.reader.read_string(address, "symbol()"),
            self.reader.read_uint(address, "decimals()"),
            self.reader.read_uint(address, "totalSupply()"),
        )
        result.name = name.strip() if name and name.strip() else None
        result.symbol = symbol.strip() if symbol and symbol.strip() else None
        if decimals is not None and 0 <= decimals <= MAX_DECIMALS:
            result.decimals = decimals
        result.total_supply = total_supply
        result.is_standard = bool(result.name or result.symbol)

        result.findings.append(f"Name: {result.name or 'Non-standard ERC20'}")
        result.findings.append(f"Symbol: {result.symbol or 'Non-standard'}")
        result.findings.append(
            f"Decimals: {result.decimals}" if result.decimals is not None else "Decimals: Assumed 18"
        )
        if total_supply is not None:
            result.findings.append(f"Total supply: {total_supply}")
        result.evidence.append(f"Contract: {self.settings.address_url(address)}")

        complete = all(v is not None for v in (result.name, result.symbol, result.decimals, total_supply))
        result.confidence = Confidence.VERIFIED if complete else Confidence.PARTIAL
        result.risk = RiskLevel.LOW if result.is_standard else RiskLevel.UNKNOWN

        self.logger.info(f"🪙 {address}: {result.symbol or '?'} ({result.name or 'unnamed'})")
        return result
