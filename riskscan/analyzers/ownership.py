"""
Ownership and proxy detection.
"""

import asyncio
import logging
from typing import Optional, Tuple

from eth_abi import decode
from web3 import Web3

from ..rpc.reader import selector
from ..types import Confidence, RiskLevel
from .analysis_types import OwnershipInfo, OwnerType
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

# EIP-1967 implementation slot: bytes32(uint256(keccak256("eip1967.proxy.implementation")) - 1)
IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC

OWNER_SIGNATURES = ("owner()", "getOwner()")


def implementation_from_slot(slot_value: Optional[bytes]) -> Optional[str]:
    """Implementation address stored in an EIP-1967 slot, if any."""
    if not slot_value or len(slot_value) < 20 or not any(slot_value[-20:]):
        return None
    return Web3.to_checksum_address(slot_value[-20:])


class OwnershipAnalyzer(BaseAnalyzer):
    """Reads the EIP-1967 implementation slot and the contract owner."""

    async def analyze(self, address: str) -> OwnershipInfo:
        result = OwnershipInfo()
        slot_value, (owner, owner_conclusive) = await asyncio.gather(
            self.reader.get_storage_at(address, IMPLEMENTATION_SLOT),
            self._read_owner(address),
        )
        conclusive = owner_conclusive and slot_value is not None

        self._apply_proxy(result, address, slot_value)
        await self._apply_owner(result, address, owner, owner_conclusive)
        if result.owner_address and result.owner_type is OwnerType.NOT_FOUND:
            conclusive = False

        if result.owner_type is OwnerType.ZERO_ADDRESS or result.owner_type is OwnerType.CONTRACT:
            result.risk = RiskLevel.LOW
        elif result.owner_type is OwnerType.EOA:
            result.risk = RiskLevel.HIGH if result.is_proxy else RiskLevel.MEDIUM
        else:
            result.risk = RiskLevel.UNKNOWN
        result.confidence = Confidence.VERIFIED if conclusive else Confidence.PARTIAL
        return result

    def _apply_proxy(self, result: OwnershipInfo, address: str, slot_value: Optional[bytes]):
        if slot_value is None:
            result.findings.append("Proxy slot could not be read")
            result.evidence.append("Evidence unavailable: eth_getStorageAt failed")
            return

        implementation = implementation_from_slot(slot_value)
        if implementation:
            result.is_proxy = True
            result.implementation_address = implementation
            result.findings.append(f"Upgradeable proxy → {result.implementation_address[:10]}...")
            result.evidence.append(
                f"Proxy implementation slot: {self.settings.address_url(address)}#readProxyContract"
            )
            result.evidence.append(f"Implementation: {self.settings.address_url(result.implementation_address)}")
        else:
            result.findings.append("No proxy pattern detected")
            result.evidence.append(f"Storage slot check: {IMPLEMENTATION_SLOT:#066x}")

    async def _apply_owner(self, result: OwnershipInfo, address: str, owner: Optional[str], conclusive: bool):
        if owner is None:
            if conclusive:
                result.findings.append("Ownership: Not detected (no owner() function)")
                result.evidence.append("Evidence unavailable: owner() call reverted")
            else:
                result.findings.append("Ownership: could not be determined (owner() call failed)")
                result.evidence.append("Evidence unavailable: owner() call failed")
            return

        result.owner_address = owner
        result.evidence.append(f"owner(): {self.settings.address_url(address)}#readContract")
        if self.is_system_address(owner):
            result.owner_type = OwnerType.ZERO_ADDRESS
            result.findings.append(f"Ownership renounced (owner = {owner[:10]}...)")
            return

        is_contract = await self.reader.is_contract(owner)
        if is_contract is None:
            result.findings.append(f"Owner: {owner[:10]}... (type could not be determined)")
            return
        result.owner_type = OwnerType.CONTRACT if is_contract else OwnerType.EOA
        result.findings.append(f"Owner: {owner[:10]}... ({result.owner_type.value})")
        result.evidence.append(f"Owner address: {self.settings.address_url(owner)}")

    async def _read_owner(self, address: str) -> Tuple[Optional[str], bool]:
        """
        Read the owner through the first owner getter that answers.

        Returns:
            (owner address or None, whether the answer is conclusive)
        """
        conclusive = True
        for signature in OWNER_SIGNATURES:
            call = await self.reader.call_raw(address, selector(signature))
            if not call.success:
                conclusive = False
                continue
            if call.reverted or not call.data:
                continue
            try:
                (owner,) = decode(["address"], bytes(call.data))
            except Exception as e:
                self.logger.debug(f"Malformed {signature} response from {address}: {e}")
                continue
            return Web3.to_checksum_address(owner), True
        return None, conclusive
