"""
Base class for the category analyzers.

Analyzers are thin, probe-driven producers of typed findings. They never
raise on missing or malformed chain data: absent evidence lowers their
confidence instead.
"""

import asyncio
import logging
from abc import ABC
from typing import Dict, Optional, Sequence

from ..config.manager import ChainSettings
from ..rpc.reader import ContractReader, ProbeResult, selector

logger = logging.getLogger(__name__)


def percent_of(part: int, whole: int) -> float:
    """Share of ``whole`` held by ``part``, truncated to two decimals."""
    if not whole:
        return 0.0
    return (part * 10_000 // whole) / 100


class BaseAnalyzer(ABC):
    """
    Abstract base class for category analyzers.

    Provides the reader, the chain settings and concurrent probe helpers.
    """

    def __init__(self, reader: ContractReader, settings: ChainSettings):
        self.reader = reader
        self.settings = settings
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    async def probe_signatures(self, address: str, signatures: Sequence[str]) -> Dict[str, ProbeResult]:
        """
        Probe several function signatures concurrently.

        Args:
            address: Contract to probe
            signatures: Canonical signatures, e.g. ``pause()``

        Returns:
            Mapping of signature to ProbeResult, in input order
        """
        results = await asyncio.gather(*[self.reader.probe(address, selector(sig)) for sig in signatures])
        return dict(zip(signatures, results))

    @staticmethod
    def first_found(probes: Dict[str, ProbeResult], signatures: Sequence[str]) -> Optional[str]:
        for sig in signatures:
            if probes[sig].exists:
                return sig
        return None

    def is_system_address(self, address: Optional[str]) -> bool:
        """Burn and null addresses are never counted as holders or owners."""
        if not address:
            return False
        return address.lower() in {burn.lower() for burn in self.settings.burn_addresses}
