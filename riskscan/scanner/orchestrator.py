"""
Scan orchestrator.

Runs the category analyzers for one contract in dependency order:

1. Identity (bytecode, name/symbol/decimals/supply)
2. Ownership/proxy and dangerous functions, concurrently
3. Early-abort check
4. Liquidity discovery
5. Transfer constraints and holder concentration, concurrently
6. Context pass
7. Scoring
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, List, Optional

from web3 import Web3

from ..analyzers import (
    ConstraintAnalyzer,
    ConstraintResult,
    ContextAnalyzer,
    ContextResult,
    DangerousFunctions,
    FunctionAnalyzer,
    HolderAnalyzer,
    HolderResult,
    IdentityAnalyzer,
    LogicResult,
    OwnershipAnalyzer,
    OwnershipInfo,
    TokenIdentity,
    combine_logic_risk,
)
from ..config import ChainSettings, ConfigManager, Endpoint, get_config
from ..discovery import LiquidityDiscovery, LiquidityResult, ProtocolFamily
from ..rpc import ContractReader, EndpointPool, RpcPoolStats
from ..scoring import ContextFlags, ScoreResult, score
from ..types import Confidence

logger = logging.getLogger(__name__)

STAGES = ("identity", "logic", "liquidity", "supply", "context", "scoring")


class AbortReason(Enum):
    """Why a scan stopped before scoring."""
    NO_CODE = "NO_CODE"
    CODE_UNAVAILABLE = "CODE_UNAVAILABLE"
    CRITICAL_LOGIC_RISK = "CRITICAL_LOGIC_RISK"
    TIMEOUT = "TIMEOUT"
    ERROR = "ERROR"


@dataclass
class AbortInfo:
    """Early termination details."""

    reason: AbortReason
    stage: str
    message: str


@dataclass
class ScanResult:
    """
    Everything one scan produced.

    Analyzer fields stay None for stages that did not run. ``score`` is only
    set when the scan completed.
    """

    address: str
    chain_key: str
    chain_name: str
    chain_id: int
    scan_id: str
    timestamp: datetime
    identifiers: List[str] = field(default_factory=list)
    dex_coverage: List[str] = field(default_factory=list)
    identity: Optional[TokenIdentity] = None
    ownership: Optional[OwnershipInfo] = None
    functions: Optional[DangerousFunctions] = None
    logic: Optional[LogicResult] = None
    liquidity: Optional[LiquidityResult] = None
    constraints: Optional[ConstraintResult] = None
    holders: Optional[HolderResult] = None
    context: Optional[ContextResult] = None
    score: Optional[ScoreResult] = None
    rpc_stats: Optional[RpcPoolStats] = None
    stages_completed: List[str] = field(default_factory=list)
    elapsed: float = 0.0
    aborted: Optional[AbortInfo] = None

    @property
    def current_stage(self) -> str:
        """First stage that has not completed."""
        for stage in STAGES:
            if stage not in self.stages_completed:
                return stage
        return STAGES[-1]


def venue_holder_addresses(liquidity: Optional[LiquidityResult]) -> List[str]:
    """Pair/pool contracts that hold token balances (V4 pool ids excluded)."""
    if not liquidity:
        return []
    return [
        venue.address
        for venue in liquidity.venues
        if venue.family in (ProtocolFamily.V2, ProtocolFamily.V3)
    ]


class RiskScanner:
    """
    Scans a single contract on one chain.

    Each call to ``scan`` builds its own endpoint pool, so results and the
    call cache never leak between scans.
    """

    def __init__(
        self,
        chain_key: Optional[str] = None,
        config: Optional[ConfigManager] = None,
        client_factory: Optional[Callable[[Endpoint], Any]] = None,
    ):
        """
        Initialize the scanner.

        Args:
            chain_key: Chain name, numeric id or alias; default chain when omitted
            config: Configuration manager (global instance when omitted)
            client_factory: Builds a web3-like client per endpoint

        Raises:
            ConfigError: If the chain is unsupported or has no endpoint
        """
        self.config = config or get_config()
        self.settings: ChainSettings = self.config.get_chain_settings(chain_key)
        self.client_factory = client_factory
        self.deadline: Optional[float] = self.config.scan.scan_deadline
        self.lookback_blocks: int = self.config.scan.LOG_SCAN_LOOKBACK_BLOCKS
        self.chunk_blocks: int = self.config.scan.LOG_SCAN_CHUNK_BLOCKS
        self.abort_on_critical: bool = self.config.scan.ABORT_ON_CRITICAL
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def scan(self, address: str) -> ScanResult:
        """
        Run a full risk scan.

        Args:
            address: Contract address (any case)

        Returns:
            ScanResult, with ``aborted`` set when the scan stopped early

        Raises:
            ValueError: If the address is malformed
        """
        if not Web3.is_address(address):
            raise ValueError(f"Invalid contract address: {address}")
        address = Web3.to_checksum_address(address)

        result = ScanResult(
            address=address,
            chain_key=self.settings.key,
            chain_name=self.settings.name,
            chain_id=self.settings.chain_id,
            scan_id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            identifiers=list(self.settings.identifiers),
            dex_coverage=list(self.settings.dex_coverage),
        )
        pool = EndpointPool(self.settings.endpoints, client_factory=self.client_factory)
        reader = ContractReader(pool)

        self.logger.info("=" * 80)
        self.logger.info(f"🔍 Scanning {address} on {self.settings.name} (scan {result.scan_id})")
        self.logger.info("=" * 80)

        start = time.monotonic()
        try:
            if self.deadline:
                await asyncio.wait_for(self._run_stages(result, reader), timeout=self.deadline)
            else:
                await self._run_stages(result, reader)
        except asyncio.TimeoutError:
            stage = result.current_stage
            self.logger.error(f"⏱️ Scan deadline of {self.deadline}s exceeded during {stage}")
            result.aborted = AbortInfo(
                reason=AbortReason.TIMEOUT,
                stage=stage,
                message=f"Scan exceeded the {self.deadline}s deadline",
            )
        except Exception as e:
            stage = result.current_stage
            self.logger.exception(f"💥 Scan failed during {stage}: {e}")
            result.aborted = AbortInfo(reason=AbortReason.ERROR, stage=stage, message=str(e))
        finally:
            await pool.close()

        result.elapsed = round(time.monotonic() - start, 3)
        result.rpc_stats = pool.get_stats()

        if result.aborted:
            self.logger.warning(f"🛑 Scan aborted at {result.aborted.stage}: {result.aborted.message}")
        else:
            self.logger.info(
                f"✅ Scan complete in {result.elapsed}s: {result.score.final_score}/100 ({result.score.band})"
            )
        return result

    async def _run_stages(self, result: ScanResult, reader: ContractReader):
        address = result.address
        settings = self.settings

        # Step 1: Identity
        self.logger.info("📋 Step 1: Token identity")
        result.identity = await IdentityAnalyzer(reader, settings).analyze(address)
        result.stages_completed.append("identity")
        if not result.identity.has_code:
            message = (result.identity.findings or ["No contract code found at this address"])[0]
            reason = AbortReason.NO_CODE
            if result.identity.confidence is Confidence.UNVERIFIABLE:
                reason = AbortReason.CODE_UNAVAILABLE
            result.aborted = AbortInfo(reason=reason, stage="identity", message=message)
            return

        # Step 2: Ownership/proxy and dangerous functions
        self.logger.info("🔐 Step 2: Ownership, proxy and dangerous functions")
        result.ownership, result.functions = await asyncio.gather(
            OwnershipAnalyzer(reader, settings).analyze(address),
            FunctionAnalyzer(reader, settings).analyze(address),
        )
        result.logic = combine_logic_risk(result.ownership, result.functions)
        result.stages_completed.append("logic")

        # Step 3: Early abort
        if self.abort_on_critical and result.logic.should_abort:
            result.aborted = AbortInfo(
                reason=AbortReason.CRITICAL_LOGIC_RISK,
                stage="logic",
                message="Verified CRITICAL logic risk: owner can mint and change fees",
            )
            return

        # Step 4: Liquidity
        self.logger.info("💧 Step 3: Liquidity discovery")
        discovery = LiquidityDiscovery(
            reader, settings, lookback_blocks=self.lookback_blocks, chunk_blocks=self.chunk_blocks
        )
        result.liquidity = await discovery.discover(address)
        result.stages_completed.append("liquidity")

        # Step 5: Constraints and holders
        self.logger.info("🚦 Step 4: Transfer constraints and holder concentration")
        result.constraints, result.holders = await asyncio.gather(
            ConstraintAnalyzer(reader, settings).analyze(address, result.ownership),
            HolderAnalyzer(reader, settings).analyze(
                address, result.ownership, venue_holder_addresses(result.liquidity)
            ),
        )
        result.stages_completed.append("supply")

        # Step 6: Context
        self.logger.info("🧭 Step 5: Context")
        result.context = await ContextAnalyzer(reader, settings).analyze(
            address,
            result.identity,
            result.ownership,
            result.liquidity,
            result.constraints,
            result.holders,
        )
        result.stages_completed.append("context")

        # Step 7: Score
        self.logger.info("🧮 Step 6: Scoring")
        result.score = score(
            result.logic.risk,
            result.liquidity.risk_breakdown,
            result.constraints.risk,
            result.holders.risk,
            self._context_flags(result),
        )
        result.stages_completed.append("scoring")

    @staticmethod
    def _context_flags(result: ScanResult) -> ContextFlags:
        logic = result.logic
        liquidity = result.liquidity
        return ContextFlags(
            ownership_renounced=result.ownership.ownership_renounced,
            is_proxy=logic.is_proxy,
            has_mint=logic.has_mint,
            has_pause=logic.has_pause,
            liquidity_depth_usd=liquidity.total_depth_usd if liquidity.depth_verifiable else None,
            dominant_family=liquidity.dominant_family,
            holder_concentration_percent=result.holders.max_single_holder_percent,
        )
