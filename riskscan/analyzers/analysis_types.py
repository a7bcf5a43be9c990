"""
Result types produced by the category analyzers.

Every analyzer returns an ``AnalyzerResult`` subclass carrying the
category risk, the confidence behind it, human-readable findings and
evidence strings (usually explorer links).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..types import Confidence, RiskLevel


class OwnerType(Enum):
    """Classification of a contract's ``owner()``."""
    ZERO_ADDRESS = "ZERO_ADDRESS"
    EOA = "EOA"
    CONTRACT = "CONTRACT"
    NOT_FOUND = "NOT_FOUND"


@dataclass
class AnalyzerResult:
    """Fields shared by every analyzer result."""

    risk: RiskLevel = RiskLevel.UNKNOWN
    confidence: Confidence = Confidence.PARTIAL
    findings: List[str] = field(default_factory=list)
    evidence: List[str] = field(default_factory=list)


@dataclass
class TokenIdentity(AnalyzerResult):
    """Basic ERC-20 metadata."""

    has_code: bool = False
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    total_supply: Optional[int] = None
    is_standard: bool = False


@dataclass
class OwnershipInfo(AnalyzerResult):
    """Proxy and owner detection."""

    is_proxy: bool = False
    implementation_address: Optional[str] = None
    owner_address: Optional[str] = None
    owner_type: OwnerType = OwnerType.NOT_FOUND

    @property
    def ownership_renounced(self) -> bool:
        return self.owner_type is OwnerType.ZERO_ADDRESS


@dataclass
class DangerousFunctions(AnalyzerResult):
    """
    Privileged capabilities found by selector probing.

    ``detected`` maps a capability (mint, pause, blacklist, set_fee) to the
    signatures found for it.
    """

    target: Optional[str] = None
    detected: Dict[str, List[str]] = field(default_factory=dict)
    probes_total: int = 0
    probes_inconclusive: int = 0

    def has(self, capability: str) -> bool:
        return bool(self.detected.get(capability))

    @property
    def has_mint(self) -> bool:
        return self.has("mint")

    @property
    def has_pause(self) -> bool:
        return self.has("pause")

    @property
    def has_blacklist(self) -> bool:
        return self.has("blacklist")

    @property
    def has_set_fee(self) -> bool:
        return self.has("set_fee")

    @property
    def all_inconclusive(self) -> bool:
        return self.probes_total > 0 and self.probes_inconclusive == self.probes_total


@dataclass
class LogicResult(AnalyzerResult):
    """Ownership and dangerous functions combined into one logic risk."""

    is_proxy: bool = False
    owner_type: OwnerType = OwnerType.NOT_FOUND
    has_mint: bool = False
    has_pause: bool = False
    has_blacklist: bool = False
    has_set_fee: bool = False

    @property
    def should_abort(self) -> bool:
        """CRITICAL risk backed by verified evidence."""
        return self.risk is RiskLevel.CRITICAL and self.confidence is Confidence.VERIFIED


@dataclass
class ConstraintResult(AnalyzerResult):
    """Transfer and trading constraints."""

    has_cooldown: bool = False
    has_blacklist: bool = False
    has_whitelist: bool = False
    has_anti_whale: bool = False
    has_modifiable_limits: bool = False
    has_tax: bool = False
    has_dynamic_tax: bool = False
    has_dex_integration: bool = False
    buy_tax: Optional[int] = None
    sell_tax: Optional[int] = None
    risk_factors: int = 0


@dataclass
class HolderResult(AnalyzerResult):
    """Supply concentration among identifiable holders."""

    total_supply: Optional[int] = None
    circulating_supply: Optional[int] = None
    burned_percent: Optional[float] = None
    deployer_address: Optional[str] = None
    deployer_percent: Optional[float] = None
    owner_percent: Optional[float] = None
    contract_held_percent: Optional[float] = None
    lp_held_percent: Optional[float] = None
    max_single_holder_percent: Optional[float] = None
    max_single_holder_address: Optional[str] = None


class ContextType(Enum):
    LEGACY_TOKEN = "LEGACY_TOKEN"
    CENTRALIZED_STABLECOIN = "CENTRALIZED_STABLECOIN"
    REBASING_TOKEN = "REBASING_TOKEN"
    NON_STANDARD_PROXY = "NON_STANDARD_PROXY"
    VESTING_PATTERN = "VESTING_PATTERN"
    OWNERSHIP_RENOUNCED = "OWNERSHIP_RENOUNCED"


@dataclass
class ContextNote:
    type: ContextType
    note: str


@dataclass
class ContextResult:
    """Informational patterns that change how the other results read."""

    notes: List[ContextNote] = field(default_factory=list)
    is_legacy_token: bool = False
    is_centralized_stablecoin: bool = False
    is_rebasing_token: bool = False
    is_non_standard_proxy: bool = False
    has_vesting_pattern: bool = False
