"""
Logic risk: ownership, proxy status and dangerous functions combined.
"""

from ..types import Confidence, RiskLevel
from .analysis_types import DangerousFunctions, LogicResult, OwnershipInfo, OwnerType


def combine_logic_risk(ownership: OwnershipInfo, functions: DangerousFunctions) -> LogicResult:
    """
    Derive the logic risk from owner type, proxy status and capabilities.

    Rules are evaluated top to bottom; the first match wins:
        CRITICAL  mint and fee modification with an EOA owner
        HIGH      (mint or blacklist) with an EOA owner, or proxy with an EOA owner
        MEDIUM    any dangerous function
        UNKNOWN   every function probe inconclusive
        LOW       ownership renounced
        UNKNOWN   owner not found
        LOW       anything else (contract owner, or EOA with nothing dangerous)

    Args:
        ownership: Owner and proxy detection result
        functions: Dangerous-function probe result

    Returns:
        LogicResult with combined findings and evidence
    """
    eoa = ownership.owner_type is OwnerType.EOA
    result = LogicResult(
        is_proxy=ownership.is_proxy,
        owner_type=ownership.owner_type,
        has_mint=functions.has_mint,
        has_pause=functions.has_pause,
        has_blacklist=functions.has_blacklist,
        has_set_fee=functions.has_set_fee,
        findings=ownership.findings + functions.findings,
        evidence=ownership.evidence + functions.evidence,
    )
    dangerous = result.has_mint or result.has_pause or result.has_blacklist or result.has_set_fee

    if result.has_mint and result.has_set_fee and eoa:
        result.risk = RiskLevel.CRITICAL
    elif (result.has_mint or result.has_blacklist) and eoa:
        result.risk = RiskLevel.HIGH
    elif result.is_proxy and eoa:
        result.risk = RiskLevel.HIGH
    elif dangerous:
        result.risk = RiskLevel.MEDIUM
    elif functions.all_inconclusive:
        result.risk = RiskLevel.UNKNOWN
    elif ownership.owner_type is OwnerType.ZERO_ADDRESS:
        result.risk = RiskLevel.LOW
    elif ownership.owner_type is OwnerType.NOT_FOUND:
        # Cannot verify: UNKNOWN, never LOW
        result.risk = RiskLevel.UNKNOWN
    else:
        result.risk = RiskLevel.LOW

    if result.risk is RiskLevel.UNKNOWN:
        result.confidence = Confidence.UNVERIFIABLE
    elif ownership.confidence is Confidence.VERIFIED and functions.confidence is Confidence.VERIFIED:
        result.confidence = Confidence.VERIFIED
    else:
        result.confidence = Confidence.PARTIAL
    return result
