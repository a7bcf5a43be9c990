"""
Shared risk vocabulary used by every analyzer, the discovery engine and scoring.
"""

from enum import Enum


class RiskLevel(Enum):
    """Risk level of a single category or liquidity sub-risk."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"
    UNVERIFIABLE = "UNVERIFIABLE"

    @property
    def is_undetermined(self) -> bool:
        """UNKNOWN and UNVERIFIABLE are never equivalent to LOW."""
        return self in (RiskLevel.UNKNOWN, RiskLevel.UNVERIFIABLE)

    @property
    def is_severe(self) -> bool:
        return self in (RiskLevel.HIGH, RiskLevel.CRITICAL)


class Confidence(Enum):
    """How strongly the evidence supports a risk level."""
    VERIFIED = "VERIFIED"
    PARTIAL = "PARTIAL"
    UNVERIFIABLE = "UNVERIFIABLE"
