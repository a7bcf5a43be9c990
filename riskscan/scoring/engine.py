"""
Deterministic risk scoring.

``score`` is a pure function of its inputs: it starts from a fixed base,
applies a penalty per risk input, adds capped positive bonuses, then
applies hard guardrails that can only lower the result.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import List, Optional, Tuple

from ..discovery.venue_types import LiquidityRiskBreakdown, ProtocolFamily
from ..types import RiskLevel

BASE_SCORE = 70
MAX_POSITIVE_BONUS = 15
BONUS_STEP = 5
TOTAL_CHECKS = 6

PENALTIES = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: -5,
    RiskLevel.HIGH: -15,
    RiskLevel.CRITICAL: -20,
    RiskLevel.UNKNOWN: -3,
    RiskLevel.UNVERIFIABLE: -3,
}

# Guardrail caps
HIGH_RISK_CAP = 65
MULTI_MEDIUM_CAP = 75
UNVERIFIABLE_LP_CAP = 90
HOLDER_CONCENTRATION_CAP = 70
HOLDER_CONCENTRATION_THRESHOLD = 80

DEPTH_BONUS_THRESHOLD = Decimal(50_000)

# (min score, band), highest first
BANDS: Tuple[Tuple[int, str], ...] = (
    (90, "STRONG CONFIDENCE"),
    (75, "LOW RISK"),
    (55, "CAUTION"),
    (0, "HIGH / CRITICAL RISK"),
)


class ScoreConfidence(Enum):
    """Confidence in the final score."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class ContextFlags:
    """Non-risk inputs to scoring."""

    ownership_renounced: bool = False
    is_proxy: bool = False
    has_mint: bool = False
    has_pause: bool = False
    liquidity_depth_usd: Optional[Decimal] = None
    dominant_family: ProtocolFamily = ProtocolFamily.UNKNOWN
    holder_concentration_percent: Optional[float] = None


@dataclass(frozen=True)
class Adjustment:
    reason: str
    delta: int


@dataclass
class ScoreBreakdown:
    base_score: int = BASE_SCORE
    adjustments: List[Adjustment] = field(default_factory=list)
    guardrails_applied: List[str] = field(default_factory=list)


@dataclass
class ScoreResult:
    """Final score with everything needed to explain it."""

    final_score: int
    band: str
    confidence: ScoreConfidence
    coverage_completeness: int
    breakdown: ScoreBreakdown
    risk_factors: List[str] = field(default_factory=list)
    positive_signals: List[str] = field(default_factory=list)


# Risk-factor notes per input and level
_NOTES = {
    "logic": {
        RiskLevel.CRITICAL: "Critical/High logic risk detected",
        RiskLevel.HIGH: "Critical/High logic risk detected",
        RiskLevel.MEDIUM: "Moderate logic risk detected",
        RiskLevel.UNKNOWN: "Logic risk could not be fully verified",
        RiskLevel.UNVERIFIABLE: "Logic risk could not be fully verified",
    },
    "control": {
        RiskLevel.CRITICAL: "LP tokens not protected (burned/locked)",
        RiskLevel.HIGH: "LP tokens not protected (burned/locked)",
        RiskLevel.MEDIUM: "LP tokens only partially protected",
        RiskLevel.UNKNOWN: "LP token ownership could not be verified",
        RiskLevel.UNVERIFIABLE: "LP token ownership could not be verified",
    },
    "depth": {
        RiskLevel.CRITICAL: "Insufficient liquidity depth (<$1,000)",
        RiskLevel.HIGH: "Insufficient liquidity depth (<$1,000)",
        RiskLevel.MEDIUM: "Low liquidity depth (<$10,000)",
        RiskLevel.UNKNOWN: "Liquidity depth could not be measured",
        RiskLevel.UNVERIFIABLE: "Liquidity depth could not be measured",
    },
    "verifiability": {
        RiskLevel.CRITICAL: "No verifiable liquidity found",
        RiskLevel.HIGH: "No verifiable liquidity found",
        RiskLevel.MEDIUM: "Liquidity only partially verifiable",
        RiskLevel.UNKNOWN: "Liquidity depth could not be verified",
        RiskLevel.UNVERIFIABLE: "Liquidity depth could not be verified",
    },
    "constraint": {
        RiskLevel.CRITICAL: "Restrictive trading controls detected",
        RiskLevel.HIGH: "Restrictive trading controls detected",
        RiskLevel.MEDIUM: "Trading constraints detected",
        RiskLevel.UNKNOWN: "Trading constraints could not be fully verified",
        RiskLevel.UNVERIFIABLE: "Trading constraints could not be fully verified",
    },
    "holder": {
        RiskLevel.CRITICAL: "High holder concentration risk",
        RiskLevel.HIGH: "High holder concentration risk",
        RiskLevel.MEDIUM: "Moderate holder concentration",
        RiskLevel.UNKNOWN: "Holder distribution could not be fully verified",
        RiskLevel.UNVERIFIABLE: "Holder distribution could not be fully verified",
    },
}

_LABELS = {
    "logic": "Logic risk",
    "control": "LP control risk",
    "depth": "LP depth risk",
    "verifiability": "LP verifiability",
    "constraint": "Constraint risk",
    "holder": "Holder risk",
}


def get_band(final_score: int) -> str:
    for minimum, band in BANDS:
        if final_score >= minimum:
            return band
    return BANDS[-1][1]


def score(
    logic_risk: RiskLevel,
    liquidity_risk: LiquidityRiskBreakdown,
    constraint_risk: RiskLevel,
    holder_risk: RiskLevel,
    context_flags: ContextFlags,
) -> ScoreResult:
    """
    Combine category risks into a final score.

    Args:
        logic_risk: Ownership/proxy/dangerous-function risk
        liquidity_risk: Control, depth and verifiability sub-risks
        constraint_risk: Transfer-constraint risk
        holder_risk: Holder-concentration risk
        context_flags: Bonus and guardrail inputs

    Returns:
        ScoreResult; identical inputs always produce an identical result
    """
    inputs = (
        ("logic", logic_risk),
        ("control", liquidity_risk.control_risk),
        ("depth", liquidity_risk.depth_risk),
        ("verifiability", liquidity_risk.verifiability_risk),
        ("constraint", constraint_risk),
        ("holder", holder_risk),
    )
    breakdown = ScoreBreakdown()
    risk_factors: List[str] = []
    positive_signals: List[str] = []
    running = BASE_SCORE

    for name, level in inputs:
        penalty = PENALTIES[level]
        if penalty == 0:
            continue
        running += penalty
        breakdown.adjustments.append(Adjustment(f"{_LABELS[name]} ({level.value})", penalty))
        risk_factors.append(_NOTES[name][level])

    # Positive evidence, fixed order, capped in total
    bonus_total = 0
    depth = context_flags.liquidity_depth_usd
    bonuses = (
        (context_flags.ownership_renounced,
         "Ownership renounced (zero/dead)", "Ownership renounced to zero/dead address"),
        (not (context_flags.is_proxy or context_flags.has_mint or context_flags.has_pause),
         "No proxy, mint, or pause functions", "No proxy/mint/pause capabilities detected"),
        (depth is not None and depth > DEPTH_BONUS_THRESHOLD,
         "Sufficient liquidity depth (>$50k)", f"Liquidity depth: ${depth:,}" if depth is not None else ""),
    )
    for applies, reason, signal in bonuses:
        if not applies:
            continue
        bonus = min(BONUS_STEP, MAX_POSITIVE_BONUS - bonus_total)
        if bonus <= 0:
            continue
        bonus_total += bonus
        running += bonus
        breakdown.adjustments.append(Adjustment(reason, bonus))
        positive_signals.append(signal)

    # Guardrails only ever lower the score
    all_levels = [level for _, level in inputs]
    category_levels = [level for name, level in inputs if name != "verifiability"]
    high_count = sum(1 for level in all_levels if level.is_severe)
    medium_count = sum(1 for level in category_levels if level is RiskLevel.MEDIUM)

    def cap(limit: int, label: str):
        nonlocal running
        if running > limit:
            breakdown.guardrails_applied.append(label)
            running = limit

    if high_count > 0:
        cap(HIGH_RISK_CAP, f"HIGH risk detected ({high_count}x): capped at {HIGH_RISK_CAP}")
    if medium_count >= 2 and high_count == 0:
        cap(MULTI_MEDIUM_CAP, f"Multiple MEDIUM risks ({medium_count}x): capped at {MULTI_MEDIUM_CAP}")
    if (context_flags.dominant_family in (ProtocolFamily.V3, ProtocolFamily.V4)
            and liquidity_risk.verifiability_risk is RiskLevel.UNVERIFIABLE):
        cap(UNVERIFIABLE_LP_CAP, f"V3/V4 unverifiable LP: capped at {UNVERIFIABLE_LP_CAP}")
    concentration = context_flags.holder_concentration_percent
    if concentration is not None and concentration >= HOLDER_CONCENTRATION_THRESHOLD:
        cap(HOLDER_CONCENTRATION_CAP,
            f"Single holder controls >={HOLDER_CONCENTRATION_THRESHOLD}% supply: capped at {HOLDER_CONCENTRATION_CAP}")
        risk_factors.append(f"Single entity holds {concentration}% of circulating supply")

    final_score = max(0, min(100, running))

    # Five category risks plus liquidity verifiability
    undetermined = sum(1 for level in all_levels if level.is_undetermined)
    if undetermined == 0 and depth is not None:
        confidence = ScoreConfidence.HIGH
    elif undetermined <= 1:
        confidence = ScoreConfidence.MEDIUM
    else:
        confidence = ScoreConfidence.LOW
    coverage = int((Decimal(TOTAL_CHECKS - undetermined) * 100 / TOTAL_CHECKS).to_integral_value(rounding=ROUND_HALF_UP))

    return ScoreResult(
        final_score=final_score,
        band=get_band(final_score),
        confidence=confidence,
        coverage_completeness=coverage,
        breakdown=breakdown,
        risk_factors=risk_factors,
        positive_signals=positive_signals,
    )
