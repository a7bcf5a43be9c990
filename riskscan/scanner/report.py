"""
Plain-text report rendering for a ScanResult.
"""

from typing import List, Sequence

from ..analyzers import AnalyzerResult
from ..scoring import BANDS
from .orchestrator import AbortReason, ScanResult

RULE_WIDTH = 40
MAX_LIQUIDITY_EVIDENCE = 5

DISCLAIMER = (
    "This report evaluates on-chain contract structure and observable data.",
    "It does not guarantee safety and is not financial advice.",
    "Risk reflects structural exposure, not project legitimacy.",
    "UNKNOWN data reduces confidence and score.",
)


def _header(title: str) -> List[str]:
    label = f"━━━ {title} "
    return ["", label + "━" * max(RULE_WIDTH - len(label), 3)]


def _bullets(items: Sequence[str]) -> List[str]:
    return [f"• {item}" for item in items]


def _evidence(items: Sequence[str], limit: int = 0) -> List[str]:
    if not items:
        return []
    shown = items[:limit] if limit else items
    lines = ["Evidence:"] + [f"  {item}" for item in shown]
    if limit and len(items) > limit:
        lines.append(f"  ... and {len(items) - limit} more")
    return lines


def _category(title: str, label: str, result: AnalyzerResult) -> List[str]:
    lines = _header(title) + _bullets(result.findings)
    lines += ["", f"{label}: {result.risk.value} ({result.confidence.value})"]
    return lines + _evidence(result.evidence)


def render_token(scan: ScanResult) -> List[str]:
    identity = scan.identity
    lines = _header("TOKEN")
    if identity is None:
        return lines + ["Token identity was not determined"]
    if not identity.has_code:
        return lines + identity.findings + identity.evidence
    lines += [
        f"Name: {identity.name or 'Non-standard ERC20'}",
        f"Symbol: {identity.symbol or 'Non-standard'}",
        f"Decimals: {identity.decimals if identity.decimals is not None else 'Assumed 18'}",
    ]
    if identity.total_supply is not None:
        lines.append(f"Total Supply: {identity.total_supply}")
    return lines + identity.evidence


def render_coverage(scan: ScanResult) -> List[str]:
    return _header("COVERAGE") + [
        f"Chain: {scan.chain_name} ({scan.chain_id})",
        f"Identifiers: {', '.join(scan.identifiers or [scan.chain_key])}",
        f"DEXes: {', '.join(scan.dex_coverage)}",
    ]


def render_liquidity(scan: ScanResult) -> List[str]:
    liquidity = scan.liquidity
    breakdown = liquidity.risk_breakdown
    lines = _header("LIQUIDITY") + _bullets(liquidity.facts)

    for venue in liquidity.venues:
        depth = f"${venue.estimated_depth_usd:,}" if venue.depth_verifiable else "unverifiable"
        marker = "*" if venue is liquidity.primary_venue else "-"
        lines.append(
            f"  {marker} {venue.dex} {venue.address} "
            f"(quote: {venue.quote_symbol}, depth: {depth})"
        )

    lines += [
        "",
        "Liquidity Risk Breakdown:",
        f"  LP Control:       {breakdown.control_risk.value}",
        f"  LP Depth:         {breakdown.depth_risk.value}",
        f"  LP Verifiability: {breakdown.verifiability_risk.value}",
    ]
    if liquidity.depth_verifiable and liquidity.total_depth_usd is not None:
        lines.append(f"  Estimated Depth: ${liquidity.total_depth_usd:,}")
    if liquidity.found:
        lines.append(f"  Dominant Protocol: {liquidity.dominant_family.value.upper()}")
    if liquidity.burned_percent is not None:
        status = " (burned)" if liquidity.is_burned else ""
        lines.append(f"  LP Burned: {liquidity.burned_percent}%{status}")
    if liquidity.locked_percent is not None:
        status = " (locked)" if liquidity.is_locked else ""
        lines.append(f"  LP Locked: {liquidity.locked_percent}%{status}")
    lines.append(f"  Venues Checked: {liquidity.total_checked}")
    lines.append(f"  Confidence: {liquidity.confidence.value}")
    for error in liquidity.strategy_errors:
        lines.append(f"  Discovery error: {error}")
    return lines + _evidence(liquidity.evidence, MAX_LIQUIDITY_EVIDENCE)


def render_score(scan: ScanResult) -> List[str]:
    result = scan.score
    lines = _header("FINAL SCORE") + [
        "",
        f"Score: {result.final_score}/100",
        f"Risk Tier: {result.band}",
        f"Confidence: {result.confidence.value}",
        f"Coverage: {result.coverage_completeness}%",
        "",
        "Score Breakdown:",
        f"  Base: {result.breakdown.base_score}",
    ]
    for adjustment in result.breakdown.adjustments:
        sign = "+" if adjustment.delta > 0 else ""
        lines.append(f"  {adjustment.reason}: {sign}{adjustment.delta}")

    if result.breakdown.guardrails_applied:
        lines += ["", "Guardrails Applied:"]
        lines += [f"  ⚠ {guardrail}" for guardrail in result.breakdown.guardrails_applied]
    if result.risk_factors:
        lines += ["", "Risk Factors:"]
        lines += [f"  ✗ {factor}" for factor in result.risk_factors]
    if result.positive_signals:
        lines += ["", "Positive Signals:"]
        lines += [f"  ✓ {signal}" for signal in result.positive_signals]
    return lines


def render_bands() -> List[str]:
    lines = _header("SCORE BANDS")
    upper = 100
    for floor, band in BANDS:
        span = f"{floor}-{upper}:" if floor else f"<{upper + 1}:"
        lines.append(f"{span:<8}{band}")
        upper = floor - 1
    return lines


def render_aborted(scan: ScanResult) -> List[str]:
    aborted = scan.aborted
    lines = _header("SCAN ABORTED") + [
        f"Reason: {aborted.reason.value}",
        f"Stage: {aborted.stage}",
        f"Detail: {aborted.message}",
    ]
    if aborted.reason is AbortReason.CRITICAL_LOGIC_RISK:
        lines.append("Verified CRITICAL risk: remaining checks were skipped. Treat as HIGH / CRITICAL RISK.")
    elif aborted.reason is not AbortReason.NO_CODE:
        lines.append("No score was produced. Partial results above are incomplete.")
    return lines


def render_report(scan: ScanResult) -> List[str]:
    """
    Render a scan as report lines, one section after another.

    Sections for stages that did not run are omitted; an aborted scan ends
    with the abort details instead of a score.

    Args:
        scan: Completed or aborted scan

    Returns:
        Report lines without trailing newlines
    """
    lines = render_token(scan) + render_coverage(scan)

    if scan.logic is not None:
        lines += _category("LOGIC RISK", "Logic Risk", scan.logic)
    if scan.liquidity is not None:
        lines += render_liquidity(scan)
    if scan.constraints is not None:
        lines += _category("TRANSFER CONSTRAINTS", "Constraint Risk", scan.constraints)
    if scan.holders is not None:
        lines += _category("HOLDERS", "Holder Risk", scan.holders)

    if scan.aborted is not None:
        lines += render_aborted(scan)
    elif scan.score is not None:
        lines += render_score(scan)

    if scan.context is not None and scan.context.notes:
        lines += _header("CONTEXT") + _bullets([note.note for note in scan.context.notes])

    lines += render_bands()
    lines += _header("DISCLAIMER") + list(DISCLAIMER)
    lines.append("")
    return lines
