"""
Scan orchestration, report rendering and the command-line entry point.
"""

from .orchestrator import AbortInfo, AbortReason, RiskScanner, ScanResult, venue_holder_addresses
from .report import render_report

__all__ = [
    "AbortInfo",
    "AbortReason",
    "RiskScanner",
    "ScanResult",
    "venue_holder_addresses",
    "render_report",
]
