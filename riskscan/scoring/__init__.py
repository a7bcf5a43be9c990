"""
Deterministic 0-100 risk scoring.
"""

from .engine import (
    BANDS,
    Adjustment,
    ContextFlags,
    ScoreBreakdown,
    ScoreConfidence,
    ScoreResult,
    get_band,
    score,
)

__all__ = [
    "BANDS",
    "Adjustment",
    "ContextFlags",
    "ScoreBreakdown",
    "ScoreConfidence",
    "ScoreResult",
    "get_band",
    "score",
]
