"""
Category analyzers: identity, ownership/proxy, dangerous functions,
transfer constraints, holder concentration and contextual patterns.
"""

from .analysis_types import (
    AnalyzerResult,
    ConstraintResult,
    ContextNote,
    ContextResult,
    ContextType,
    DangerousFunctions,
    HolderResult,
    LogicResult,
    OwnershipInfo,
    OwnerType,
    TokenIdentity,
)
from .base import BaseAnalyzer, percent_of
from .constraints import ConstraintAnalyzer
from .context import ContextAnalyzer
from .functions import DANGEROUS_FUNCTIONS, FunctionAnalyzer
from .holders import HolderAnalyzer
from .identity import IdentityAnalyzer
from .logic import combine_logic_risk
from .ownership import IMPLEMENTATION_SLOT, OwnershipAnalyzer

__all__ = [
    "AnalyzerResult",
    "ConstraintResult",
    "ContextNote",
    "ContextResult",
    "ContextType",
    "DangerousFunctions",
    "HolderResult",
    "LogicResult",
    "OwnershipInfo",
    "OwnerType",
    "TokenIdentity",
    "BaseAnalyzer",
    "percent_of",
    "ConstraintAnalyzer",
    "ContextAnalyzer",
    "DANGEROUS_FUNCTIONS",
    "FunctionAnalyzer",
    "HolderAnalyzer",
    "IdentityAnalyzer",
    "combine_logic_risk",
    "IMPLEMENTATION_SLOT",
    "OwnershipAnalyzer",
]
