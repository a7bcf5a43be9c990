"""
Remote node access: the tiered endpoint pool and typed contract reads.
"""

from .errors import EndpointTimeoutError, ErrorHandler, RpcError, UnsupportedMethodError
from .pool import EndpointPool, RpcCallResult, RpcMethod, RpcPoolStats
from .reader import ContractReader, ProbeResult, bytecode_has_selector, selector

__all__ = [
    "RpcError",
    "UnsupportedMethodError",
    "EndpointTimeoutError",
    "ErrorHandler",
    "EndpointPool",
    "RpcCallResult",
    "RpcMethod",
    "RpcPoolStats",
    "ContractReader",
    "ProbeResult",
    "bytecode_has_selector",
    "selector",
]
