"""
Exceptions raised by the endpoint pool, plus the helper that sorts endpoint
failures into coarse categories for logging.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# First match wins; "contract" is checked before "validation" so that
# "execution reverted: invalid amount" counts as a revert.
ERROR_CATEGORIES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("rate_limit", ("rate limit", "too many requests", "429", "capacity")),
    ("network", ("connection", "timeout", "timed out", "network", "dns", "502", "503")),
    ("contract", ("revert", "out of gas", "invalid opcode")),
    ("validation", ("invalid", "bad request", "400")),
)


class RpcError(Exception):
    """Base exception for endpoint pool failures."""
    pass


class UnsupportedMethodError(RpcError):
    """The pool only forwards a closed set of read-only methods."""

    def __init__(self, method: Any):
        super().__init__(f"Unsupported RPC method: {method}")
        self.method = method


class EndpointTimeoutError(RpcError):
    def __init__(self, endpoint: str, timeout: float):
        super().__init__(f"Timeout after {timeout:.1f}s on {endpoint}")
        self.endpoint = endpoint
        self.timeout = timeout


class ErrorHandler:
    """Classifies endpoint failures and logs them with structured context."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """Return one of rate_limit, network, contract, validation or unknown."""
        if isinstance(error, (EndpointTimeoutError, ConnectionError)):
            return "network"

        message = str(error).lower()
        for category, keywords in ERROR_CATEGORIES:
            if any(keyword in message for keyword in keywords):
                return category
        return "unknown"

    def log_error(self, error: Exception, context: Dict[str, Any]):
        category = self.classify_error(error)
        extra = {"error_type": type(error).__name__, "error_category": category, **context}
        message = (
            f"🔌 {context.get('rpc_method')} failed on {context.get('endpoint')} "
            f"[{category}, {context.get('consecutive_failures', 1)} in a row]: {error}"
        )

        # Public endpoints throttle routinely
        level = logging.INFO if category == "rate_limit" else logging.WARNING
        self.logger.log(level, message, extra=extra)
