"""
Scan-level configuration for riskscan.
"""

from dataclasses import dataclass, field

from .base import BaseConfig, ConfigError


@dataclass
class ScanConfig(BaseConfig):
    """Settings that shape a single scan run."""

    # Global scan deadline in seconds (0 disables it)
    SCAN_TIMEOUT_SECONDS: float = field(default_factory=lambda: BaseConfig.get_env_float("SCAN_TIMEOUT_SECONDS", 0.0))

    # Event-log discovery window behind the chain head (0 scans from the factory deployment block)
    LOG_SCAN_LOOKBACK_BLOCKS: int = field(
        default_factory=lambda: BaseConfig.get_env_int("LOG_SCAN_LOOKBACK_BLOCKS", 50_000)
    )

    # Largest block span sent in one eth_getLogs request
    LOG_SCAN_CHUNK_BLOCKS: int = field(default_factory=lambda: BaseConfig.get_env_int("LOG_SCAN_CHUNK_BLOCKS", 10_000))

    # Stop before liquidity discovery when logic risk is verified CRITICAL
    ABORT_ON_CRITICAL: bool = field(default_factory=lambda: BaseConfig.get_env_bool("ABORT_ON_CRITICAL", True))

    def _validate_config(self):
        """Validate scan configuration values."""
        super()._validate_config()
        if self.SCAN_TIMEOUT_SECONDS < 0:
            raise ConfigError(f"SCAN_TIMEOUT_SECONDS must be >= 0, got: {self.SCAN_TIMEOUT_SECONDS}")
        if self.LOG_SCAN_LOOKBACK_BLOCKS < 0:
            raise ConfigError(
                f"LOG_SCAN_LOOKBACK_BLOCKS must be >= 0, got: {self.LOG_SCAN_LOOKBACK_BLOCKS}"
            )
        if self.LOG_SCAN_CHUNK_BLOCKS < 1:
            raise ConfigError(f"LOG_SCAN_CHUNK_BLOCKS must be >= 1, got: {self.LOG_SCAN_CHUNK_BLOCKS}")

    @property
    def scan_deadline(self):
        """Global deadline in seconds, or None when disabled."""
        return self.SCAN_TIMEOUT_SECONDS or None
