"""
Configuration management for riskscan.

Example:
    from riskscan.config import get_config

    config = get_config()

    # Immutable per-chain snapshot used by a scan
    settings = config.get_chain_settings("eth")

    # Ordered endpoints, private RPC first
    endpoints = config.chains.get_endpoints("base")

    # Factories tagged by protocol family
    factories = config.protocols.get_factories("ethereum")
"""

from .base import BaseConfig, ConfigError
from .chains import CHAIN_ALIASES, ChainConfig, Endpoint, Stablecoin
from .manager import ChainSettings, ConfigManager, get_chain_settings, get_config, reload_config
from .protocols import FactorySpec, KnownPair, PoolManagerSpec, ProtocolConfig
from .scan import ScanConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "CHAIN_ALIASES",
    "ChainConfig",
    "Endpoint",
    "Stablecoin",
    "ProtocolConfig",
    "FactorySpec",
    "KnownPair",
    "PoolManagerSpec",
    "ScanConfig",
    "ChainSettings",
    "ConfigManager",
    "get_config",
    "reload_config",
    "get_chain_settings",
]
