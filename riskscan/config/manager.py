"""
Configuration manager for riskscan.

Groups the environment, chain, protocol and scan sections and turns them
into the immutable per-chain snapshot every scan component receives.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .base import BaseConfig, ConfigError
from .chains import ChainConfig, Endpoint, Stablecoin
from .protocols import FactorySpec, KnownPair, PoolManagerSpec, ProtocolConfig
from .scan import ScanConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainSettings:
    """
    Immutable view of everything a scan needs to know about one chain.

    Built once per scan by ``ConfigManager.get_chain_settings`` and passed by
    reference to the endpoint pool, discovery engine and analyzers.
    """

    key: str
    name: str
    chain_id: int
    explorer_url: str
    endpoints: Tuple[Endpoint, ...]
    wrapped_native: str
    stablecoins: Tuple[Stablecoin, ...]
    factories: Tuple[FactorySpec, ...]
    pool_manager: Optional[PoolManagerSpec]
    v3_fee_tiers: Tuple[int, ...]
    burn_addresses: Tuple[str, ...]
    lockers: Tuple[str, ...]
    known_pairs: Tuple[KnownPair, ...]
    pair_created_topic: str
    pool_created_topic: str
    v4_initialize_topic: str
    dex_coverage: Tuple[str, ...] = ()
    identifiers: Tuple[str, ...] = ()

    @property
    def quote_tokens(self) -> Tuple[str, ...]:
        """Wrapped native asset followed by every stablecoin."""
        return (self.wrapped_native,) + tuple(coin.address for coin in self.stablecoins)

    def get_stablecoin(self, address: str) -> Optional[Stablecoin]:
        """Look up a stablecoin by address, case-insensitively."""
        if not address:
            return None
        wanted = address.lower()
        for coin in self.stablecoins:
            if coin.address.lower() == wanted:
                return coin
        return None

    def is_wrapped_native(self, address: str) -> bool:
        return bool(address) and address.lower() == self.wrapped_native.lower()

    def address_url(self, address: str) -> str:
        return f"{self.explorer_url}/address/{address}"

    def token_url(self, address: str) -> str:
        return f"{self.explorer_url}/token/{address}"


class ConfigManager:
    """
    Holds the four configuration sections a scan reads from.

    Sections are built eagerly so a malformed environment fails at startup
    rather than halfway through a scan.
    """

    def __init__(self, environment: Optional[str] = None):
        overrides = {"ENVIRONMENT": environment} if environment else {}
        try:
            self.base = BaseConfig(**overrides)
            self.chains = ChainConfig()
            self.protocols = ProtocolConfig()
            self.scan = ScanConfig()
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Could not build configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

        logger.info(f"⚙️ Configuration ready ({self.environment}, default chain {self.chains.default_chain})")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    def get_chain_settings(self, chain_key: Optional[str] = None) -> ChainSettings:
        """
        Build the immutable settings snapshot for one chain.

        Args:
            chain_key: Chain name, numeric id or alias; default chain when omitted

        Returns:
            ChainSettings for the resolved chain

        Raises:
            ConfigError: If the chain is unknown or has no endpoint configured
        """
        key = self.chains.resolve_chain_key(chain_key) if chain_key else self.chains.default_chain
        chain = self.chains.get_chain_config(key)

        endpoints = tuple(self.chains.get_endpoints(key))
        if not endpoints:
            raise ConfigError(f"No RPC endpoint configured for chain: {key}")

        protocols = self.protocols
        return ChainSettings(
            key=key,
            name=chain["name"],
            chain_id=chain["chain_id"],
            explorer_url=chain["explorer_url"],
            endpoints=endpoints,
            wrapped_native=chain["wrapped_native"],
            stablecoins=tuple(chain["stablecoins"]),
            factories=tuple(protocols.get_factories(key)),
            pool_manager=protocols.get_pool_manager(key),
            v3_fee_tiers=tuple(protocols.V3_FEE_TIERS),
            burn_addresses=tuple(protocols.BURN_ADDRESSES),
            lockers=tuple(protocols.get_lockers(key)),
            known_pairs=tuple(protocols.get_known_pairs(key)),
            pair_created_topic=protocols.get_event_hash("v2_pair_created"),
            pool_created_topic=protocols.get_event_hash("v3_pool_created"),
            v4_initialize_topic=protocols.get_event_hash("v4_initialize"),
            dex_coverage=tuple(protocols.get_dex_coverage(key)),
            identifiers=tuple(self.chains.get_identifiers(key)),
        )

    def validate_configuration(self) -> bool:
        """Check every supported chain has an endpoint; warn on chains without factories."""
        if not self.chains.supported_chains:
            raise ConfigError("No chains configured")

        for key in self.chains.supported_chains:
            if not self.chains.get_endpoints(key):
                raise ConfigError(f"No RPC endpoint configured for chain: {key}")
            if not self.protocols.get_factories(key):
                logger.warning(f"⚠️ {key}: no DEX factories, liquidity discovery limited to V4 and known pairs")

        logger.debug(f"✅ {len(self.chains.supported_chains)} chains validated")
        return True

    def to_dict(self) -> Dict[str, Any]:
        sections = {"base": self.base, "chains": self.chains, "protocols": self.protocols, "scan": self.scan}
        document = {name: section.to_dict() for name, section in sections.items()}
        document["environment"] = self.environment
        return document

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment!r}, default_chain={self.chains.default_chain!r})"


# Shared by the CLI and library callers; rebuilt by reload_config
_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """Return the shared ConfigManager, building and validating it on first use."""
    global _manager

    if force_reload or _manager is None:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _manager = manager

    return _manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """Discard the shared ConfigManager and build a new one from the current process environment."""
    return get_config(environment=environment, force_reload=True)


def get_chain_settings(chain_key: Optional[str] = None) -> ChainSettings:
    """Shortcut for ``get_config().get_chain_settings(chain_key)``."""
    return get_config().get_chain_settings(chain_key)
