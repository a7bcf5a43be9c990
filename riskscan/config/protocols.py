"""
Protocol-specific configuration for riskscan.

Factories, pool managers, event topics, burn addresses, LP lockers and the
hardcoded known-pair table used by liquidity discovery.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .base import BaseConfig, ConfigError


@dataclass(frozen=True)
class FactorySpec:
    """A DEX factory contract tagged by protocol family."""

    dex: str
    family: str  # "v2" or "v3"
    address: str
    deployment_block: int = 0

    @property
    def label(self) -> str:
        return f"{self.dex} {self.family.upper()}"


@dataclass(frozen=True)
class PoolManagerSpec:
    """A singleton (V4-style) pool manager."""

    dex: str
    address: str
    deployment_block: int = 0


@dataclass(frozen=True)
class KnownPair:
    """A hardcoded token-to-venue mapping for major tokens."""

    token: str
    pair: str
    quote: str
    dex: str
    family: str = "v2"


@dataclass
class ProtocolConfig(BaseConfig):
    """Configuration for the DeFi protocols that liquidity discovery inspects."""

    # Creation topics, identical on every EVM chain
    UNISWAP_V2_PAIR_CREATED_EVENT: str = (
        "0x0d3648bd0f6ba80134a33ba9275ac585d9d315f0ad8355cddefde31afa28d0e9"
    )
    UNISWAP_V3_POOL_CREATED_EVENT: str = (
        "0x783cca1c0412dd0d695e784568c96da2e9c22ff989357a2e8b1d9b2b4e6b7118"
    )
    UNISWAP_V4_INITIALIZED_EVENT: str = (
        "0xdd466e674ea557f56295e2d0218a125ea4b4f0f6f3307b95f85e6110838d6438"
    )

    # Fee tiers probed on every V3 factory
    V3_FEE_TIERS: tuple = (100, 500, 3000, 10000)

    # LP tokens held here count as burned
    BURN_ADDRESSES: tuple = (
        "0x0000000000000000000000000000000000000000",
        "0x000000000000000000000000000000000000dEaD",
        "0xdead000000000000000000000000000000000000",
    )

    @property
    def dex_factories(self) -> Dict[str, Dict[str, Dict]]:
        """DEX factories by chain, then by DEX name."""
        return {
            "ethereum": {
                "Uniswap": {
                    "v2": "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f",
                    "v3": "0x1F98431c8aD98523631AE4a59f267346ea31F984",
                    "v2_deployment_block": 10000835,
                    "v3_deployment_block": 12369621,
                },
                "SushiSwap": {
                    "v2": "0xC0AEe478e3658e2610c5F7A4A2E1777cE9e4f2Ac",
                    "v2_deployment_block": 10794229,
                },
                "ShibaSwap": {
                    "v2": "0x115934131916C8b277DD010Ee02de363c09d037c",
                    # Lower bound, ahead of the July 2021 launch
                    "v2_deployment_block": 12700000,
                },
            },
            "base": {
                "Uniswap": {
                    "v2": "0x8909Dc15e40173Ff4699343b6eB8132c65e18eC6",
                    "v3": "0x33128a8fC17869897dcE68Ed026d694621f6FDfD",
                    "v2_deployment_block": 6601915,
                    "v3_deployment_block": 1371680,
                },
                "PancakeSwap": {
                    "v2": "0x02a84c1b3BBD7401a5f7fa98a384EBC70bB5749E",
                    "v3": "0x0BFbCF9fa4f9C56B0F40a671Ad40E0805A091865",
                },
                "BaseSwap": {
                    "v2": "0xFDa619b6d20975be80A10332cD39b9a4b0FAa8BB",
                },
                "RocketSwap": {
                    "v2": "0x1b8128c3A1B7D20053D10763ff02466ca7FF99FC",
                },
            },
            "bsc": {
                "PancakeSwap": {
                    "v2": "0xcA143Ce32Fe78f1f7019d7d551a6402fC5350c73",
                    "v3": "0x0BFbCF9fa4f9C56B0F40a671Ad40E0805A091865",
                },
                "Uniswap": {
                    "v3": "0xdB1d10011AD0Ff90774D0C6Bb92e5C5c8b4461F7",
                },
                "ApeSwap": {
                    "v2": "0x0841BD0B734E4F5853f0dD8d7Ea041c241fb0Da6",
                },
            },
            "polygon": {
                "Uniswap": {"v3": "0x1F98431c8aD98523631AE4a59f267346ea31F984"},
                "QuickSwap": {"v2": "0x5757371414417b8C6CAad45bAeF941aBc7d3Ab32"},
                "SushiSwap": {"v2": "0xc35DADB65012eC5796536bD9864eD8773aBc74C4"},
            },
            "arbitrum": {
                "Uniswap": {
                    "v2": "0xf1D7CC64Fb4452F05c498126312eBE29f30Fbcf9",
                    "v3": "0x1F98431c8aD98523631AE4a59f267346ea31F984",
                    "v2_deployment_block": 150442611,
                },
                "SushiSwap": {"v2": "0xc35DADB65012eC5796536bD9864eD8773aBc74C4"},
                "Camelot": {"v2": "0x6EcCab422D763aC031210895C81787E87B43A652"},
            },
            "optimism": {
                "Uniswap": {"v3": "0x1F98431c8aD98523631AE4a59f267346ea31F984"},
                "Velodrome": {"v2": "0x25CbdDb98b35ab1FF77413456B31EC81A6B6B746"},
            },
            "avalanche": {
                "Uniswap": {"v3": "0x740b1c1de25031C31FF4fC9A62f554A55cdC1baD"},
                "TraderJoe": {"v2": "0x9Ad6C38BE94206cA50bb0d90783181c0dCA0B3B6"},
                "Pangolin": {"v2": "0xefa94DE7a4656D787667C749f7E1223D71E9FD88"},
            },
            "fantom": {
                "SpookySwap": {"v2": "0x152eE697f2E276fA89E96742e9bB9aB1F2E61bE3"},
                "SpiritSwap": {"v2": "0xEF45d134b73241eDa7703fa787148D9C9F4950b0"},
            },
            "blast": {
                "Thruster": {"v2": "0xb4A7D971D0ADea1c73198C97d7ab3f9CE4aaFA13"},
            },
        }

    @property
    def uniswap_v4_config(self) -> Dict[str, Dict]:
        """Uniswap V4 pool manager by chain."""
        return {
            "ethereum": {
                "pool_manager": "0x000000000004444c5dc75cB358380D2e3dE08A90",
                "deployment_block": 21688329,
            },
            "base": {
                "pool_manager": "0x498581fF718922c3f8e6A244956aF099B2652b2b",
                "deployment_block": 25350988,
            },
            "arbitrum": {
                "pool_manager": "0x360E68faCcca8cA495c1B759Fd9EEe466db9FB32",
                "deployment_block": 297842872,
            },
        }

    @property
    def known_lockers(self) -> Dict[str, List[str]]:
        """Known LP locker contracts by chain."""
        return {
            "ethereum": [
                "0x663A5C229c09b049E36dCc11a9B0d4a8Eb9db214",  # Unicrypt
                "0xDba68f07d1b7Ca219f78ae8582C213d975c25cAf",  # Unicrypt V3
                "0x71B5759d73262FBb223956913ecF4ecC51057641",  # PinkLock
                "0xE2fE530C047f2d85298b07D9333C05737f1435fB",  # Team Finance
            ],
            "base": ["0x71B5759d73262FBb223956913ecF4ecC51057641"],
            "bsc": [
                "0xc765bddB93b0D1c1A88282BA0fa6B2d00E3e0c83",
                "0x407993575c91ce7643a4d4cCACc9A98c36eE1BBE",
            ],
        }

    @property
    def known_pairs(self) -> Dict[str, List[KnownPair]]:
        """Hardcoded major-token pairs used when factory and log scans miss."""
        return {
            "ethereum": [
                KnownPair(
                    token="0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce",  # SHIB
                    pair="0x811beed0119b4afce20d2583eb608c6f7af1954f",
                    quote="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",  # WETH
                    dex="Uniswap",
                ),
            ],
        }

    def get_factories(self, chain: str) -> List[FactorySpec]:
        """Get every V2 and V3 factory on a chain, V2 first per DEX."""
        factories = []
        for dex, entry in self.dex_factories.get(chain, {}).items():
            for family in ("v2", "v3"):
                address = entry.get(family)
                if address:
                    factories.append(
                        FactorySpec(
                            dex=dex,
                            family=family,
                            address=address,
                            deployment_block=entry.get(f"{family}_deployment_block", 0),
                        )
                    )
        return factories

    def get_pool_manager(self, chain: str) -> Optional[PoolManagerSpec]:
        """Get the V4 pool manager for a chain, if deployed there."""
        config = self.uniswap_v4_config.get(chain)
        if not config:
            return None
        return PoolManagerSpec(
            dex="Uniswap",
            address=config["pool_manager"],
            deployment_block=config.get("deployment_block", 0),
        )

    def get_lockers(self, chain: str) -> List[str]:
        """Get known LP locker contracts for a chain."""
        return list(self.known_lockers.get(chain, []))

    def get_known_pairs(self, chain: str) -> List[KnownPair]:
        """Get hardcoded pairs for a chain."""
        return list(self.known_pairs.get(chain, []))

    def get_dex_coverage(self, chain: str) -> List[str]:
        """Get human readable labels of the DEX deployments covered on a chain."""
        coverage = [factory.label for factory in self.get_factories(chain)]
        manager = self.get_pool_manager(chain)
        if manager:
            coverage.append(f"{manager.dex} V4")
        return coverage

    def get_event_hash(self, event_type: str) -> str:
        """Topic0 for a pool creation event: v2_pair_created, v3_pool_created or v4_initialize."""
        topics = {
            "v2_pair_created": self.UNISWAP_V2_PAIR_CREATED_EVENT,
            "v3_pool_created": self.UNISWAP_V3_POOL_CREATED_EVENT,
            "v4_initialize": self.UNISWAP_V4_INITIALIZED_EVENT,
        }
        try:
            return topics[event_type]
        except KeyError:
            raise ConfigError(f"Unknown event type: {event_type}")
