"""
Chain-specific configuration for riskscan.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .base import BaseConfig, ConfigError


@dataclass(frozen=True)
class Endpoint:
    """
    A remote node endpoint.

    Attributes:
        url: JSON-RPC URL
        tier: Priority tier, 1 (best) to 3 (worst)
        timeout: Per-call timeout in seconds
        label: Optional human readable name
    """

    url: str
    tier: int
    timeout: float
    label: Optional[str] = None

    def __post_init__(self):
        if self.tier not in (1, 2, 3):
            raise ConfigError(f"Endpoint tier must be 1, 2 or 3, got: {self.tier}")
        if self.timeout <= 0:
            raise ConfigError(f"Endpoint timeout must be positive, got: {self.timeout}")

    @property
    def name(self) -> str:
        return self.label or self.url


@dataclass(frozen=True)
class Stablecoin:
    """A USD stablecoin with known decimal precision."""

    address: str
    symbol: str
    decimals: int


# Chain aliases for user convenience
CHAIN_ALIASES: Dict[str, str] = {
    "eth": "ethereum",
    "mainnet": "ethereum",
    "1": "ethereum",
    "8453": "base",
    "bnb": "bsc",
    "56": "bsc",
    "matic": "polygon",
    "137": "polygon",
    "arb": "arbitrum",
    "42161": "arbitrum",
    "op": "optimism",
    "10": "optimism",
    "avax": "avalanche",
    "43114": "avalanche",
    "ftm": "fantom",
    "250": "fantom",
    "81457": "blast",
}


def _endpoints(*specs) -> List[Endpoint]:
    return [Endpoint(url=url, tier=tier, timeout=timeout, label=label) for url, tier, timeout, label in specs]


@dataclass
class ChainConfig(BaseConfig):
    """Chain-specific configuration for different blockchains."""

    # Default chain settings (empty means first configured chain)
    DEFAULT_CHAIN: str = field(default_factory=lambda: BaseConfig.get_env("DEFAULT_CHAIN", ""))

    # Optional private RPC URLs, prepended as tier 1 endpoints
    ETHEREUM_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("ETHEREUM_RPC_URL", ""))
    BASE_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("BASE_RPC_URL", ""))
    BSC_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("BSC_RPC_URL", ""))
    POLYGON_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("POLYGON_RPC_URL", ""))
    ARBITRUM_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("ARBITRUM_RPC_URL", ""))
    OPTIMISM_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("OPTIMISM_RPC_URL", ""))
    AVALANCHE_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("AVALANCHE_RPC_URL", ""))
    FANTOM_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("FANTOM_RPC_URL", ""))
    BLAST_RPC_URL: str = field(default_factory=lambda: BaseConfig.get_env("BLAST_RPC_URL", ""))

    # Timeout applied to RPC URLs supplied through the environment
    PRIVATE_RPC_TIMEOUT: float = field(default_factory=lambda: BaseConfig.get_env_float("PRIVATE_RPC_TIMEOUT", 3.0))

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Get configuration for all supported chains."""
        return {
            "ethereum": {
                "name": "Ethereum",
                "chain_id": 1,
                "explorer_url": "https://etherscan.io",
                "endpoints": _endpoints(
                    ("https://ethereum-rpc.publicnode.com", 1, 3.0, "PublicNode"),
                    ("https://eth.llamarpc.com", 2, 4.0, "LlamaRPC"),
                    ("https://eth.public.nanopool.org", 2, 5.0, "Nanopool"),
                    ("https://eth.drpc.org", 3, 8.0, "dRPC"),
                ),
                "wrapped_native": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
                "stablecoins": [
                    Stablecoin("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USDC", 6),
                    Stablecoin("0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT", 6),
                    Stablecoin("0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI", 18),
                ],
            },
            "base": {
                "name": "Base",
                "chain_id": 8453,
                "explorer_url": "https://basescan.org",
                "endpoints": _endpoints(
                    ("https://base-rpc.publicnode.com", 1, 3.0, "PublicNode"),
                    ("https://base.llamarpc.com", 2, 4.0, "LlamaRPC"),
                    ("https://mainnet.base.org", 2, 5.0, "Base Official"),
                    ("https://base.drpc.org", 3, 8.0, "dRPC"),
                ),
                "wrapped_native": "0x4200000000000000000000000000000000000006",
                "stablecoins": [
                    Stablecoin("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "USDC", 6),
                    Stablecoin("0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", "DAI", 18),
                ],
            },
            "bsc": {
                "name": "BSC",
                "chain_id": 56,
                "explorer_url": "https://bscscan.com",
                "endpoints": _endpoints(
                    ("https://bsc-rpc.publicnode.com", 1, 3.0, "PublicNode"),
                    ("https://bsc.llamarpc.com", 2, 4.0, "LlamaRPC"),
                    ("https://bsc-dataseed1.binance.org", 2, 5.0, "Binance"),
                    ("https://bsc.drpc.org", 3, 8.0, "dRPC"),
                ),
                "wrapped_native": "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c",
                "stablecoins": [
                    Stablecoin("0x55d398326f99059fF775485246999027B3197955", "USDT", 18),
                    Stablecoin("0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d", "USDC", 18),
                    Stablecoin("0xe9e7CEA3DedcA5984780Bafc599bD69ADd087D56", "BUSD", 18),
                ],
            },
            "polygon": {
                "name": "Polygon",
                "chain_id": 137,
                "explorer_url": "https://polygonscan.com",
                "endpoints": _endpoints(
                    ("https://polygon-bor-rpc.publicnode.com", 1, 3.0, "PublicNode"),
                    ("https://polygon.llamarpc.com", 2, 5.0, "LlamaRPC"),
                    ("https://polygon-rpc.com", 3, 5.0, "Polygon RPC"),
                ),
                "wrapped_native": "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270",
                "stablecoins": [
                    Stablecoin("0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", "USDC", 6),
                    Stablecoin("0xc2132D05D31c914a87C6611C10748AEb04B58e8F", "USDT", 6),
                ],
            },
            "arbitrum": {
                "name": "Arbitrum",
                "chain_id": 42161,
                "explorer_url": "https://arbiscan.io",
                "endpoints": _endpoints(
                    ("https://arbitrum-one-rpc.publicnode.com", 1, 3.0, "PublicNode"),
                    ("https://arbitrum.llamarpc.com", 2, 5.0, "LlamaRPC"),
                    ("https://arb1.arbitrum.io/rpc", 3, 5.0, "Arbitrum Official"),
                ),
                "wrapped_native": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
                "stablecoins": [
                    Stablecoin("0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "USDC", 6),
                    Stablecoin("0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "USDT", 6),
                ],
            },
            "optimism": {
                "name": "Optimism",
                "chain_id": 10,
                "explorer_url": "https://optimistic.etherscan.io",
                "endpoints": _endpoints(
                    ("https://optimism-rpc.publicnode.com", 1, 3.0, "PublicNode"),
                    ("https://optimism.llamarpc.com", 2, 5.0, "LlamaRPC"),
                    ("https://mainnet.optimism.io", 3, 5.0, "Optimism Official"),
                ),
                "wrapped_native": "0x4200000000000000000000000000000000000006",
                "stablecoins": [
                    Stablecoin("0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85", "USDC", 6),
                    Stablecoin("0x94b008aA00579c1307B0EF2c499aD98a8ce58e58", "USDT", 6),
                ],
            },
            "avalanche": {
                "name": "Avalanche",
                "chain_id": 43114,
                "explorer_url": "https://snowtrace.io",
                "endpoints": _endpoints(
                    ("https://avalanche.llamarpc.com", 2, 5.0, "LlamaRPC"),
                    ("https://api.avax.network/ext/bc/C/rpc", 3, 5.0, "Avalanche Official"),
                ),
                "wrapped_native": "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7",
                "stablecoins": [
                    Stablecoin("0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E", "USDC", 6),
                    Stablecoin("0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7", "USDT", 6),
                ],
            },
            "fantom": {
                "name": "Fantom",
                "chain_id": 250,
                "explorer_url": "https://ftmscan.com",
                "endpoints": _endpoints(
                    ("https://rpc.ftm.tools", 2, 5.0, "Fantom Official"),
                    ("https://fantom-rpc.publicnode.com", 3, 5.0, "PublicNode"),
                ),
                "wrapped_native": "0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83",
                "stablecoins": [
                    Stablecoin("0x04068DA6C83AFCFA0e13ba15A6696662335D5B75", "USDC", 6),
                    Stablecoin("0x049d68029688eAbF473097a2fC38ef61633A3C7A", "fUSDT", 6),
                ],
            },
            "blast": {
                "name": "Blast",
                "chain_id": 81457,
                "explorer_url": "https://blastscan.io",
                "endpoints": _endpoints(
                    ("https://rpc.blast.io", 2, 5.0, "Blast Official"),
                    ("https://blast.blockpi.network/v1/rpc/public", 3, 8.0, "BlockPI"),
                ),
                "wrapped_native": "0x4300000000000000000000000000000000000004",
                "stablecoins": [
                    Stablecoin("0x4300000000000000000000000000000000000003", "USDB", 18),
                ],
            },
        }

    @property
    def default_chain(self) -> str:
        """Get the default chain key (first configured chain unless overridden)."""
        if self.DEFAULT_CHAIN:
            return self.resolve_chain_key(self.DEFAULT_CHAIN)
        return next(iter(self.supported_chains))

    def resolve_chain_key(self, chain_key) -> str:
        """
        Resolve a user supplied chain selector to a configured chain key.

        Accepts chain names, numeric chain ids and common abbreviations,
        case-insensitively.

        Raises:
            ConfigError: If the selector does not match a configured chain
        """
        raw = str(chain_key).strip().lower()
        resolved = CHAIN_ALIASES.get(raw, raw)
        if resolved not in self.supported_chains:
            available = ", ".join(self.supported_chains)
            raise ConfigError(f"Unsupported chain: '{raw}'. Available: {available}")
        return resolved

    def get_chain_config(self, chain_name: str) -> Dict:
        """Get configuration for a specific chain."""
        return self.supported_chains[self.resolve_chain_key(chain_name)]

    def get_private_rpc_url(self, chain_name: str) -> str:
        """Get the environment supplied RPC URL for a chain, if any."""
        key = self.resolve_chain_key(chain_name)
        return (getattr(self, f"{key.upper()}_RPC_URL", "") or "").strip()

    def get_endpoints(self, chain_name: str) -> List[Endpoint]:
        """Get the ordered endpoint list for a chain, private RPC first."""
        endpoints = list(self.get_chain_config(chain_name)["endpoints"])
        private_url = self.get_private_rpc_url(chain_name)
        if private_url:
            endpoints.insert(0, Endpoint(private_url, 1, self.PRIVATE_RPC_TIMEOUT, "Private RPC"))
        return endpoints

    def get_chain_id(self, chain_name: str) -> int:
        """Get chain ID for a specific chain."""
        return self.get_chain_config(chain_name)["chain_id"]

    def get_explorer_url(self, chain_name: str) -> str:
        """Get block explorer base URL for a specific chain."""
        return self.get_chain_config(chain_name)["explorer_url"]

    def get_identifiers(self, chain_name: str) -> List[str]:
        """Get every selector that resolves to the given chain."""
        key = self.resolve_chain_key(chain_name)
        return [key] + [alias for alias, target in CHAIN_ALIASES.items() if target == key]
