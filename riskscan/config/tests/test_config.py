"""
Test suite for the centralized configuration system.

Tests configuration loading, validation, chain resolution and the
immutable per-chain settings snapshot.
"""

import dataclasses

import pytest

from riskscan.config import (
    BaseConfig,
    ChainConfig,
    ConfigError,
    ConfigManager,
    ScanConfig,
    get_config,
    reload_config,
)

SUPPORTED = ["ethereum", "base", "bsc", "polygon", "arbitrum", "optimism", "avalanche", "fantom", "blast"]


class TestConfigurationSystem:
    """Test suite for configuration system."""

    @pytest.fixture(scope="class")
    def config(self):
        """Provide configuration instance for tests."""
        return get_config()

    def test_config_loads_successfully(self, config):
        """Test that configuration loads without errors."""
        assert config is not None
        assert config.environment in ["local", "dev", "staging", "production"]
        assert config.validate_configuration() is True

    @pytest.mark.parametrize("chain_name", SUPPORTED)
    def test_chain_configurations(self, config, chain_name):
        """Test every supported chain has ids, explorer and endpoints."""
        chain = config.chains.get_chain_config(chain_name)

        assert isinstance(chain["chain_id"], int) and chain["chain_id"] > 0
        assert chain["explorer_url"].startswith("https://")
        assert chain["wrapped_native"].startswith("0x") and len(chain["wrapped_native"]) == 42

        endpoints = config.chains.get_endpoints(chain_name)
        assert endpoints
        for endpoint in endpoints:
            assert endpoint.url.startswith(("http://", "https://"))
            assert endpoint.tier in (1, 2, 3)
            assert endpoint.timeout > 0

    @pytest.mark.parametrize("selector,expected", [
        ("ETH", "ethereum"),
        ("1", "ethereum"),
        ("8453", "base"),
        (" arb ", "arbitrum"),
        ("Polygon", "polygon"),
        (56, "bsc"),
    ])
    def test_alias_resolution(self, config, selector, expected):
        """Test names, ids and abbreviations resolve case-insensitively."""
        assert config.chains.resolve_chain_key(selector) == expected

    def test_invalid_chain(self, config):
        """Test that unknown chains raise ConfigError."""
        with pytest.raises(ConfigError, match="Unsupported chain"):
            config.chains.get_chain_config("invalid_chain")

    def test_event_hashes(self, config):
        """Test that event hashes are properly configured."""
        for event_type in ("v2_pair_created", "v3_pool_created", "v4_initialize"):
            event_hash = config.protocols.get_event_hash(event_type)
            assert event_hash.startswith("0x")
            assert len(event_hash) == 66

        with pytest.raises(ConfigError, match="Unknown event type"):
            config.protocols.get_event_hash("erc20_transfer")

    def test_factories_are_tagged_by_family(self, config):
        """Test factory specs carry a family and a deployment block."""
        factories = config.protocols.get_factories("ethereum")

        assert {factory.family for factory in factories} == {"v2", "v3"}
        for factory in factories:
            assert len(factory.address) == 42
            assert factory.deployment_block >= 0


class TestChainOverrides:
    """Test environment driven chain settings."""

    def test_private_rpc_is_first_tier_one_endpoint(self):
        chains = ChainConfig(ETHEREUM_RPC_URL="https://private.example")

        endpoints = chains.get_endpoints("eth")

        assert endpoints[0].url == "https://private.example"
        assert endpoints[0].tier == 1
        assert len(endpoints) == len(ChainConfig(ETHEREUM_RPC_URL="").get_endpoints("eth")) + 1

    def test_default_chain(self):
        assert ChainConfig(DEFAULT_CHAIN="").default_chain == "ethereum"
        assert ChainConfig(DEFAULT_CHAIN="8453").default_chain == "base"

    def test_identifiers(self):
        identifiers = ChainConfig().get_identifiers("ethereum")

        assert identifiers[0] == "ethereum"
        assert {"eth", "mainnet", "1"} <= set(identifiers)


class TestValidation:
    """Test configuration validation and env helpers."""

    def test_invalid_environment(self):
        with pytest.raises(ConfigError, match="Invalid environment"):
            BaseConfig(ENVIRONMENT="qa")

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError, match="Invalid log level"):
            BaseConfig(LOG_LEVEL="LOUD")

    def test_env_helpers(self, monkeypatch):
        monkeypatch.setenv("RISKSCAN_TEST_INT", "42")
        monkeypatch.setenv("RISKSCAN_TEST_BAD_INT", "forty-two")
        monkeypatch.setenv("RISKSCAN_TEST_BOOL", "Yes")
        monkeypatch.setenv("RISKSCAN_TEST_LIST", "a, b,,c")

        assert BaseConfig.get_env_int("RISKSCAN_TEST_INT") == 42
        assert BaseConfig.get_env_bool("RISKSCAN_TEST_BOOL") is True
        assert BaseConfig.get_env_list("RISKSCAN_TEST_LIST") == ["a", "b", "c"]
        with pytest.raises(ConfigError, match="must be an integer"):
            BaseConfig.get_env_int("RISKSCAN_TEST_BAD_INT")
        with pytest.raises(ConfigError, match="is not set"):
            BaseConfig.get_env("RISKSCAN_TEST_MISSING", required=True)

    def test_env_bool_and_list_defaults(self, monkeypatch):
        monkeypatch.delenv("RISKSCAN_TEST_UNSET", raising=False)
        monkeypatch.setenv("RISKSCAN_TEST_BAD_BOOL", "maybe")

        assert BaseConfig.get_env_bool("RISKSCAN_TEST_UNSET", True) is True
        assert BaseConfig.get_env_list("RISKSCAN_TEST_UNSET", ["x"]) == ["x"]
        with pytest.raises(ConfigError, match="must be a boolean"):
            BaseConfig.get_env_bool("RISKSCAN_TEST_BAD_BOOL")

    def test_scan_deadline(self):
        assert ScanConfig(SCAN_TIMEOUT_SECONDS=0).scan_deadline is None
        assert ScanConfig(SCAN_TIMEOUT_SECONDS=30).scan_deadline == 30

    def test_negative_scan_values(self):
        with pytest.raises(ConfigError, match="SCAN_TIMEOUT_SECONDS"):
            ScanConfig(SCAN_TIMEOUT_SECONDS=-1)
        with pytest.raises(ConfigError, match="LOG_SCAN_LOOKBACK_BLOCKS"):
            ScanConfig(LOG_SCAN_LOOKBACK_BLOCKS=-10)

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ConfigError, match="LOG_SCAN_CHUNK_BLOCKS"):
            ScanConfig(LOG_SCAN_CHUNK_BLOCKS=0)

    def test_env_is_read_per_instance(self, monkeypatch):
        monkeypatch.setenv("LOG_SCAN_CHUNK_BLOCKS", "2500")
        monkeypatch.setenv("ETHEREUM_RPC_URL", "https://late.example")

        assert ScanConfig().LOG_SCAN_CHUNK_BLOCKS == 2500
        assert ChainConfig().get_endpoints("ethereum")[0].url == "https://late.example"

    def test_reload_config_picks_up_environment(self, monkeypatch):
        monkeypatch.setenv("SCAN_TIMEOUT_SECONDS", "45")
        try:
            assert reload_config().scan.scan_deadline == 45
        finally:
            monkeypatch.undo()
            reload_config()


class TestChainSettings:
    """Test the immutable per-chain snapshot."""

    def test_snapshot_contents(self, ethereum_settings):
        assert ethereum_settings.key == "ethereum"
        assert ethereum_settings.chain_id == 1
        assert ethereum_settings.endpoints
        assert ethereum_settings.quote_tokens[0] == ethereum_settings.wrapped_native
        assert "Uniswap V4" in ethereum_settings.dex_coverage
        assert "eth" in ethereum_settings.identifiers

    def test_snapshot_is_frozen(self, ethereum_settings):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ethereum_settings.chain_id = 2

    def test_stablecoin_lookup_is_case_insensitive(self, ethereum_settings):
        usdc = ethereum_settings.get_stablecoin("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")

        assert (usdc.symbol, usdc.decimals) == ("USDC", 6)
        assert ethereum_settings.get_stablecoin(None) is None

    def test_explorer_urls(self, ethereum_settings):
        address = "0x1111111111111111111111111111111111111111"

        assert ethereum_settings.address_url(address) == f"https://etherscan.io/address/{address}"
        assert ethereum_settings.token_url(address) == f"https://etherscan.io/token/{address}"

    def test_chain_without_endpoints(self, monkeypatch):
        manager = ConfigManager()
        monkeypatch.setattr(manager.chains, "get_endpoints", lambda chain_name: [])

        with pytest.raises(ConfigError, match="No RPC endpoint configured"):
            manager.get_chain_settings("base")

    def test_unknown_chain(self):
        with pytest.raises(ConfigError, match="Unsupported chain"):
            ConfigManager().get_chain_settings("solana")
