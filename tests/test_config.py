"""
Test suite for configuration.
"""

import pytest

from solprep.config import Commitment, NetworkType, PrepConfig, RpcProvider, get_config, set_config


class TestPrepConfig:
    """Tests for PrepConfig."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SOLPREP_NETWORK", raising=False)
        config = PrepConfig(_env_file=None)

        assert config.network == NetworkType.DEVNET
        assert config.rpc_provider == RpcProvider.HTTP
        assert config.commitment is None
        assert config.concurrent_lookups is True

    @pytest.mark.parametrize("network,url", [
        (NetworkType.MAINNET, "https://api.mainnet-beta.solana.com"),
        (NetworkType.DEVNET, "https://api.devnet.solana.com"),
        (NetworkType.TESTNET, "https://api.testnet.solana.com"),
        (NetworkType.LOCALNET, "http://127.0.0.1:8899"),
    ])
    def test_endpoint_per_network(self, network, url):
        config = PrepConfig(network=network, rpc_url=None, _env_file=None)

        assert config.endpoint == url

    def test_rpc_url_overrides_network(self):
        config = PrepConfig(network=NetworkType.MAINNET, rpc_url="http://my-node:8899", _env_file=None)

        assert config.endpoint == "http://my-node:8899"

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SOLPREP_NETWORK", "testnet")
        monkeypatch.setenv("SOLPREP_COMMITMENT", "finalized")
        monkeypatch.setenv("SOLPREP_CONCURRENT_LOOKUPS", "false")

        config = PrepConfig(_env_file=None)

        assert config.network == NetworkType.TESTNET
        assert config.commitment == Commitment.FINALIZED
        assert config.concurrent_lookups is False

    def test_set_config(self, test_config):
        set_config(test_config)

        assert get_config() is test_config
