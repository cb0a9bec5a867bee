"""
Configuration management for transaction preparation.

Supports configuration via environment variables and .env files.
"""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NetworkType(str, Enum):
    """Solana clusters."""
    MAINNET = "mainnet-beta"
    DEVNET = "devnet"
    TESTNET = "testnet"
    LOCALNET = "localnet"


class RpcProvider(str, Enum):
    """Supported backends for ledger access."""
    HTTP = "http"
    SOLANA_PY = "solana-py"


class Commitment(str, Enum):
    """Commitment levels accepted by the RPC node."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


class PrepConfig(BaseSettings):
    """
    Configuration settings for the transaction builder.

    All settings can be configured via environment variables with the SOLPREP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="SOLPREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Network settings
    network: NetworkType = Field(
        default=NetworkType.DEVNET,
        description="Solana cluster to connect to"
    )

    # RPC settings
    rpc_provider: RpcProvider = Field(
        default=RpcProvider.HTTP,
        description="Backend used for ledger queries"
    )
    rpc_url: Optional[str] = Field(
        default=None,
        description="Custom RPC endpoint (optional)"
    )
    commitment: Optional[Commitment] = Field(
        default=None,
        description="Commitment for blockhash, fee and account lookups (node default if unset)"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every RPC request"
    )

    # Preparation settings
    concurrent_lookups: bool = Field(
        default=True,
        description="Resolve independent token accounts concurrently"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @property
    def endpoint(self) -> str:
        """Get the RPC URL for the configured network."""
        if self.rpc_url:
            return self.rpc_url

        network_urls = {
            NetworkType.MAINNET: "https://api.mainnet-beta.solana.com",
            NetworkType.DEVNET: "https://api.devnet.solana.com",
            NetworkType.TESTNET: "https://api.testnet.solana.com",
            NetworkType.LOCALNET: "http://127.0.0.1:8899",
        }
        return network_urls.get(self.network, "https://api.devnet.solana.com")


# Global config instance
_config: Optional[PrepConfig] = None


def get_config() -> PrepConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = PrepConfig()
    return _config


def set_config(config: PrepConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
