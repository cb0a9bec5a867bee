"""
Ledger Integration Layer.

Provides abstracted access to the Solana RPC for blockhashes, fees and
account lookups. Supports a plain JSON-RPC backend and a solana-py backend.
"""

from typing import Optional

from solprep.config import PrepConfig, RpcProvider, get_config
from solprep.ledger.interface import (
    AccountFound,
    AccountLookup,
    AccountLookupFailed,
    AccountNotFound,
    AssociatedTokenResult,
    LedgerConnectionError,
    LedgerInterface,
    LedgerRequestError,
    TransactionSubmitError,
)
from solprep.ledger.rpc import HttpRpcAdapter
from solprep.ledger.solana_client import SolanaPyAdapter

__all__ = [
    "AccountFound",
    "AccountLookup",
    "AccountLookupFailed",
    "AccountNotFound",
    "AssociatedTokenResult",
    "LedgerConnectionError",
    "LedgerInterface",
    "LedgerRequestError",
    "TransactionSubmitError",
    "HttpRpcAdapter",
    "SolanaPyAdapter",
    "create_ledger",
]


def create_ledger(config: Optional[PrepConfig] = None) -> LedgerInterface:
    """Create the ledger adapter selected by the configuration."""
    config = config or get_config()
    if config.rpc_provider == RpcProvider.SOLANA_PY:
        return SolanaPyAdapter(config)
    return HttpRpcAdapter(config)
