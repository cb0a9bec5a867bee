"""
Solana Transaction Preparation

Client-side builder for Solana transactions. Turns high-level intents
(send SOL, send an SPL token) into anchored, fee-estimated and optionally
signed transactions ready for sending or simulation.
"""

__version__ = "0.1.0"

from solprep.core.prepared import PreparedTransaction, PreparedVersionedTransaction
from solprep.core.programs import TokenProgram
from solprep.errors import (
    AddressResolutionError,
    AnchorUnavailableError,
    InvalidAccountInfoError,
    SelfTransferError,
    TransactionBuildError,
    UnsupportedTokenProgramError,
)
from solprep.tx.builder import TransactionBuilder

__all__ = [
    "TransactionBuilder",
    "PreparedTransaction",
    "PreparedVersionedTransaction",
    "TokenProgram",
    "TransactionBuildError",
    "SelfTransferError",
    "InvalidAccountInfoError",
    "AnchorUnavailableError",
    "AddressResolutionError",
    "UnsupportedTokenProgramError",
]
