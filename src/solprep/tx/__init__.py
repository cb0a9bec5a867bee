"""
Transaction module.

Handles instruction selection, signing and transaction preparation.
"""

from solprep.tx.builder import TransactionBuilder
from solprep.tx.signer import sign_message

__all__ = [
    "TransactionBuilder",
    "sign_message",
]
