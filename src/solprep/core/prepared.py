"""
Prepared transaction records.

Immutable results returned by the transaction builder, ready to be sent or
simulated.
"""

import base64
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from solprep.core.message import required_signers


class _PreparedBase:
    """Signature set helpers shared by legacy and versioned records."""

    transaction: object
    signers: Tuple[Keypair, ...]
    expected_fee: Optional[int]

    @property
    def message(self):
        return self.transaction.message

    @property
    def recent_blockhash(self) -> Hash:
        return self.message.recent_blockhash

    @property
    def required_signers(self) -> Tuple[Pubkey, ...]:
        return required_signers(self.message)

    @property
    def signatures(self) -> Dict[Pubkey, Signature]:
        """Signature set keyed by signer address; empty slots are left out."""
        empty = Signature.default()
        return {
            pubkey: signature
            for pubkey, signature in zip(self.required_signers, self.transaction.signatures)
            if signature != empty
        }

    @property
    def is_signed(self) -> bool:
        """True when every required signer has exactly one signature."""
        return set(self.signatures) == set(self.required_signers)

    def serialize(self) -> bytes:
        """Wire bytes of the transaction."""
        return bytes(self.transaction)

    def to_base64(self) -> str:
        return base64.b64encode(self.serialize()).decode("ascii")


@dataclass(frozen=True)
class PreparedTransaction(_PreparedBase):
    """
    A legacy transaction prepared for sending or simulation.

    Attributes:
        transaction: The (possibly partially) signed transaction
        signers: Keypairs that signed it
        expected_fee: Fee in lamports, None if estimation failed
    """

    transaction: Transaction
    signers: Tuple[Keypair, ...] = ()
    expected_fee: Optional[int] = None


@dataclass(frozen=True)
class PreparedVersionedTransaction(_PreparedBase):
    """A v0 transaction prepared for sending or simulation."""

    transaction: VersionedTransaction
    signers: Tuple[Keypair, ...] = ()
    expected_fee: Optional[int] = None
