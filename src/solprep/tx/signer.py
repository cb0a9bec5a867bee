"""
Transaction signing.

Signatures are collected into a set keyed by signer address, so the order in
which keypairs are supplied never changes the resulting transaction.
"""

from typing import Dict, Iterable, List, Union

import structlog

from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message, MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from solprep.core.address import short
from solprep.core.message import required_signers, serialize_message
from solprep.errors import AnchorUnavailableError, TransactionBuildError

logger = structlog.get_logger(__name__)

SignatureSet = Dict[Pubkey, Signature]


def sign_message(
    message: Union[Message, MessageV0],
    signers: Iterable[Keypair],
) -> SignatureSet:
    """
    Sign the serialized message with every keypair.

    Args:
        message: Compiled message with a recent blockhash
        signers: Keypairs authorized to sign

    Returns:
        Signature set keyed by signer address

    Raises:
        AnchorUnavailableError: If the message has no recent blockhash
        TransactionBuildError: If a keypair is not a required signer
    """
    if message.recent_blockhash == Hash.default():
        raise AnchorUnavailableError("Cannot sign a message without a recent blockhash")

    required = required_signers(message)
    payload = serialize_message(message)
    signatures: SignatureSet = {}

    for keypair in signers:
        pubkey = keypair.pubkey()
        if pubkey not in required:
            raise TransactionBuildError(f"{pubkey} is not a required signer of this message")
        signatures[pubkey] = keypair.sign_message(payload)

    logger.debug(
        "message_signed",
        signers=[short(pubkey) for pubkey in signatures],
        required=len(required),
    )

    return signatures


def _signature_slots(message, signatures: SignatureSet) -> List[Signature]:
    empty = Signature.default()
    return [signatures.get(pubkey, empty) for pubkey in required_signers(message)]


def build_transaction(message: Message, signatures: SignatureSet) -> Transaction:
    """Place the signature set into the message's signature slots."""
    return Transaction.populate(message, _signature_slots(message, signatures))


def build_versioned_transaction(
    message: Union[Message, MessageV0],
    signatures: SignatureSet,
) -> VersionedTransaction:
    """Versioned counterpart of build_transaction."""
    return VersionedTransaction.populate(message, _signature_slots(message, signatures))
