"""
Message assembly.

A MessageDraft holds the ordered instructions, the fee payer and the recent
blockhash of a transaction until it is compiled into a solders message.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message, MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class MessageDraft:
    """
    Unsigned message under construction.

    Attributes:
        instructions: Instructions in execution order
        fee_payer: Address debited for the network fee
        recent_blockhash: Freshness anchor, None until fetched from the ledger
    """

    instructions: Tuple[Instruction, ...]
    fee_payer: Pubkey
    recent_blockhash: Optional[Hash] = None

    @classmethod
    def create(
        cls,
        instructions: Sequence[Instruction],
        fee_payer: Pubkey,
    ) -> "MessageDraft":
        """Start a draft with no blockhash."""
        return cls(instructions=tuple(instructions), fee_payer=fee_payer)

    @property
    def is_anchored(self) -> bool:
        """True once a non-empty blockhash is attached."""
        return self.recent_blockhash is not None and self.recent_blockhash != Hash.default()

    def with_blockhash(self, blockhash: Hash) -> "MessageDraft":
        """Return a copy anchored to the given blockhash."""
        return replace(self, recent_blockhash=blockhash)

    def compile(self) -> Message:
        """Compile to a legacy message."""
        if self.is_anchored:
            return Message.new_with_blockhash(
                list(self.instructions),
                self.fee_payer,
                self.recent_blockhash,
            )
        return Message(list(self.instructions), self.fee_payer)

    def compile_v0(self) -> MessageV0:
        """Compile to a v0 message without address lookup tables."""
        return MessageV0.try_compile(
            self.fee_payer,
            list(self.instructions),
            [],
            self.recent_blockhash or Hash.default(),
        )


def serialize_message(message) -> bytes:
    """Serialize a legacy or v0 message to the bytes that are signed and fee-estimated."""
    if isinstance(message, MessageV0):
        return to_bytes_versioned(message)
    return bytes(message)


def required_signers(message) -> Tuple[Pubkey, ...]:
    """Addresses whose signatures the message requires, in signature slot order."""
    count = message.header.num_required_signatures
    return tuple(message.account_keys[:count])
