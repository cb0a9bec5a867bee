"""
Core data types: message drafts and prepared transactions.
"""

from solprep.core.address import parse_address
from solprep.core.message import MessageDraft, serialize_message
from solprep.core.prepared import PreparedTransaction, PreparedVersionedTransaction

__all__ = [
    "parse_address",
    "MessageDraft",
    "serialize_message",
    "PreparedTransaction",
    "PreparedVersionedTransaction",
]
