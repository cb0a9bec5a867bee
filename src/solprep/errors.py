"""
Errors raised while preparing transactions.

Policy rejections and fatal lookup failures derive from TransactionBuildError
so callers can catch the whole family at once.
"""

from typing import Optional


class TransactionBuildError(Exception):
    """Raised when a transaction cannot be prepared."""
    pass


class SelfTransferError(TransactionBuildError):
    """Raised when the destination resolves to the sender."""
    pass


class InvalidAccountInfoError(TransactionBuildError):
    """Raised when the destination account exists under an unexpected owner."""

    def __init__(self, message: str, owner: Optional[str] = None):
        super().__init__(message)
        self.owner = owner


class AnchorUnavailableError(TransactionBuildError):
    """Raised when no recent blockhash can be obtained for the message."""
    pass


class AddressResolutionError(TransactionBuildError):
    """Raised for malformed addresses or unresolvable associated token accounts."""
    pass


class UnsupportedTokenProgramError(TransactionBuildError):
    """Raised when a token program id is neither the Token nor the Token-2022 program."""
    pass
