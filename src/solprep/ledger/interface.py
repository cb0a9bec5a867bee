"""
Abstract interface for Solana ledger access.

Defines the contract for the remote lookups the transaction builder needs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Union

import structlog

from solders.hash import Hash
from solders.pubkey import Pubkey

from solprep.config import Commitment
from solprep.core.address import short
from solprep.core.programs import (
    SYSTEM_PROGRAM_ID,
    TokenProgram,
    derive_associated_token_address,
)
from solprep.errors import AddressResolutionError

logger = structlog.get_logger(__name__)


# ============================================================================
# Account lookup result
# ============================================================================

@dataclass(frozen=True)
class AccountFound:
    """The account exists on-chain."""
    owner: Pubkey
    data: bytes = b""
    lamports: int = 0


@dataclass(frozen=True)
class AccountNotFound:
    """The account has never been created (or was closed)."""
    pass


@dataclass(frozen=True)
class AccountLookupFailed:
    """The lookup itself failed; the account state is unknown."""
    error: Exception


AccountLookup = Union[AccountFound, AccountNotFound, AccountLookupFailed]


@dataclass(frozen=True)
class AssociatedTokenResult:
    """Resolved token account for an owner and mint."""
    address: Pubkey
    is_unregistered: bool


# Byte range of the mint inside an SPL token account
_MINT_OFFSET = slice(0, 32)


class LedgerInterface(ABC):
    """
    Abstract interface for Solana RPC access.

    This interface defines all ledger operations needed by the builder:
    - Recent blockhash
    - Fee estimation
    - Account lookups
    - Raw transaction submission and simulation
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the RPC node.

        Raises:
            LedgerConnectionError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the RPC node."""
        pass

    async def __aenter__(self) -> "LedgerInterface":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    @abstractmethod
    async def get_latest_blockhash(
        self,
        commitment: Optional[Commitment] = None,
    ) -> Optional[Hash]:
        """
        Get the latest blockhash.

        Returns:
            The blockhash, or None if the node did not supply one
        """
        pass

    @abstractmethod
    async def get_fee_for_message(
        self,
        serialized_message: bytes,
        commitment: Optional[Commitment] = None,
    ) -> Optional[int]:
        """
        Get the fee the network would charge for a message.

        Args:
            serialized_message: Message bytes exactly as they would be signed

        Returns:
            Fee in lamports, or None if the node has no estimate
        """
        pass

    @abstractmethod
    async def get_account_info(
        self,
        address: Pubkey,
        commitment: Optional[Commitment] = None,
    ) -> AccountLookup:
        """
        Look up an account.

        Lookup problems are reported as AccountLookupFailed, never raised.
        """
        pass

    @abstractmethod
    async def send_raw_transaction(self, raw: bytes) -> str:
        """
        Submit a signed transaction.

        Returns:
            Transaction signature (base58)

        Raises:
            TransactionSubmitError: If submission fails
        """
        pass

    @abstractmethod
    async def simulate_raw_transaction(self, raw: bytes) -> dict:
        """
        Simulate a transaction without submitting it.

        Returns:
            Simulation result (err, logs, unitsConsumed)
        """
        pass

    async def resolve_associated_token_address(
        self,
        mint: Pubkey,
        owner_wallet: Pubkey,
        program: TokenProgram,
        commitment: Optional[Commitment] = None,
    ) -> AssociatedTokenResult:
        """
        Resolve the token account that holds mint for owner_wallet.

        owner_wallet may already be a token account for mint, in which case it
        is returned as is. Otherwise the associated token address is derived
        and checked for existence.

        Raises:
            AddressResolutionError: If owner_wallet is owned by an unexpected program
            Exception: The lookup error when the ledger could not be queried
        """
        lookup = await self.get_account_info(owner_wallet, commitment)

        if isinstance(lookup, AccountLookupFailed):
            raise lookup.error

        if isinstance(lookup, AccountNotFound):
            address = derive_associated_token_address(owner_wallet, mint, program)
        elif lookup.owner == program.program_id and _token_account_mint(lookup.data) == mint:
            address = owner_wallet
        elif lookup.owner == SYSTEM_PROGRAM_ID:
            address = derive_associated_token_address(owner_wallet, mint, program)
        else:
            raise AddressResolutionError(
                f"Cannot derive a token account for {owner_wallet}: owned by {lookup.owner}"
            )

        is_unregistered = False
        if address != owner_wallet:
            token_lookup = await self.get_account_info(address, commitment)
            if isinstance(token_lookup, AccountLookupFailed):
                raise token_lookup.error
            is_unregistered = not (
                isinstance(token_lookup, AccountFound)
                and token_lookup.owner == program.program_id
            )

        logger.debug(
            "token_account_resolved",
            owner=short(owner_wallet),
            token_account=short(address),
            unregistered=is_unregistered,
        )

        return AssociatedTokenResult(address=address, is_unregistered=is_unregistered)


def _token_account_mint(data: bytes) -> Optional[Pubkey]:
    """Mint stored in a token account's data, if the data is long enough."""
    if len(data) < _MINT_OFFSET.stop:
        return None
    return Pubkey.from_bytes(bytes(data[_MINT_OFFSET]))


class LedgerConnectionError(Exception):
    """Raised when connection to the RPC node fails."""
    pass


class LedgerRequestError(Exception):
    """Raised when an RPC request fails or returns a JSON-RPC error."""

    def __init__(self, message: str, error_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.error_code = error_code
        self.data = data


class TransactionSubmitError(Exception):
    """Raised when transaction submission fails."""

    def __init__(self, message: str, error_code: Optional[int] = None):
        super().__init__(message)
        self.error_code = error_code
