"""
Pytest configuration and shared fixtures for the test suite.
"""

from typing import Dict, List, Optional, Tuple

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solprep.config import Commitment, NetworkType, PrepConfig, RpcProvider
from solprep.core.programs import SYSTEM_PROGRAM_ID, TokenProgram, derive_associated_token_address
from solprep.ledger.interface import (
    AccountFound,
    AccountLookup,
    AccountNotFound,
    LedgerInterface,
)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> PrepConfig:
    """Create a test configuration."""
    return PrepConfig(
        network=NetworkType.DEVNET,
        rpc_provider=RpcProvider.HTTP,
        rpc_url="http://rpc.test",
        commitment=Commitment.CONFIRMED,
        concurrent_lookups=True,
        log_level="DEBUG",
    )


# ============================================================================
# Test Data Generators
# ============================================================================

def token_account_data(mint: Pubkey, owner: Pubkey, amount: int = 0) -> bytes:
    """Build SPL token account data (mint, owner, amount, zero padding)."""
    data = bytes(mint) + bytes(owner) + amount.to_bytes(8, "little")
    return data + bytes(165 - len(data))


def system_account(lamports: int = 1_000_000_000) -> AccountFound:
    return AccountFound(owner=SYSTEM_PROGRAM_ID, lamports=lamports)


def token_account(mint: Pubkey, owner: Pubkey, program: TokenProgram = TokenProgram.TOKEN) -> AccountFound:
    return AccountFound(owner=program.program_id, data=token_account_data(mint, owner))


def program_ids(message) -> List[Pubkey]:
    """Program id of each compiled instruction, in order."""
    return [message.account_keys[ix.program_id_index] for ix in message.instructions]


# ============================================================================
# Mock Ledger
# ============================================================================

class MockLedger(LedgerInterface):
    """In-memory ledger for testing."""

    def __init__(self):
        self.blockhash: Optional[Hash] = Hash.new_unique()
        self.blockhash_error: Optional[Exception] = None
        self.fee: Optional[int] = 5000
        self.fee_error: Optional[Exception] = None
        self.accounts: Dict[Pubkey, AccountLookup] = {}
        self.calls: List[Tuple[str, object]] = []
        self.fee_requests: List[bytes] = []
        self.sent: List[bytes] = []
        self._connected = False

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def get_latest_blockhash(self, commitment=None) -> Optional[Hash]:
        self.calls.append(("getLatestBlockhash", commitment))
        if self.blockhash_error:
            raise self.blockhash_error
        return self.blockhash

    async def get_fee_for_message(self, serialized_message: bytes, commitment=None) -> Optional[int]:
        self.calls.append(("getFeeForMessage", commitment))
        self.fee_requests.append(serialized_message)
        if self.fee_error:
            raise self.fee_error
        return self.fee

    async def get_account_info(self, address: Pubkey, commitment=None) -> AccountLookup:
        self.calls.append(("getAccountInfo", address))
        return self.accounts.get(address, AccountNotFound())

    async def send_raw_transaction(self, raw: bytes) -> str:
        self.sent.append(raw)
        return "5" * 88

    async def simulate_raw_transaction(self, raw: bytes) -> dict:
        return {"err": None, "logs": [], "unitsConsumed": 150}

    def set_account(self, address: Pubkey, lookup: AccountLookup) -> None:
        """Register an account lookup result."""
        self.accounts[address] = lookup

    def method_calls(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def mock_ledger() -> MockLedger:
    """Create a mock ledger."""
    return MockLedger()


# ============================================================================
# Keys and Tokens
# ============================================================================

@pytest.fixture
def sender() -> Keypair:
    return Keypair()


@pytest.fixture
def recipient() -> Keypair:
    return Keypair()


@pytest.fixture
def mint() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def funded_sender(mock_ledger, sender, mint) -> Keypair:
    """Sender with a system account and an existing token account for mint."""
    owner = sender.pubkey()
    mock_ledger.set_account(owner, system_account())
    ata = derive_associated_token_address(owner, mint, TokenProgram.TOKEN)
    mock_ledger.set_account(ata, token_account(mint, owner))
    return sender
