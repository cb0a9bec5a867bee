"""
solana-py adapter for ledger access.

Provides ledger access through solana.rpc.async_api.AsyncClient.
"""

from typing import Optional

import httpx
import structlog

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.message import from_bytes_versioned
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from solprep.config import Commitment, PrepConfig, get_config
from solprep.core.address import short
from solprep.ledger.interface import (
    AccountFound,
    AccountLookup,
    AccountLookupFailed,
    AccountNotFound,
    LedgerConnectionError,
    LedgerInterface,
    LedgerRequestError,
    TransactionSubmitError,
)

logger = structlog.get_logger(__name__)

_CLIENT_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError)


class SolanaPyAdapter(LedgerInterface):
    """
    solana-py adapter.

    Implements the LedgerInterface on top of solana-py's async RPC client.
    """

    def __init__(self, config: Optional[PrepConfig] = None):
        """
        Initialize the adapter.

        Args:
            config: Preparation configuration. Uses global config if not provided.
        """
        self.config = config or get_config()
        self.endpoint = self.config.endpoint
        self._client: Optional[AsyncClient] = None

    async def connect(self) -> None:
        """Create the client and check the node is reachable."""
        if self._client is not None:
            return

        self._client = AsyncClient(
            self.endpoint,
            timeout=self.config.request_timeout_seconds,
        )

        if not await self._client.is_connected():
            await self._client.close()
            self._client = None
            raise LedgerConnectionError(f"RPC node not reachable: {self.endpoint}")

        logger.info("rpc_connected", endpoint=self.endpoint, provider="solana-py")

    async def disconnect(self) -> None:
        """Close the client."""
        if self._client:
            await self._client.close()
            self._client = None
            logger.info("rpc_disconnected")

    async def _get_client(self) -> AsyncClient:
        if not self._client:
            await self.connect()
        return self._client

    @staticmethod
    def _commitment(commitment: Optional[Commitment]) -> Optional[str]:
        return commitment.value if commitment is not None else None

    async def get_latest_blockhash(
        self,
        commitment: Optional[Commitment] = None,
    ) -> Optional[Hash]:
        """Get the latest blockhash."""
        client = await self._get_client()

        try:
            resp = await client.get_latest_blockhash(self._commitment(commitment))
        except _CLIENT_ERRORS as e:
            raise LedgerRequestError(f"getLatestBlockhash failed: {e}") from e

        if resp.value is None:
            return None
        return resp.value.blockhash

    async def get_fee_for_message(
        self,
        serialized_message: bytes,
        commitment: Optional[Commitment] = None,
    ) -> Optional[int]:
        """Get the fee for a serialized message."""
        client = await self._get_client()
        message = from_bytes_versioned(serialized_message)

        try:
            resp = await client.get_fee_for_message(message, self._commitment(commitment))
        except _CLIENT_ERRORS as e:
            raise LedgerRequestError(f"getFeeForMessage failed: {e}") from e

        return resp.value

    async def get_account_info(
        self,
        address: Pubkey,
        commitment: Optional[Commitment] = None,
    ) -> AccountLookup:
        """Look up an account."""
        client = await self._get_client()

        try:
            resp = await client.get_account_info(
                address,
                commitment=self._commitment(commitment),
                encoding="base64",
            )
        except _CLIENT_ERRORS as e:
            logger.warning("account_lookup_failed", address=short(address), error=str(e))
            return AccountLookupFailed(error=LedgerRequestError(f"getAccountInfo failed: {e}"))

        account = resp.value
        if account is None:
            return AccountNotFound()

        return AccountFound(
            owner=account.owner,
            data=bytes(account.data),
            lamports=account.lamports,
        )

    async def send_raw_transaction(self, raw: bytes) -> str:
        """Submit a signed transaction."""
        client = await self._get_client()

        try:
            resp = await client.send_raw_transaction(raw)
        except _CLIENT_ERRORS as e:
            logger.error("tx_submit_failed", error=str(e))
            raise TransactionSubmitError(f"Transaction submission failed: {e}") from e

        signature = str(resp.value)
        logger.info("tx_submitted", signature=signature)
        return signature

    async def simulate_raw_transaction(self, raw: bytes) -> dict:
        """Simulate a transaction."""
        client = await self._get_client()
        tx = VersionedTransaction.from_bytes(raw)

        try:
            resp = await client.simulate_transaction(tx, sig_verify=False)
        except _CLIENT_ERRORS as e:
            raise LedgerRequestError(f"simulateTransaction failed: {e}") from e

        value = resp.value
        return {
            "err": value.err,
            "logs": list(value.logs or []),
            "unitsConsumed": value.units_consumed,
        }
