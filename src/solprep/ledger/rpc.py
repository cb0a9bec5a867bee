"""
JSON-RPC adapter for ledger access.

Provides ledger access by speaking Solana JSON-RPC over HTTP.
"""

import base64
import itertools
from typing import Any, List, Optional

import httpx
import structlog

from solders.hash import Hash
from solders.pubkey import Pubkey

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


class HttpRpcAdapter(LedgerInterface):
    """
    Solana JSON-RPC adapter.

    Implements the LedgerInterface with plain JSON-RPC 2.0 requests.
    """

    def __init__(
        self,
        config: Optional[PrepConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the RPC adapter.

        Args:
            config: Preparation configuration. Uses global config if not provided.
            transport: Custom httpx transport (used by tests)
        """
        self.config = config or get_config()
        self.endpoint = self.config.endpoint
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    @property
    def headers(self) -> dict:
        return {"Content-Type": "application/json"}

    async def connect(self) -> None:
        """Establish connection (create HTTP client)."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.endpoint,
            headers=self.headers,
            timeout=self.config.request_timeout_seconds,
            transport=self._transport,
        )

        # Test connection
        try:
            await self._request("getHealth")
            logger.info("rpc_connected", endpoint=self.endpoint)
        except LedgerRequestError as e:
            await self._client.aclose()
            self._client = None
            raise LedgerConnectionError(f"RPC health check failed: {e}") from e

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("rpc_disconnected")

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a JSON-RPC request and return its result."""
        if not self._client:
            await self.connect()

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            response = await self._client.post("", json=payload)
        except httpx.HTTPError as e:
            logger.error("rpc_request_error", method=method, error=str(e))
            raise LedgerRequestError(f"RPC request failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "rpc_request_failed",
                method=method,
                status=response.status_code,
                error=response.text,
            )
            raise LedgerRequestError(f"RPC HTTP error {response.status_code}: {response.text}")

        try:
            body = response.json()
        except ValueError as e:
            logger.error("rpc_invalid_response", method=method, error=str(e))
            raise LedgerRequestError(f"RPC returned a non-JSON response: {e}") from e

        if not isinstance(body, dict):
            raise LedgerRequestError(f"RPC returned an unexpected response: {body!r}")

        error = body.get("error")
        if error:
            raise LedgerRequestError(
                error.get("message", "Unknown RPC error"),
                error_code=error.get("code"),
                data=error.get("data"),
            )

        return body.get("result")

    @staticmethod
    def _config_param(commitment: Optional[Commitment], **extra: Any) -> dict:
        params = dict(extra)
        if commitment is not None:
            params["commitment"] = commitment.value
        return params

    async def get_latest_blockhash(
        self,
        commitment: Optional[Commitment] = None,
    ) -> Optional[Hash]:
        """Get the latest blockhash."""
        result = await self._request(
            "getLatestBlockhash",
            [self._config_param(commitment)],
        )

        blockhash = ((result or {}).get("value") or {}).get("blockhash")
        if not blockhash:
            return None

        logger.debug("blockhash_fetched", blockhash=blockhash[:16] + "...")
        return Hash.from_string(blockhash)

    async def get_fee_for_message(
        self,
        serialized_message: bytes,
        commitment: Optional[Commitment] = None,
    ) -> Optional[int]:
        """Get the fee for a serialized message."""
        encoded = base64.b64encode(serialized_message).decode("ascii")
        result = await self._request(
            "getFeeForMessage",
            [encoded, self._config_param(commitment)],
        )

        value = (result or {}).get("value")
        return int(value) if value is not None else None

    async def get_account_info(
        self,
        address: Pubkey,
        commitment: Optional[Commitment] = None,
    ) -> AccountLookup:
        """Look up an account."""
        try:
            result = await self._request(
                "getAccountInfo",
                [str(address), self._config_param(commitment, encoding="base64")],
            )
        except LedgerRequestError as e:
            logger.warning("account_lookup_failed", address=short(address), error=str(e))
            return AccountLookupFailed(error=e)

        value = (result or {}).get("value")
        if value is None:
            return AccountNotFound()

        try:
            data = value.get("data") or ["", "base64"]
            return AccountFound(
                owner=Pubkey.from_string(value["owner"]),
                data=base64.b64decode(data[0]),
                lamports=int(value.get("lamports", 0)),
            )
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("account_parse_error", address=short(address), error=str(e))
            return AccountLookupFailed(error=LedgerRequestError(f"Malformed account info: {e}"))

    async def send_raw_transaction(self, raw: bytes) -> str:
        """Submit a signed transaction."""
        encoded = base64.b64encode(raw).decode("ascii")

        try:
            signature = await self._request(
                "sendTransaction",
                [encoded, {"encoding": "base64"}],
            )
        except LedgerRequestError as e:
            logger.error("tx_submit_failed", error=str(e))
            raise TransactionSubmitError(
                f"Transaction submission failed: {e}",
                error_code=e.error_code,
            ) from e

        logger.info("tx_submitted", signature=signature)
        return signature

    async def simulate_raw_transaction(self, raw: bytes) -> dict:
        """Simulate a transaction."""
        encoded = base64.b64encode(raw).decode("ascii")
        result = await self._request(
            "simulateTransaction",
            [encoded, {"encoding": "base64", "sigVerify": False}],
        )
        return (result or {}).get("value") or {}
