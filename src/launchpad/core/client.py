"""
Solana client abstraction for blockchain operations.
"""

import asyncio
import json
from typing import Any

import aiohttp
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solana.rpc.types import TokenAccountOpts, TxOpts
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction_status import TransactionConfirmationStatus

from launchpad.core.errors import ExecutionRejected, NetworkFailure, QueryUnavailable
from launchpad.core.pubkeys import SystemAddresses
from launchpad.interfaces.core import (
    AccountRecord,
    FreshnessToken,
    LedgerReader,
    RawHoldingAccount,
    SignatureStatus,
)
from launchpad.utils.logger import get_logger

logger = get_logger(__name__)

# Ordered from weakest to strongest
_CONFIRMATION_LEVELS = [
    TransactionConfirmationStatus.Processed,
    TransactionConfirmationStatus.Confirmed,
    TransactionConfirmationStatus.Finalized,
]
_COMMITMENT_LEVELS = ["processed", "confirmed", "finalized"]


class SolanaClient(LedgerReader):
    """Abstraction for Solana RPC client operations."""

    def __init__(self, rpc_endpoint: str, commitment: Commitment = Confirmed):
        """Initialize Solana client with RPC endpoint.

        Args:
            rpc_endpoint: URL of the Solana RPC endpoint
            commitment: Commitment level for reads and confirmation
        """
        self.rpc_endpoint = rpc_endpoint
        self.commitment = commitment
        self._client = None

    async def get_client(self) -> AsyncClient:
        """Get or create the AsyncClient instance.

        Returns:
            AsyncClient instance
        """
        if self._client is None:
            self._client = AsyncClient(self.rpc_endpoint, commitment=self.commitment)
        return self._client

    async def close(self):
        """Close the client connection."""
        if self._client:
            await self._client.close()
            self._client = None

    async def get_health(self) -> str | None:
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getHealth",
        }
        result = await self.post_rpc(body)
        if result and "result" in result:
            return result["result"]
        return None

    async def get_freshness_token(self) -> FreshnessToken:
        """Get the latest blockhash and its expiry height."""
        client = await self.get_client()
        try:
            response = await client.get_latest_blockhash(commitment=self.commitment)
        except (SolanaRpcException, RPCException) as e:
            raise NetworkFailure(f"Failed to fetch latest blockhash: {e!s}") from e
        return FreshnessToken(
            blockhash=response.value.blockhash,
            last_valid_block_height=response.value.last_valid_block_height,
        )

    async def get_minimum_rent_exempt_balance(self, size: int) -> int:
        """Get the rent exempt minimum for an account of `size` bytes."""
        client = await self.get_client()
        try:
            response = await client.get_minimum_balance_for_rent_exemption(size)
        except (SolanaRpcException, RPCException) as e:
            raise NetworkFailure(f"Failed to fetch rent exemption for {size} bytes: {e!s}") from e
        return response.value

    async def get_account_info(self, pubkey: Pubkey) -> AccountRecord | None:
        """Get account info from the blockchain.

        Args:
            pubkey: Public key of the account

        Returns:
            Account record, or None if the account doesn't exist
        """
        client = await self.get_client()
        try:
            response = await client.get_account_info(pubkey, encoding="base64")
        except (SolanaRpcException, RPCException) as e:
            raise NetworkFailure(f"Failed to fetch account {pubkey}: {e!s}") from e
        if not response.value:
            return None
        return AccountRecord(
            owner=response.value.owner,
            lamports=response.value.lamports,
            data=bytes(response.value.data),
        )

    async def get_holding_accounts(self, owner: Pubkey) -> list[RawHoldingAccount]:
        """Get all SPL token accounts owned by `owner`."""
        client = await self.get_client()
        try:
            response = await client.get_token_accounts_by_owner(
                owner,
                TokenAccountOpts(program_id=SystemAddresses.TOKEN_PROGRAM, encoding="base64"),
            )
        except (SolanaRpcException, RPCException) as e:
            raise QueryUnavailable(f"Failed to fetch token accounts of {owner}: {e!s}") from e
        return [
            RawHoldingAccount(pubkey=keyed.pubkey, data=bytes(keyed.account.data))
            for keyed in response.value
        ]

    async def get_block_height(self) -> int:
        client = await self.get_client()
        try:
            response = await client.get_block_height(commitment=self.commitment)
        except (SolanaRpcException, RPCException) as e:
            raise NetworkFailure(f"Failed to fetch block height: {e!s}") from e
        return response.value

    async def confirm(self, signature: str) -> SignatureStatus | None:
        """Check whether a transaction has reached the configured commitment.

        Args:
            signature: Transaction signature

        Returns:
            SignatureStatus once settled, None while still pending
        """
        client = await self.get_client()
        try:
            response = await client.get_signature_statuses([Signature.from_string(signature)])
        except (SolanaRpcException, RPCException) as e:
            raise NetworkFailure(f"Failed to fetch status of {signature}: {e!s}") from e

        status = response.value[0]
        if status is None or status.confirmation_status is None:
            return None

        required = _COMMITMENT_LEVELS.index(str(self.commitment))
        if _CONFIRMATION_LEVELS.index(status.confirmation_status) < required:
            return None

        return SignatureStatus(error=str(status.err) if status.err is not None else None)

    async def send_raw_transaction(
        self,
        transaction: bytes,
        skip_preflight: bool = False,
        max_retries: int = 3,
    ) -> str:
        """Send a signed transaction.

        Only transport failures are retried; the bytes are already signed so
        a resend cannot execute twice.

        Args:
            transaction: Serialized signed transaction
            skip_preflight: Whether to skip preflight checks
            max_retries: Maximum number of send attempts

        Returns:
            Transaction signature

        Raises:
            ExecutionRejected: The node rejected the transaction in preflight
            NetworkFailure: The transaction could not be delivered
        """
        client = await self.get_client()
        tx_opts = TxOpts(skip_preflight=skip_preflight, preflight_commitment=self.commitment)

        for attempt in range(max_retries):
            try:
                response = await client.send_raw_transaction(transaction, opts=tx_opts)
                return str(response.value)

            except RPCException as e:
                logger.error(f"Transaction rejected by node: {e!s}")
                raise ExecutionRejected(f"Transaction rejected in preflight: {e!s}") from e

            except SolanaRpcException as e:
                if attempt == max_retries - 1:
                    logger.error(
                        f"Failed to send transaction after {max_retries} attempts"
                    )
                    raise NetworkFailure(f"Failed to send transaction: {e!s}") from e

                wait_time = 2**attempt
                logger.warning(
                    f"Transaction attempt {attempt + 1} failed: {e!s}, retrying in {wait_time}s"
                )
                await asyncio.sleep(wait_time)

        raise NetworkFailure("Transaction was not sent: max_retries must be at least 1")

    async def post_rpc(self, body: dict[str, Any]) -> dict[str, Any] | None:
        """
        Send a raw RPC request to the Solana node.

        Args:
            body: JSON-RPC request body.

        Returns:
            Optional[Dict[str, Any]]: Parsed JSON response, or None if the request fails.
        """
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.rpc_endpoint,
                    json=body,
                    timeout=aiohttp.ClientTimeout(10),  # 10-second timeout
                ) as response:
                    response.raise_for_status()
                    return await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"RPC request failed: {e!s}", exc_info=True)
            return None
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode RPC response: {e!s}", exc_info=True)
            return None
