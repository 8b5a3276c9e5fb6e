"""
Solana client abstraction for the ledger lookups and broadcasts the launchpad needs.
"""

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.account import Account
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionStatus

from config import COMMITMENT, SKIP_PREFLIGHT
from core.errors import LedgerExecutionFailure, NetworkError
from interfaces.core import LedgerAnchor
from utils.logger import get_logger

logger = get_logger(__name__)


class SolanaClient:
    """Abstraction for Solana RPC client operations."""

    def __init__(
        self,
        rpc_endpoint: str,
        commitment: str = COMMITMENT,
        skip_preflight: bool = SKIP_PREFLIGHT,
    ):
        """Initialize Solana client with RPC endpoint.

        Args:
            rpc_endpoint: URL of the Solana RPC endpoint
            commitment: Commitment level for lookups and anchors
            skip_preflight: Whether broadcasts skip the preflight simulation
        """
        self.rpc_endpoint = rpc_endpoint
        self.commitment = Commitment(commitment)
        self.skip_preflight = skip_preflight
        self._client: AsyncClient | None = None

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

    async def get_account_info(self, pubkey: Pubkey) -> Account | None:
        """Get account info from the blockchain.

        Args:
            pubkey: Public key of the account

        Returns:
            Account, or None if the account does not exist

        Raises:
            NetworkError: If the lookup fails
        """
        client = await self.get_client()
        try:
            response = await client.get_account_info(pubkey, encoding="base64")
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Account lookup for {pubkey} failed: {e!s}") from e
        return response.value

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Get the lamports needed for an account of the given size to be rent exempt.

        Args:
            size: Account data length in bytes

        Returns:
            Minimum balance in lamports

        Raises:
            NetworkError: If the lookup fails
        """
        client = await self.get_client()
        try:
            response = await client.get_minimum_balance_for_rent_exemption(size)
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Rent exemption lookup failed: {e!s}") from e
        return response.value

    async def get_latest_anchor(self) -> LedgerAnchor:
        """Get a fresh blockhash with its last valid block height.

        Returns:
            LedgerAnchor for a new transaction

        Raises:
            NetworkError: If the lookup fails
        """
        client = await self.get_client()
        try:
            response = await client.get_latest_blockhash(commitment=self.commitment)
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Blockhash fetch failed: {e!s}") from e
        return LedgerAnchor(
            blockhash=response.value.blockhash,
            last_valid_block_height=response.value.last_valid_block_height,
        )

    async def get_block_height(self) -> int:
        """Get the current block height.

        Raises:
            NetworkError: If the lookup fails
        """
        client = await self.get_client()
        try:
            response = await client.get_block_height(commitment=self.commitment)
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Block height fetch failed: {e!s}") from e
        return response.value

    async def get_signature_status(
        self, signature: Signature
    ) -> TransactionStatus | None:
        """Get the status of a transaction signature.

        Args:
            signature: Transaction signature

        Returns:
            TransactionStatus, or None if the ledger has not seen the signature

        Raises:
            NetworkError: If the lookup fails
        """
        client = await self.get_client()
        try:
            response = await client.get_signature_statuses([signature])
        except (SolanaRpcException, RPCException) as e:
            raise NetworkError(f"Status lookup for {signature} failed: {e!s}") from e
        return response.value[0]

    async def send_transaction(self, transaction: Transaction) -> Signature:
        """Broadcast a fully signed transaction once.

        Args:
            transaction: Signed transaction

        Returns:
            Transaction signature

        Raises:
            LedgerExecutionFailure: If the node rejects the transaction
            NetworkError: If the request does not reach the node
        """
        client = await self.get_client()
        opts = TxOpts(
            skip_preflight=self.skip_preflight,
            preflight_commitment=self.commitment,
        )
        try:
            response = await client.send_transaction(transaction, opts)
        except RPCException as e:
            raise LedgerExecutionFailure(f"Transaction rejected: {e!s}") from e
        except SolanaRpcException as e:
            raise NetworkError(f"Broadcast failed: {e!s}") from e

        logger.info(f"Transaction sent: {response.value}")
        return response.value
