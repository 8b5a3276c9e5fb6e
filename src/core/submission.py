"""
Hand-off of composed batches to the wallet and confirmation tracking.
"""

import asyncio

from solders.signature import Signature
from solders.transaction_status import TransactionConfirmationStatus

from config import CONFIRMATION_POLL_INTERVAL
from core.client import SolanaClient
from core.errors import (
    LaunchpadError,
    LedgerExecutionFailure,
    NetworkError,
    TransactionExpiredError,
)
from interfaces.core import AtomicBatch, LedgerAnchor, Outcome, WalletAdapter
from utils.logger import get_logger

logger = get_logger(__name__)

COMMITTED_STATUSES = (
    TransactionConfirmationStatus.Confirmed,
    TransactionConfirmationStatus.Finalized,
)


class SubmissionPipeline:
    """Submits batches through the wallet and waits for their outcome."""

    def __init__(
        self,
        client: SolanaClient,
        poll_interval: float = CONFIRMATION_POLL_INTERVAL,
    ):
        """Initialize submission pipeline.

        Args:
            client: Solana RPC client used for status and block height lookups
            poll_interval: Seconds between confirmation polls
        """
        self.client = client
        self.poll_interval = poll_interval

    async def submit(self, batch: AtomicBatch, wallet: WalletAdapter) -> Signature:
        """Have the wallet sign and broadcast the batch.

        No timeout is applied to the wallet call; user approval may take as
        long as it takes. Nothing is retried.

        Args:
            batch: Composed and co-signed batch
            wallet: Wallet providing the final signature

        Returns:
            Transaction signature

        Raises:
            TransactionExpiredError: If the anchor elapsed before or during submission
            LedgerExecutionFailure: If the ledger rejected the batch
            NetworkError: If the broadcast did not reach the ledger
        """
        await self._ensure_anchor_live(batch.anchor)

        try:
            signature = await wallet.sign_and_send(batch)
        except LedgerExecutionFailure:
            if await self._anchor_elapsed(batch.anchor):
                raise TransactionExpiredError(
                    "Blockhash expired while the transaction awaited approval"
                ) from None
            raise
        except LaunchpadError:
            raise
        except Exception as e:
            raise NetworkError(f"Wallet failed to send transaction: {e!s}") from e

        logger.info(f"Batch submitted with signature {signature}")
        return signature

    async def confirm(self, signature: Signature, anchor: LedgerAnchor) -> Outcome:
        """Poll until the signature is committed, fails, or its anchor elapses.

        Args:
            signature: Signature returned by submit
            anchor: Anchor the batch was composed with

        Returns:
            Outcome with status CONFIRMED, FAILED or EXPIRED

        Raises:
            NetworkError: If a status or block height lookup fails
        """
        while True:
            status = await self.client.get_signature_status(signature)
            if status is not None:
                if status.err is not None:
                    logger.warning(f"Transaction {signature} failed: {status.err}")
                    return Outcome.failed(str(status.err))
                if status.confirmation_status in COMMITTED_STATUSES:
                    logger.info(f"Transaction {signature} confirmed")
                    return Outcome.confirmed()

            block_height = await self.client.get_block_height()
            if block_height > anchor.last_valid_block_height:
                logger.warning(
                    f"Transaction {signature} not confirmed before block height "
                    f"{anchor.last_valid_block_height} (now {block_height})"
                )
                return Outcome.expired(
                    f"Block height {block_height} exceeded last valid block height "
                    f"{anchor.last_valid_block_height}"
                )

            await asyncio.sleep(self.poll_interval)

    async def _anchor_elapsed(self, anchor: LedgerAnchor) -> bool:
        return await self.client.get_block_height() > anchor.last_valid_block_height

    async def _ensure_anchor_live(self, anchor: LedgerAnchor) -> None:
        if await self._anchor_elapsed(anchor):
            raise TransactionExpiredError(
                f"Blockhash {anchor.blockhash} expired before submission"
            )
