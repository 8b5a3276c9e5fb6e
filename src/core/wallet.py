"""
Local keypair wallet for signing and broadcasting launchpad transactions.
"""

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from core.client import SolanaClient
from interfaces.core import AtomicBatch, WalletAdapter
from utils.logger import get_logger

logger = get_logger(__name__)


class Wallet(WalletAdapter):
    """Wallet backed by a private key held in process memory.

    Approval is implicit: every batch handed to sign_and_send is signed.
    """

    def __init__(self, private_key: str, client: SolanaClient):
        """Initialize wallet from private key.

        Args:
            private_key: Base58 encoded private key
            client: Solana client used to broadcast signed batches
        """
        self._keypair = self._load_keypair(private_key)
        self._client = client

    @property
    def pubkey(self) -> Pubkey:
        """Get the public key of the wallet."""
        return self._keypair.pubkey()

    async def sign_and_send(self, batch: AtomicBatch) -> Signature:
        """Complete the batch signatures with the wallet key and broadcast it.

        Args:
            batch: Composed batch, already co-signed by any ephemeral keys

        Returns:
            Transaction signature
        """
        batch.transaction.partial_sign([self._keypair], batch.anchor.blockhash)
        batch.signers.append(self.pubkey)
        logger.debug(f"Batch signed by wallet {self.pubkey}")
        return await self._client.send_transaction(batch.transaction)

    @staticmethod
    def _load_keypair(private_key: str) -> Keypair:
        """Load keypair from private key.

        Args:
            private_key: Base58 encoded private key

        Returns:
            Solana keypair
        """
        private_key_bytes = base58.b58decode(private_key)
        return Keypair.from_bytes(private_key_bytes)
