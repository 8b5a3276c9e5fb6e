"""
Account sizing and rent-exemption funding for new mint accounts.
"""

from core.client import SolanaClient
from core.layouts import (
    MINT_SIZE,
    MINT_WITH_METADATA_POINTER_SIZE,
    TLV_LENGTH_SIZE,
    TLV_TYPE_SIZE,
    pack_token_metadata,
)
from core.pubkeys import LAMPORTS_PER_SOL
from interfaces.core import TokenMetadata, TokenStandard
from utils.logger import get_logger

logger = get_logger(__name__)


class RentSizer:
    """Computes mint account sizes and the lamports needed to fund them."""

    def __init__(self, client: SolanaClient):
        """Initialize rent sizer.

        Args:
            client: Solana RPC client used for rent-exemption lookups
        """
        self.client = client

    @staticmethod
    def allocated_space(standard: TokenStandard) -> int:
        """Bytes allocated by the create-account instruction of a new mint.

        For the extended standard this covers the mint and its metadata pointer;
        the metadata extension is appended later by the token program.
        """
        if standard == TokenStandard.EXTENDED:
            return MINT_WITH_METADATA_POINTER_SIZE
        return MINT_SIZE

    @staticmethod
    def account_size(
        standard: TokenStandard, metadata: TokenMetadata | None = None
    ) -> int:
        """Bytes the new mint account must be rent exempt for.

        Args:
            standard: Token standard of the mint
            metadata: Metadata stored inside the mint (extended standard only)

        Returns:
            Account size in bytes once fully initialized
        """
        if standard == TokenStandard.CLASSIC:
            return MINT_SIZE

        size = MINT_WITH_METADATA_POINTER_SIZE
        if metadata is not None:
            packed = pack_token_metadata(
                metadata.update_authority,
                metadata.mint,
                metadata.name,
                metadata.symbol,
                metadata.uri,
                metadata.additional_metadata,
            )
            size += TLV_TYPE_SIZE + TLV_LENGTH_SIZE + len(packed)
        return size

    async def minimum_funding(self, size: int) -> int:
        """Fetch the current rent-exempt minimum for an account size.

        Always queries the ledger; the threshold is never cached.

        Args:
            size: Account size in bytes

        Returns:
            Lamports required

        Raises:
            NetworkError: If the lookup fails
        """
        lamports = await self.client.get_minimum_balance_for_rent_exemption(size)
        logger.info(
            f"Rent exemption for {size} bytes: {lamports} lamports "
            f"({lamports / LAMPORTS_PER_SOL:.6f} SOL)"
        )
        return lamports
