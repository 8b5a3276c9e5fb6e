"""
Associated token account derivation and existence checks.
"""

from solders.pubkey import Pubkey

from core.client import SolanaClient
from core.pubkeys import SystemAddresses
from interfaces.core import TokenStandard


def token_program_for(standard: TokenStandard) -> Pubkey:
    """Get the token program that owns mints of the given standard."""
    if standard == TokenStandard.EXTENDED:
        return SystemAddresses.TOKEN_2022_PROGRAM
    return SystemAddresses.TOKEN_PROGRAM


class AssociatedAccountResolver:
    """Derives associated token accounts and checks whether they exist."""

    def __init__(self, client: SolanaClient):
        """Initialize resolver.

        Args:
            client: Solana RPC client used for existence lookups
        """
        self.client = client

    @staticmethod
    def derive(owner: Pubkey, mint: Pubkey, standard: TokenStandard) -> Pubkey:
        """Derive the associated token account for an owner and mint.

        Args:
            owner: Wallet that will own the token account
            mint: Token mint address
            standard: Token standard of the mint

        Returns:
            Associated token account address
        """
        derived_address, _ = Pubkey.find_program_address(
            [
                bytes(owner),
                bytes(token_program_for(standard)),
                bytes(mint),
            ],
            SystemAddresses.ASSOCIATED_TOKEN_PROGRAM,
        )
        return derived_address

    async def exists(self, address: Pubkey) -> bool:
        """Check whether an account exists on the ledger.

        Raises:
            NetworkError: If the lookup fails
        """
        return await self.client.get_account_info(address) is not None
