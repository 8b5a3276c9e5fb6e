"""
Address derivations for classic SPL Token mints.
"""

from solders.pubkey import Pubkey

from core.pubkeys import SystemAddresses


class ClassicAddresses:
    """Program addresses and PDAs used by classic mints."""

    TOKEN_PROGRAM = SystemAddresses.TOKEN_PROGRAM
    METADATA_PROGRAM = SystemAddresses.TOKEN_METADATA_PROGRAM

    @staticmethod
    def find_metadata_address(mint: Pubkey) -> Pubkey:
        """
        Derive the Metaplex metadata account for a mint.

        Args:
            mint: Token mint address

        Returns:
            Pubkey of the derived metadata account
        """
        derived_address, _ = Pubkey.find_program_address(
            [
                b"metadata",
                bytes(ClassicAddresses.METADATA_PROGRAM),
                bytes(mint),
            ],
            ClassicAddresses.METADATA_PROGRAM,
        )
        return derived_address
