"""
Classic standard exports.

SPL Token mints whose metadata lives in a Metaplex metadata account.
"""

from .address_provider import ClassicAddresses
from .instruction_builder import (
    build_mint_operations,
    create_metadata_account_classic,
    initialize_mint_classic,
)

__all__ = [
    "ClassicAddresses",
    "build_mint_operations",
    "create_metadata_account_classic",
    "initialize_mint_classic",
]
