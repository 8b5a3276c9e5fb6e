"""
Extended standard exports.

Token-2022 mints with the metadata-pointer and token-metadata extensions.
"""

from .instruction_builder import (
    build_mint_operations,
    initialize_metadata_extended,
    initialize_metadata_pointer,
    initialize_mint_extended,
)

__all__ = [
    "build_mint_operations",
    "initialize_metadata_extended",
    "initialize_metadata_pointer",
    "initialize_mint_extended",
]
