"""
Binary layouts of the token program instructions and accounts used by the launchpad.

Strings and vectors use borsh encoding (u32 little-endian length prefix).
"""

from dataclasses import dataclass

from construct import (
    Bytes,
    Flag,
    Int8ul,
    Int16ul,
    Int32ul,
    Int64ul,
    PascalString,
    PrefixedArray,
    Struct,
)
from solders.pubkey import Pubkey

BorshString = PascalString(Int32ul, "utf8")

# Instruction tags
INITIALIZE_MINT2_INSTRUCTION = 20
METADATA_POINTER_EXTENSION_INSTRUCTION = 39
METADATA_POINTER_INITIALIZE_INSTRUCTION = 0
CREATE_METADATA_ACCOUNT_V3_INSTRUCTION = 33
# sha256("spl_token_metadata_interface:initialize_account")[:8]
TOKEN_METADATA_INITIALIZE_DISCRIMINATOR = bytes.fromhex("d2e11ea258b84d8d")

# Base mint account, identical for the SPL Token and Token-2022 programs
MINT_LAYOUT = Struct(
    "mint_authority_option" / Int32ul,
    "mint_authority" / Bytes(32),
    "supply" / Int64ul,
    "decimals" / Int8ul,
    "is_initialized" / Flag,
    "freeze_authority_option" / Int32ul,
    "freeze_authority" / Bytes(32),
)

INITIALIZE_MINT2_LAYOUT = Struct(
    "instruction" / Int8ul,
    "decimals" / Int8ul,
    "mint_authority" / Bytes(32),
    "freeze_authority_option" / Int8ul,
    "freeze_authority" / Bytes(32),
)

METADATA_POINTER_INITIALIZE_LAYOUT = Struct(
    "instruction" / Int8ul,
    "pointer_instruction" / Int8ul,
    "authority" / Bytes(32),  # OptionalNonZeroPubkey, zeroes mean None
    "metadata_address" / Bytes(32),
)

TOKEN_METADATA_INITIALIZE_LAYOUT = Struct(
    "discriminator" / Bytes(8),
    "name" / BorshString,
    "symbol" / BorshString,
    "uri" / BorshString,
)

# Token-2022 metadata as stored in the mint's TLV extension area
TOKEN_METADATA_LAYOUT = Struct(
    "update_authority" / Bytes(32),
    "mint" / Bytes(32),
    "name" / BorshString,
    "symbol" / BorshString,
    "uri" / BorshString,
    "additional_metadata" / PrefixedArray(
        Int32ul, Struct("key" / BorshString, "value" / BorshString)
    ),
)

# Metaplex CreateMetadataAccountV3 with creators, collection, uses and
# collection details all set to None
CREATE_METADATA_ACCOUNT_V3_LAYOUT = Struct(
    "instruction" / Int8ul,
    "name" / BorshString,
    "symbol" / BorshString,
    "uri" / BorshString,
    "seller_fee_basis_points" / Int16ul,
    "creators_option" / Int8ul,
    "collection_option" / Int8ul,
    "uses_option" / Int8ul,
    "is_mutable" / Flag,
    "collection_details_option" / Int8ul,
)

# Account sizes
MINT_SIZE = MINT_LAYOUT.sizeof()  # 82
BASE_ACCOUNT_LENGTH = 165
ACCOUNT_TYPE_SIZE = 1
TLV_TYPE_SIZE = 2
TLV_LENGTH_SIZE = 2
METADATA_POINTER_SIZE = 64
MINT_WITH_METADATA_POINTER_SIZE = (
    BASE_ACCOUNT_LENGTH
    + ACCOUNT_TYPE_SIZE
    + TLV_TYPE_SIZE
    + TLV_LENGTH_SIZE
    + METADATA_POINTER_SIZE
)  # 234


def pack_token_metadata(
    update_authority: Pubkey,
    mint: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    additional_metadata: tuple[tuple[str, str], ...] = (),
) -> bytes:
    """Serialize Token-2022 metadata exactly as the token program stores it."""
    return TOKEN_METADATA_LAYOUT.build(
        {
            "update_authority": bytes(update_authority),
            "mint": bytes(mint),
            "name": name,
            "symbol": symbol,
            "uri": uri,
            "additional_metadata": [
                {"key": key, "value": value} for key, value in additional_metadata
            ],
        }
    )


@dataclass
class MintInfo:
    """Decoded base mint account."""

    supply: int
    decimals: int
    is_initialized: bool
    mint_authority: Pubkey | None
    freeze_authority: Pubkey | None


def decode_mint(data: bytes) -> MintInfo:
    """Decode the first 82 bytes of a mint account.

    Args:
        data: Raw account data (extension data after the base mint is ignored)

    Returns:
        MintInfo with the base mint fields

    Raises:
        ValueError: If the data is shorter than a mint account
    """
    if len(data) < MINT_SIZE:
        raise ValueError(f"Mint data too short: {len(data)} bytes")

    parsed = MINT_LAYOUT.parse(data[:MINT_SIZE])
    return MintInfo(
        supply=parsed.supply,
        decimals=parsed.decimals,
        is_initialized=parsed.is_initialized,
        mint_authority=(
            Pubkey.from_bytes(parsed.mint_authority)
            if parsed.mint_authority_option
            else None
        ),
        freeze_authority=(
            Pubkey.from_bytes(parsed.freeze_authority)
            if parsed.freeze_authority_option
            else None
        ),
    )
