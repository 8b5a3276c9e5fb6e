"""
Instruction builders for Token-2022 mints carrying their own metadata.

The mint account points at itself through the metadata-pointer extension and
stores name, symbol and uri in the token-metadata extension. The pointer must
be initialized before the mint, and the metadata after it.
"""

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from spl.token.instructions import InitializeMintParams, initialize_mint

from core.layouts import (
    METADATA_POINTER_EXTENSION_INSTRUCTION,
    METADATA_POINTER_INITIALIZE_INSTRUCTION,
    METADATA_POINTER_INITIALIZE_LAYOUT,
    TOKEN_METADATA_INITIALIZE_DISCRIMINATOR,
    TOKEN_METADATA_INITIALIZE_LAYOUT,
)
from core.pubkeys import SystemAddresses
from interfaces.core import (
    AccountStage,
    AccountState,
    Operation,
    OperationKind,
    TokenSpec,
)
from standards.common import create_account_operation

TOKEN_2022_PROGRAM = SystemAddresses.TOKEN_2022_PROGRAM


def _optional_pubkey(pubkey: Pubkey | None) -> bytes:
    if pubkey is None:
        return bytes(32)
    return bytes(pubkey)


def initialize_metadata_pointer(
    mint: Pubkey,
    authority: Pubkey | None,
    metadata_address: Pubkey | None,
) -> Operation:
    """Build the metadata-pointer extension initialization for a mint."""
    data = METADATA_POINTER_INITIALIZE_LAYOUT.build(
        {
            "instruction": METADATA_POINTER_EXTENSION_INSTRUCTION,
            "pointer_instruction": METADATA_POINTER_INITIALIZE_INSTRUCTION,
            "authority": _optional_pubkey(authority),
            "metadata_address": _optional_pubkey(metadata_address),
        }
    )
    instruction = Instruction(
        program_id=TOKEN_2022_PROGRAM,
        data=data,
        accounts=[AccountMeta(pubkey=mint, is_signer=False, is_writable=True)],
    )
    return Operation(
        kind=OperationKind.INITIALIZE_METADATA_POINTER,
        instruction=instruction,
        provides=frozenset({AccountStage(mint, AccountState.CONFIGURED)}),
        requires=frozenset({AccountStage(mint, AccountState.ALLOCATED)}),
    )


def initialize_mint_extended(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Pubkey | None,
) -> Operation:
    """Build an InitializeMint instruction for the Token-2022 program."""
    instruction = initialize_mint(
        InitializeMintParams(
            decimals=decimals,
            program_id=TOKEN_2022_PROGRAM,
            mint=mint,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
        )
    )
    return Operation(
        kind=OperationKind.INITIALIZE_MINT_EXTENDED,
        instruction=instruction,
        provides=frozenset({AccountStage(mint, AccountState.INITIALIZED)}),
        requires=frozenset({AccountStage(mint, AccountState.CONFIGURED)}),
    )


def initialize_metadata_extended(
    mint: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    authority: Pubkey,
) -> Operation:
    """Build the token-metadata Initialize instruction writing into the mint itself."""
    data = TOKEN_METADATA_INITIALIZE_LAYOUT.build(
        {
            "discriminator": TOKEN_METADATA_INITIALIZE_DISCRIMINATOR,
            "name": name,
            "symbol": symbol,
            "uri": uri,
        }
    )
    accounts = [
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),  # metadata
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # update authority
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),  # mint authority
    ]
    instruction = Instruction(
        program_id=TOKEN_2022_PROGRAM,
        data=data,
        accounts=accounts,
    )
    return Operation(
        kind=OperationKind.INITIALIZE_METADATA_EXTENDED,
        instruction=instruction,
        requires=frozenset({AccountStage(mint, AccountState.INITIALIZED)}),
    )


def build_mint_operations(
    payer: Pubkey,
    mint: Pubkey,
    authority: Pubkey,
    spec: TokenSpec,
    space: int,
    lamports: int,
) -> list[Operation]:
    """Operations creating a Token-2022 mint with embedded metadata.

    Args:
        payer: Fee payer funding the new account
        mint: Address of the new mint (its keypair must co-sign)
        authority: Mint, freeze and metadata update authority
        spec: Token parameters
        space: Bytes to allocate for the mint and its metadata pointer
        lamports: Rent-exempt funding covering the metadata as well

    Returns:
        Ordered operations
    """
    return [
        create_account_operation(payer, mint, space, lamports, TOKEN_2022_PROGRAM),
        initialize_metadata_pointer(mint, authority, mint),
        initialize_mint_extended(mint, spec.decimals, authority, authority),
        initialize_metadata_extended(
            mint, spec.name, spec.symbol, spec.metadata_uri, authority
        ),
    ]
