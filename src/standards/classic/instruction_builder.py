"""
Instruction builders for classic SPL Token mints with Metaplex metadata.

The mint lives in the SPL Token program; its name, symbol and uri live in a
separate metadata account derived from the mint under the Metaplex program.
"""

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from core.layouts import (
    CREATE_METADATA_ACCOUNT_V3_INSTRUCTION,
    CREATE_METADATA_ACCOUNT_V3_LAYOUT,
    INITIALIZE_MINT2_INSTRUCTION,
    INITIALIZE_MINT2_LAYOUT,
)
from core.pubkeys import SystemAddresses
from interfaces.core import (
    AccountStage,
    AccountState,
    Operation,
    OperationKind,
    TokenSpec,
)
from standards.classic.address_provider import ClassicAddresses
from standards.common import create_account_operation


def initialize_mint_classic(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Pubkey | None,
) -> Operation:
    """Build an InitializeMint2 instruction for the SPL Token program."""
    data = INITIALIZE_MINT2_LAYOUT.build(
        {
            "instruction": INITIALIZE_MINT2_INSTRUCTION,
            "decimals": decimals,
            "mint_authority": bytes(mint_authority),
            "freeze_authority_option": 1 if freeze_authority else 0,
            "freeze_authority": bytes(freeze_authority) if freeze_authority else bytes(32),
        }
    )
    instruction = Instruction(
        program_id=ClassicAddresses.TOKEN_PROGRAM,
        data=data,
        accounts=[AccountMeta(pubkey=mint, is_signer=False, is_writable=True)],
    )
    return Operation(
        kind=OperationKind.INITIALIZE_MINT_CLASSIC,
        instruction=instruction,
        provides=frozenset({AccountStage(mint, AccountState.INITIALIZED)}),
        requires=frozenset({AccountStage(mint, AccountState.ALLOCATED)}),
    )


def create_metadata_account_classic(
    mint: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
    name: str,
    symbol: str,
    uri: str,
) -> Operation:
    """Build a Metaplex CreateMetadataAccountV3 instruction.

    Derives the metadata account from the mint first. The metadata is mutable,
    has no creators, collection or uses, and charges no seller fee.
    """
    metadata = ClassicAddresses.find_metadata_address(mint)
    data = CREATE_METADATA_ACCOUNT_V3_LAYOUT.build(
        {
            "instruction": CREATE_METADATA_ACCOUNT_V3_INSTRUCTION,
            "name": name,
            "symbol": symbol,
            "uri": uri,
            "seller_fee_basis_points": 0,
            "creators_option": 0,
            "collection_option": 0,
            "uses_option": 0,
            "is_mutable": True,
            "collection_details_option": 0,
        }
    )
    accounts = [
        AccountMeta(pubkey=metadata, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),  # mint authority
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=False, is_writable=False),  # update authority
        AccountMeta(pubkey=SystemAddresses.SYSTEM_PROGRAM, is_signer=False, is_writable=False),
    ]
    instruction = Instruction(
        program_id=ClassicAddresses.METADATA_PROGRAM,
        data=data,
        accounts=accounts,
    )
    return Operation(
        kind=OperationKind.CREATE_METADATA_ACCOUNT_CLASSIC,
        instruction=instruction,
        provides=frozenset({AccountStage(metadata, AccountState.INITIALIZED)}),
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
    """Operations creating a classic mint with its metadata account.

    Args:
        payer: Fee payer funding the new accounts
        mint: Address of the new mint (its keypair must co-sign)
        authority: Mint, freeze and metadata update authority
        spec: Token parameters
        space: Bytes to allocate for the mint
        lamports: Rent-exempt funding for the mint

    Returns:
        Ordered operations
    """
    return [
        create_account_operation(
            payer, mint, space, lamports, ClassicAddresses.TOKEN_PROGRAM
        ),
        initialize_mint_classic(mint, spec.decimals, authority, authority),
        create_metadata_account_classic(
            mint, authority, payer, spec.name, spec.symbol, spec.metadata_uri
        ),
    ]
