"""
Instruction builders shared by both token standards.

Each builder returns one Operation and performs no I/O.
"""

from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account
from spl.token.instructions import (
    MintToParams,
    create_associated_token_account,
    mint_to,
)

from core.associated import AssociatedAccountResolver, token_program_for
from interfaces.core import (
    AccountStage,
    AccountState,
    Operation,
    OperationKind,
    TokenStandard,
)


def create_account_operation(
    payer: Pubkey,
    new_account: Pubkey,
    space: int,
    lamports: int,
    owner_program: Pubkey,
) -> Operation:
    """Allocate and fund a new account owned by a program.

    The new account must co-sign the transaction.
    """
    instruction = create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=new_account,
            lamports=lamports,
            space=space,
            owner=owner_program,
        )
    )
    return Operation(
        kind=OperationKind.CREATE_ACCOUNT,
        instruction=instruction,
        provides=frozenset({AccountStage(new_account, AccountState.ALLOCATED)}),
    )


def create_associated_account_operation(
    payer: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    standard: TokenStandard,
) -> Operation:
    """Create the associated token account of owner for mint.

    Fails on the ledger if the account already exists, so callers include it
    only after checking existence.
    """
    associated_account = AssociatedAccountResolver.derive(owner, mint, standard)
    instruction = create_associated_token_account(
        payer, owner, mint, token_program_for(standard)
    )
    return Operation(
        kind=OperationKind.CREATE_ASSOCIATED_ACCOUNT,
        instruction=instruction,
        provides=frozenset(
            {AccountStage(associated_account, AccountState.INITIALIZED)}
        ),
        requires=frozenset({AccountStage(mint, AccountState.INITIALIZED)}),
    )


def mint_to_operation(
    mint: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    raw_amount: int,
    standard: TokenStandard,
) -> Operation:
    """Mint raw_amount base units into a token account.

    The amount is already scaled by 10**decimals; it is never rescaled here.
    """
    instruction = mint_to(
        MintToParams(
            program_id=token_program_for(standard),
            mint=mint,
            dest=destination,
            mint_authority=authority,
            amount=raw_amount,
            signers=[],
        )
    )
    return Operation(
        kind=OperationKind.MINT_TO,
        instruction=instruction,
        requires=frozenset(
            {
                AccountStage(mint, AccountState.INITIALIZED),
                AccountStage(destination, AccountState.INITIALIZED),
            }
        ),
    )
