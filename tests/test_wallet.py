import asyncio

import base58
from solders.hash import Hash
from solders.keypair import Keypair

from core.composer import TransactionComposer
from core.wallet import Wallet
from interfaces.core import LedgerAnchor, TokenStandard
from standards.common import mint_to_operation


def test_wallet_loads_base58_key(ledger) -> None:
    keypair = Keypair()
    wallet = Wallet(base58.b58encode(bytes(keypair)).decode(), ledger)
    assert wallet.pubkey == keypair.pubkey()


def test_wallet_signs_and_broadcasts(ledger) -> None:
    keypair = Keypair()
    wallet = Wallet(base58.b58encode(bytes(keypair)).decode(), ledger)
    operation = mint_to_operation(
        Keypair().pubkey(), Keypair().pubkey(), wallet.pubkey, 1, TokenStandard.CLASSIC
    )
    batch = TransactionComposer().compose(
        [operation], wallet.pubkey, LedgerAnchor(Hash.new_unique(), 2_000)
    )

    signature = asyncio.run(wallet.sign_and_send(batch))

    assert signature == batch.transaction.signatures[0]
    assert batch.signers == [wallet.pubkey]
    assert ledger.calls == ["send_transaction"]
