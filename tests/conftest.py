"""
In-memory stand-ins for the ledger view and the wallet.
"""

import asyncio
from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from core.errors import NetworkError
from core.pubkeys import SystemAddresses
from interfaces.core import AtomicBatch, LedgerAnchor, WalletAdapter

ANCHOR_LIFETIME = 150


class FakeLedger:
    """Duck-typed SolanaClient backed by dictionaries.

    Every method call is recorded in `calls`, so tests can assert that no
    network access happened.
    """

    rpc_endpoint = "memory://ledger"

    def __init__(self):
        self.calls: list[str] = []
        self.accounts: dict[Pubkey, SimpleNamespace] = {}
        self.block_height = 1_000
        self.sent: list[Transaction] = []
        # Outcome reported for every broadcast signature: "confirmed", "failed" or None (unseen)
        self.outcome: str | None = "confirmed"
        self.fail_lookups = False
        self.rent_queries: list[int] = []
        # Advances the block height on every status poll
        self.height_step_per_poll = 0
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_lookups:
            raise NetworkError(f"{name} unavailable")

    def add_account(
        self,
        address: Pubkey,
        data: bytes = b"",
        owner: Pubkey = SystemAddresses.TOKEN_PROGRAM,
    ) -> None:
        self.accounts[address] = SimpleNamespace(data=data, owner=owner)

    async def get_account_info(self, pubkey: Pubkey):
        self._record("get_account_info")
        return self.accounts.get(pubkey)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self._record("get_minimum_balance_for_rent_exemption")
        self.rent_queries.append(size)
        return (size + 128) * 6_960

    async def get_latest_anchor(self) -> LedgerAnchor:
        self._record("get_latest_anchor")
        return LedgerAnchor(Hash.new_unique(), self.block_height + ANCHOR_LIFETIME)

    async def get_block_height(self) -> int:
        self._record("get_block_height")
        return self.block_height

    async def get_signature_status(self, signature: Signature):
        self._record("get_signature_status")
        self.block_height += self.height_step_per_poll
        if self.outcome == "confirmed":
            return SimpleNamespace(
                err=None,
                confirmation_status=TransactionConfirmationStatus.Confirmed,
            )
        if self.outcome == "failed":
            return SimpleNamespace(
                err="InstructionError(4, Custom(0))",
                confirmation_status=TransactionConfirmationStatus.Processed,
            )
        return None

    async def send_transaction(self, transaction: Transaction) -> Signature:
        self._record("send_transaction")
        self.sent.append(transaction)
        return transaction.signatures[0]

    async def close(self) -> None:
        self.closed = True


class FakeWallet(WalletAdapter):
    """Wallet that signs with a local keypair and broadcasts to a FakeLedger.

    When a gate is given, sign_and_send waits for it, standing in for a user
    who has not approved the request yet.
    """

    def __init__(self, ledger: FakeLedger, gate: asyncio.Event | None = None):
        self.keypair = Keypair()
        self.ledger = ledger
        self.gate = gate
        self.reached = asyncio.Event() if gate is not None else None
        self.batches: list[AtomicBatch] = []
        self.error: Exception | None = None

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    async def sign_and_send(self, batch: AtomicBatch) -> Signature:
        self.batches.append(batch)
        if self.gate is not None:
            self.reached.set()
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        batch.transaction.partial_sign([self.keypair], batch.anchor.blockhash)
        batch.signers.append(self.pubkey)
        return await self.ledger.send_transaction(batch.transaction)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def wallet(ledger: FakeLedger) -> FakeWallet:
    return FakeWallet(ledger)
