import asyncio

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.signature import Signature

from core.composer import TransactionComposer
from core.errors import LedgerExecutionFailure, NetworkError, TransactionExpiredError
from core.submission import SubmissionPipeline
from interfaces.core import LedgerAnchor, OutcomeStatus, TokenStandard
from standards.common import mint_to_operation


def _batch(wallet, last_valid_block_height: int):
    mint, destination = Keypair().pubkey(), Keypair().pubkey()
    operation = mint_to_operation(
        mint, destination, wallet.pubkey, 1, TokenStandard.CLASSIC
    )
    anchor = LedgerAnchor(Hash.new_unique(), last_valid_block_height)
    return TransactionComposer().compose([operation], wallet.pubkey, anchor)


def test_submit_returns_wallet_signature(ledger, wallet) -> None:
    batch = _batch(wallet, ledger.block_height + 10)
    signature = asyncio.run(SubmissionPipeline(ledger).submit(batch, wallet))

    assert signature == batch.transaction.signatures[0]
    assert batch.signers == [wallet.pubkey]
    assert ledger.sent == [batch.transaction]


def test_submit_rejects_elapsed_anchor_without_wallet(ledger, wallet) -> None:
    batch = _batch(wallet, ledger.block_height - 1)

    with pytest.raises(TransactionExpiredError):
        asyncio.run(SubmissionPipeline(ledger).submit(batch, wallet))
    assert wallet.batches == []


def test_rejection_after_anchor_elapsed_is_expiry(ledger, wallet) -> None:
    batch = _batch(wallet, ledger.block_height + 1)

    async def run() -> None:
        pipeline = SubmissionPipeline(ledger)
        wallet.error = LedgerExecutionFailure("Blockhash not found")
        send = wallet.sign_and_send

        async def slow_approval(b):
            ledger.block_height += 5
            return await send(b)

        wallet.sign_and_send = slow_approval
        await pipeline.submit(batch, wallet)

    with pytest.raises(TransactionExpiredError):
        asyncio.run(run())


def test_rejection_within_anchor_is_ledger_failure(ledger, wallet) -> None:
    batch = _batch(wallet, ledger.block_height + 100)
    wallet.error = LedgerExecutionFailure("insufficient funds")

    with pytest.raises(LedgerExecutionFailure):
        asyncio.run(SubmissionPipeline(ledger).submit(batch, wallet))


def test_unexpected_wallet_error_becomes_network_error(ledger, wallet) -> None:
    batch = _batch(wallet, ledger.block_height + 100)
    wallet.error = ConnectionResetError("socket closed")

    with pytest.raises(NetworkError):
        asyncio.run(SubmissionPipeline(ledger).submit(batch, wallet))


def test_confirm_reports_confirmed(ledger) -> None:
    anchor = LedgerAnchor(Hash.new_unique(), ledger.block_height + 10)
    outcome = asyncio.run(
        SubmissionPipeline(ledger, poll_interval=0).confirm(Signature.new_unique(), anchor)
    )
    assert outcome.status == OutcomeStatus.CONFIRMED


def test_confirm_reports_ledger_failure(ledger) -> None:
    ledger.outcome = "failed"
    anchor = LedgerAnchor(Hash.new_unique(), ledger.block_height + 10)
    outcome = asyncio.run(
        SubmissionPipeline(ledger, poll_interval=0).confirm(Signature.new_unique(), anchor)
    )
    assert outcome.status == OutcomeStatus.FAILED
    assert "InstructionError" in outcome.reason


def test_confirm_expires_once_block_height_passes_anchor(ledger) -> None:
    ledger.outcome = None
    ledger.height_step_per_poll = 4
    anchor = LedgerAnchor(Hash.new_unique(), ledger.block_height + 10)

    outcome = asyncio.run(
        SubmissionPipeline(ledger, poll_interval=0).confirm(Signature.new_unique(), anchor)
    )

    assert outcome.status == OutcomeStatus.EXPIRED
    assert ledger.calls.count("get_signature_status") == 3


def test_confirm_lookup_failure_is_network_error(ledger) -> None:
    ledger.fail_lookups = True
    anchor = LedgerAnchor(Hash.new_unique(), ledger.block_height + 10)

    with pytest.raises(NetworkError):
        asyncio.run(
            SubmissionPipeline(ledger, poll_interval=0).confirm(
                Signature.new_unique(), anchor
            )
        )
