import asyncio

import pytest
from solders.keypair import Keypair

from conftest import FakeWallet
from core.associated import AssociatedAccountResolver
from core.errors import InvalidAddressError, ValidationError
from core.layouts import MINT_LAYOUT, MINT_SIZE
from core.pubkeys import SystemAddresses
from flows.base import FlowState
from flows.launchpad import TokenLaunchpad
from interfaces.core import OperationKind, RecordType, TokenSpec, TokenStandard

GOLD = TokenSpec(
    name="Gold",
    symbol="GLD",
    metadata_uri="https://example.com/gold.json",
    decimals=6,
    initial_supply="100",
)


def _launchpad(ledger, wallet, **kwargs) -> TokenLaunchpad:
    kwargs.setdefault("poll_interval", 0)
    return TokenLaunchpad(ledger, wallet, **kwargs)


def test_classic_creation_with_initial_supply(ledger, wallet) -> None:
    launchpad = _launchpad(ledger, wallet)
    states = []
    launchpad.on_update = lambda status: states.append(status.state)

    result = asyncio.run(launchpad.create_token(GOLD, TokenStandard.CLASSIC))

    assert result.success, result.error_message
    assert result.state == FlowState.SUCCEEDED
    assert len(wallet.batches) == 1
    batch = wallet.batches[0]
    assert batch.kinds == [
        OperationKind.CREATE_ACCOUNT,
        OperationKind.INITIALIZE_MINT_CLASSIC,
        OperationKind.CREATE_METADATA_ACCOUNT_CLASSIC,
        OperationKind.CREATE_ASSOCIATED_ACCOUNT,
        OperationKind.MINT_TO,
    ]
    mint_to = batch.operations[-1].instruction
    assert bytes(mint_to.data) == bytes([7]) + (100_000_000).to_bytes(8, "little")

    assert batch.signers == [result.mint, wallet.pubkey]
    assert len(launchpad.history) == 1
    record = launchpad.history[0]
    assert record.operation_type == RecordType.CREATION
    assert record.mint == result.mint
    assert record.amount == "100"
    assert record.signature == result.signature
    assert launchpad.current_mint == result.mint

    assert states == [
        FlowState.IDLE,
        FlowState.VALIDATING,
        FlowState.FUNDING,
        FlowState.COMPOSING,
        FlowState.AWAITING_WALLET_SIGNATURE,
        FlowState.BROADCASTING,
        FlowState.CONFIRMING,
        FlowState.SUCCEEDED,
    ]


def test_extended_creation_orders_pointer_before_mint(ledger, wallet) -> None:
    launchpad = _launchpad(ledger, wallet)

    result = asyncio.run(launchpad.create_token(GOLD, "extended"))

    assert result.success, result.error_message
    assert wallet.batches[0].kinds == [
        OperationKind.CREATE_ACCOUNT,
        OperationKind.INITIALIZE_METADATA_POINTER,
        OperationKind.INITIALIZE_MINT_EXTENDED,
        OperationKind.INITIALIZE_METADATA_EXTENDED,
        OperationKind.CREATE_ASSOCIATED_ACCOUNT,
        OperationKind.MINT_TO,
    ]
    # Funded for the embedded metadata, not just the allocated pointer space
    assert ledger.rent_queries[0] > 234


def test_creation_without_supply_only_creates_mint(ledger, wallet) -> None:
    spec = TokenSpec(name="Gold", symbol="GLD", metadata_uri="ipfs://gold", decimals=0)

    result = asyncio.run(_launchpad(ledger, wallet).create_token(spec, "classic"))

    assert result.success
    assert OperationKind.MINT_TO not in wallet.batches[0].kinds
    assert result.amount == "0"


@pytest.mark.parametrize(
    "spec",
    [
        TokenSpec(name="", symbol="GLD", metadata_uri="", decimals=6),
        TokenSpec(name="Gold", symbol=" ", metadata_uri="", decimals=6),
        TokenSpec(name="Gold", symbol="GLD", metadata_uri="", decimals=10),
        TokenSpec(name="Gold", symbol="GLD", metadata_uri="", decimals=6, initial_supply="-5"),
        TokenSpec(name="G" * 33, symbol="GLD", metadata_uri="", decimals=6),
    ],
)
def test_invalid_spec_fails_without_network(ledger, wallet, spec) -> None:
    result = asyncio.run(_launchpad(ledger, wallet).create_token(spec, TokenStandard.CLASSIC))

    assert result.state == FlowState.FAILED
    assert isinstance(result.error, ValidationError)
    assert ledger.calls == []


def test_unknown_standard_fails_validation(ledger, wallet) -> None:
    result = asyncio.run(_launchpad(ledger, wallet).create_token(GOLD, "nft"))

    assert result.state == FlowState.FAILED
    assert isinstance(result.error, ValidationError)
    assert ledger.calls == []


def test_rent_lookup_failure_fails_flow(ledger, wallet) -> None:
    ledger.fail_lookups = True

    result = asyncio.run(_launchpad(ledger, wallet).create_token(GOLD, "classic"))

    assert result.state == FlowState.FAILED
    assert "unavailable" in result.error_message
    assert wallet.batches == []


def test_mint_more_rejects_bad_address_before_network(ledger, wallet) -> None:
    launchpad = _launchpad(ledger, wallet)

    result = asyncio.run(
        launchpad.mint_more("abc", TokenStandard.CLASSIC, 6, str(wallet.pubkey), "1")
    )

    assert result.state == FlowState.FAILED
    assert isinstance(result.error, InvalidAddressError)
    assert ledger.calls == []
    assert len(launchpad.history) == 0


def test_mint_more_creates_missing_associated_account(ledger, wallet) -> None:
    mint, recipient = Keypair().pubkey(), Keypair().pubkey()

    result = asyncio.run(
        _launchpad(ledger, wallet).mint_more(
            str(mint), "extended", 6, str(recipient), "1.5"
        )
    )

    assert result.success
    batch = wallet.batches[0]
    assert batch.kinds == [OperationKind.CREATE_ASSOCIATED_ACCOUNT, OperationKind.MINT_TO]
    assert bytes(batch.operations[-1].instruction.data)[1:] == (1_500_000).to_bytes(8, "little")


def test_mint_more_skips_existing_associated_account(ledger, wallet) -> None:
    mint, recipient = Keypair().pubkey(), Keypair().pubkey()
    ledger.add_account(
        AssociatedAccountResolver.derive(recipient, mint, TokenStandard.CLASSIC)
    )
    launchpad = _launchpad(ledger, wallet)

    async def run():
        first = await launchpad.mint_more(mint, "classic", 2, recipient, "3")
        second = await launchpad.mint_more(mint, "classic", 2, recipient, "4")
        return first, second

    first, second = asyncio.run(run())

    assert first.success and second.success
    for batch in wallet.batches:
        assert batch.kinds == [OperationKind.MINT_TO]
    assert [r.amount for r in launchpad.history] == ["3", "4"]
    assert all(r.recipient == recipient for r in launchpad.history)


def test_mint_more_rejects_zero_amount(ledger, wallet) -> None:
    mint = Keypair().pubkey()

    result = asyncio.run(
        _launchpad(ledger, wallet).mint_more(mint, "classic", 0, wallet.pubkey, "0.5")
    )

    assert result.state == FlowState.FAILED
    assert "greater than zero" in result.error_message
    assert ledger.calls == []


def test_mint_more_defaults_to_current_mint(ledger, wallet) -> None:
    launchpad = _launchpad(ledger, wallet)

    async def run():
        created = await launchpad.create_token(GOLD, "classic")
        minted = await launchpad.mint_more(amount="2")
        return created, minted

    created, minted = asyncio.run(run())

    assert minted.success
    assert minted.mint == created.mint
    assert minted.recipient == wallet.pubkey
    assert [r.operation_type for r in launchpad.history] == [
        RecordType.CREATION,
        RecordType.MINT,
    ]

    launchpad.reset()
    assert launchpad.current_mint is None
    assert len(launchpad.history) == 2
    result = asyncio.run(launchpad.mint_more(amount="2"))
    assert isinstance(result.error, ValidationError)


def test_ledger_failure_is_reported_as_failed(ledger, wallet) -> None:
    ledger.outcome = "failed"

    result = asyncio.run(_launchpad(ledger, wallet).create_token(GOLD, "classic"))

    assert result.state == FlowState.FAILED
    assert not result.expired
    assert result.signature is not None


def test_unconfirmed_batch_expires(ledger, wallet) -> None:
    ledger.outcome = None
    ledger.height_step_per_poll = 100
    launchpad = _launchpad(ledger, wallet)

    result = asyncio.run(launchpad.create_token(GOLD, "classic"))

    assert result.state == FlowState.EXPIRED
    assert result.expired
    assert not result.success
    assert len(launchpad.history) == 0


def test_flows_run_concurrently(ledger, wallet) -> None:
    launchpad = _launchpad(ledger, wallet)
    mint = Keypair().pubkey()

    async def run():
        return await asyncio.gather(
            *(
                launchpad.mint_more(mint, "classic", 0, Keypair().pubkey(), str(n))
                for n in range(1, 6)
            )
        )

    results = asyncio.run(run())

    assert all(r.success for r in results)
    assert sorted(r.amount for r in launchpad.history) == ["1", "2", "3", "4", "5"]


def test_cancellation_after_wallet_hand_off_still_resolves(ledger) -> None:
    async def run():
        gate = asyncio.Event()
        wallet = FakeWallet(ledger, gate=gate)
        launchpad = _launchpad(ledger, wallet)
        task = asyncio.create_task(
            launchpad.mint_more(Keypair().pubkey(), "classic", 0, wallet.pubkey, "1")
        )
        await wallet.reached.wait()
        task.cancel()
        gate.set()
        with pytest.raises(asyncio.CancelledError):
            await task
        for _ in range(100):
            if launchpad.history:
                break
            await asyncio.sleep(0)
        return launchpad

    launchpad = asyncio.run(run())

    assert len(launchpad.history) == 1


def test_describe_mint_decodes_account(ledger, wallet) -> None:
    mint, authority = Keypair().pubkey(), Keypair().pubkey()
    ledger.add_account(
        mint,
        MINT_LAYOUT.build(
            {
                "mint_authority_option": 1,
                "mint_authority": bytes(authority),
                "supply": 1_000_000,
                "decimals": 6,
                "is_initialized": True,
                "freeze_authority_option": 0,
                "freeze_authority": bytes(32),
            }
        )
        + bytes(152),
    )

    info = asyncio.run(_launchpad(ledger, wallet).describe_mint(str(mint)))

    assert info.supply == 1_000_000
    assert info.decimals == 6
    assert info.mint_authority == authority
    assert info.freeze_authority is None


def test_describe_mint_rejects_non_mint(ledger, wallet) -> None:
    address = Keypair().pubkey()
    ledger.add_account(address, bytes(MINT_SIZE - 1))

    with pytest.raises(ValidationError):
        asyncio.run(_launchpad(ledger, wallet).describe_mint(address))


@pytest.mark.parametrize(
    ("owner", "standard"),
    [
        (SystemAddresses.TOKEN_PROGRAM, TokenStandard.CLASSIC),
        (SystemAddresses.TOKEN_2022_PROGRAM, TokenStandard.EXTENDED),
    ],
)
def test_detect_standard_from_owner_program(ledger, wallet, owner, standard) -> None:
    mint = Keypair().pubkey()
    ledger.add_account(mint, bytes(MINT_SIZE), owner=owner)

    assert asyncio.run(_launchpad(ledger, wallet).detect_standard(str(mint))) == standard


def test_detect_standard_rejects_foreign_account(ledger, wallet) -> None:
    address = Keypair().pubkey()
    ledger.add_account(address, owner=SystemAddresses.SYSTEM_PROGRAM)

    with pytest.raises(ValidationError):
        asyncio.run(_launchpad(ledger, wallet).detect_standard(address))
