"""
Assembly of ordered operations into one signed-later atomic transaction.
"""

from collections.abc import Sequence

from solders.compute_budget import set_compute_unit_price
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from core.errors import DependencyOrderViolation
from interfaces.core import (
    AccountStage,
    AtomicBatch,
    LedgerAnchor,
    Operation,
    OperationKind,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class TransactionComposer:
    """Orders operations into an AtomicBatch and applies ephemeral signatures."""

    def compose(
        self,
        operations: Sequence[Operation],
        fee_payer: Pubkey,
        anchor: LedgerAnchor,
        priority_fee: int | None = None,
    ) -> AtomicBatch:
        """Build an unsigned batch from ordered operations.

        Args:
            operations: Operations in execution order
            fee_payer: Account paying the transaction fee
            anchor: Fresh blockhash and its validity ceiling
            priority_fee: Optional compute unit price in microlamports

        Returns:
            AtomicBatch with an unsigned transaction

        Raises:
            ValueError: If there are no operations
            DependencyOrderViolation: If an operation precedes one it depends on
        """
        if not operations:
            raise ValueError("Cannot compose a batch without operations")

        self.validate_order(operations)

        ordered = list(operations)
        if priority_fee:
            ordered.insert(
                0,
                Operation(
                    kind=OperationKind.SET_COMPUTE_UNIT_PRICE,
                    instruction=set_compute_unit_price(priority_fee),
                ),
            )

        message = Message.new_with_blockhash(
            [operation.instruction for operation in ordered],
            fee_payer,
            anchor.blockhash,
        )
        batch = AtomicBatch(
            operations=tuple(ordered),
            fee_payer=fee_payer,
            anchor=anchor,
            transaction=Transaction.new_unsigned(message),
        )
        logger.info(
            f"Composed batch of {len(ordered)} operations: "
            f"{', '.join(kind.value for kind in batch.kinds)}"
        )
        return batch

    @staticmethod
    def validate_order(operations: Sequence[Operation]) -> None:
        """Check that no operation needs an account the batch only sets up later.

        A requirement is matched against the first operation providing that
        exact stage. When no operation provides the stage, it is matched
        against the first operation providing any stage of the same address,
        so a batch that creates an account after using it is rejected too.
        An address the batch never provides is assumed to exist on the ledger.

        Raises:
            DependencyOrderViolation: On the first out-of-order requirement
        """
        providers: dict[AccountStage, int] = {}
        first_touch: dict[Pubkey, int] = {}
        for index, operation in enumerate(operations):
            for stage in operation.provides:
                providers.setdefault(stage, index)
                first_touch.setdefault(stage.address, index)

        for index, operation in enumerate(operations):
            for stage in operation.requires:
                provider = providers.get(stage, first_touch.get(stage.address))
                if provider is not None and provider >= index:
                    raise DependencyOrderViolation(
                        f"{operation.kind.value} at position {index} needs "
                        f"{stage.address} {stage.state.value}, but "
                        f"{operations[provider].kind.value} only sets it up "
                        f"at position {provider}"
                    )

    @staticmethod
    def sign_with_ephemeral_key(batch: AtomicBatch, keypair: Keypair) -> AtomicBatch:
        """Co-sign the batch with a locally generated key.

        Used for brand-new accounts, which must sign their own creation.
        The wallet signature is added later by the wallet itself.

        Args:
            batch: Composed batch
            keypair: Keypair of the account being created

        Returns:
            The same batch, partially signed
        """
        batch.transaction.partial_sign([keypair], batch.anchor.blockhash)
        batch.signers.append(keypair.pubkey())
        return batch
