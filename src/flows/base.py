"""
State machine shared by the creation and mint flows.

A flow walks IDLE -> VALIDATING -> FUNDING -> COMPOSING ->
AWAITING_WALLET_SIGNATURE -> BROADCASTING -> CONFIRMING and ends in SUCCEEDED,
FAILED or EXPIRED. The state is an immutable FlowStatus: every step receives
one and returns a new one, and every transition is published to the observer.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from solders.pubkey import Pubkey
from solders.signature import Signature

from config import PRIORITY_FEE
from core.associated import AssociatedAccountResolver
from core.client import SolanaClient
from core.composer import TransactionComposer
from core.errors import (
    LaunchpadError,
    LedgerExecutionFailure,
    TransactionExpiredError,
)
from core.history import TransactionHistory
from core.submission import SubmissionPipeline
from interfaces.core import (
    AtomicBatch,
    Operation,
    OutcomeStatus,
    RecordType,
    TokenStandard,
    TransactionRecord,
    WalletAdapter,
)
from standards.common import create_associated_account_operation, mint_to_operation
from utils.logger import get_logger

logger = get_logger(__name__)


class FlowState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    FUNDING = "funding"
    COMPOSING = "composing"
    AWAITING_WALLET_SIGNATURE = "awaiting_wallet_signature"
    BROADCASTING = "broadcasting"
    CONFIRMING = "confirming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EXPIRED = "expired"  # anchor elapsed, the batch may or may not have landed


TERMINAL_STATES = frozenset({FlowState.SUCCEEDED, FlowState.FAILED, FlowState.EXPIRED})

STATUS_MESSAGES: dict[FlowState, str] = {
    FlowState.IDLE: "",
    FlowState.VALIDATING: "Validating input...",
    FlowState.FUNDING: "Calculating rent...",
    FlowState.COMPOSING: "Building transaction...",
    FlowState.AWAITING_WALLET_SIGNATURE: "Waiting for wallet approval...",
    FlowState.BROADCASTING: "Sending transaction...",
    FlowState.CONFIRMING: "Confirming transaction...",
    FlowState.SUCCEEDED: "Transaction confirmed",
    FlowState.FAILED: "Transaction failed",
    FlowState.EXPIRED: "Transaction expired before confirmation, check the ledger before retrying",
}


@dataclass(frozen=True)
class FlowStatus:
    """Observable state of one flow run."""

    operation: RecordType
    state: FlowState = FlowState.IDLE
    message: str = ""
    mint: Pubkey | None = None
    recipient: Pubkey | None = None
    amount: str | None = None
    signature: Signature | None = None
    error: Exception | None = None

    def advance(
        self, state: FlowState, message: str | None = None, **changes: Any
    ) -> "FlowStatus":
        """Return a copy moved to a new state.

        Args:
            state: Next state
            message: Status text, defaults to the standard text of the state
            **changes: Other fields to update

        Returns:
            New FlowStatus
        """
        if self.is_terminal:
            raise RuntimeError(f"Flow already ended in {self.state.value}")
        return replace(
            self,
            state=state,
            message=STATUS_MESSAGES[state] if message is None else message,
            **changes,
        )

    def fail(self, error: Exception) -> "FlowStatus":
        """Return a copy in the terminal state matching the error."""
        if isinstance(error, TransactionExpiredError):
            return self.advance(FlowState.EXPIRED, error=error)
        return self.advance(FlowState.FAILED, message=str(error), error=error)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


FlowObserver = Callable[[FlowStatus], None]


@dataclass
class FlowResult:
    """Final outcome of a flow run."""

    success: bool
    operation: RecordType
    state: FlowState
    mint: Pubkey | None = None
    recipient: Pubkey | None = None
    signature: Signature | None = None
    amount: str | None = None
    error: Exception | None = None
    error_message: str | None = None

    @classmethod
    def from_status(cls, status: FlowStatus) -> "FlowResult":
        return cls(
            success=status.state == FlowState.SUCCEEDED,
            operation=status.operation,
            state=status.state,
            mint=status.mint,
            recipient=status.recipient,
            signature=status.signature,
            amount=status.amount,
            error=status.error,
            error_message=str(status.error) if status.error is not None else None,
        )

    @property
    def expired(self) -> bool:
        """True if the outcome is unknown and the ledger must be re-checked."""
        return self.state == FlowState.EXPIRED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the flow result
        """
        return {
            "success": self.success,
            "operation": self.operation.value,
            "state": self.state.value,
            "mint": str(self.mint) if self.mint else None,
            "recipient": str(self.recipient) if self.recipient else None,
            "signature": str(self.signature) if self.signature else None,
            "amount": self.amount,
            "error_message": self.error_message,
        }


class Flow:
    """Base class holding the collaborators and the submission half of a flow."""

    operation: RecordType

    def __init__(
        self,
        client: SolanaClient,
        wallet: WalletAdapter,
        history: TransactionHistory,
        composer: TransactionComposer | None = None,
        pipeline: SubmissionPipeline | None = None,
        priority_fee: int = PRIORITY_FEE,
        on_update: FlowObserver | None = None,
    ):
        """Initialize flow.

        Args:
            client: Solana RPC client (ledger view)
            wallet: Wallet paying for and authorizing the batch
            history: Session history receiving the record on success
            composer: Transaction composer, created if not given
            pipeline: Submission pipeline, created if not given
            priority_fee: Compute unit price in microlamports, 0 for none
            on_update: Observer called with every new FlowStatus
        """
        self.client = client
        self.wallet = wallet
        self.history = history
        self.composer = composer or TransactionComposer()
        self.pipeline = pipeline or SubmissionPipeline(client)
        self.resolver = AssociatedAccountResolver(client)
        self.priority_fee = priority_fee
        self.on_update = on_update

    def _emit(self, status: FlowStatus) -> FlowStatus:
        """Publish a status to the log and the observer."""
        if status.state == FlowState.FAILED:
            logger.error(f"{status.operation.value} flow failed: {status.message}")
        elif status.state == FlowState.EXPIRED:
            logger.warning(f"{status.operation.value} flow expired: {status.error}")
        else:
            logger.info(f"{status.operation.value} flow -> {status.state.value}")

        if self.on_update is not None:
            try:
                self.on_update(status)
            except Exception:
                logger.exception("Flow observer raised")
        return status

    def _finish(self, status: FlowStatus) -> FlowResult:
        return FlowResult.from_status(self._emit(status))

    def _abort(self, status: FlowStatus, error: Exception) -> FlowResult:
        """End the flow with an error raised before or during submission."""
        if not isinstance(error, LaunchpadError):
            logger.exception(f"Unexpected error in {status.operation.value} flow")
        return self._finish(status.fail(error))

    async def _recipient_operations(
        self,
        mint: Pubkey,
        owner: Pubkey,
        raw_amount: int,
        standard: TokenStandard,
        mint_exists: bool = True,
    ) -> list[Operation]:
        """Operations crediting raw_amount to the owner's associated account.

        The create-associated-account operation is only included when the
        account does not exist yet; a mint created in the same batch cannot
        have one.

        Args:
            mint: Token mint
            owner: Wallet receiving the tokens
            raw_amount: Amount in base units
            standard: Token standard of the mint
            mint_exists: False when the mint is created in the same batch

        Returns:
            Ordered operations

        Raises:
            NetworkError: If the existence lookup fails
        """
        payer = self.wallet.pubkey
        destination = self.resolver.derive(owner, mint, standard)

        operations = []
        if not mint_exists or not await self.resolver.exists(destination):
            operations.append(
                create_associated_account_operation(payer, owner, mint, standard)
            )
        else:
            logger.info(f"Associated account {destination} already exists")

        operations.append(
            mint_to_operation(mint, destination, payer, raw_amount, standard)
        )
        return operations

    async def _submit(self, status: FlowStatus, batch: AtomicBatch) -> FlowResult:
        """Hand the batch to the wallet and wait for its outcome.

        From here on the flow is shielded: cancelling the caller no longer
        stops it, and it still resolves and records its outcome.
        """
        return await asyncio.shield(self._resolve(status, batch))

    async def _resolve(self, status: FlowStatus, batch: AtomicBatch) -> FlowResult:
        try:
            status = self._emit(status.advance(FlowState.AWAITING_WALLET_SIGNATURE))
            signature = await self.pipeline.submit(batch, self.wallet)
            status = self._emit(
                status.advance(FlowState.BROADCASTING, signature=signature)
            )
            status = self._emit(status.advance(FlowState.CONFIRMING))
            outcome = await self.pipeline.confirm(signature, batch.anchor)
        except Exception as e:
            return self._abort(status, e)

        if outcome.status == OutcomeStatus.EXPIRED:
            return self._finish(
                status.fail(TransactionExpiredError(outcome.reason, str(signature)))
            )
        if outcome.status == OutcomeStatus.FAILED:
            return self._finish(
                status.fail(LedgerExecutionFailure(outcome.reason, str(signature)))
            )

        self.history.append(
            TransactionRecord(
                signature=signature,
                operation_type=self.operation,
                amount=status.amount or "0",
                recipient=status.recipient or self.wallet.pubkey,
                mint=status.mint,
                timestamp=datetime.now(timezone.utc),
            )
        )
        return self._finish(status.advance(FlowState.SUCCEEDED))
