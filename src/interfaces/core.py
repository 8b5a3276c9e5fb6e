"""
Core data model and interfaces for token creation and minting.

This module defines the value types that flow between the builders, the
composer and the submission pipeline, plus the abstract wallet boundary that
the presentation layer must provide.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple

from solders.hash import Hash
from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from config import MAX_DECIMALS
from core.errors import ValidationError

# Metaplex token metadata limits (bytes)
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200


class TokenStandard(Enum):
    """Supported token standards. A mint is created as exactly one of them."""
    CLASSIC = "classic"  # SPL Token program + Metaplex metadata account
    EXTENDED = "extended"  # Token-2022 with metadata pointer + token metadata


class OperationKind(Enum):
    """Kinds of ledger operations the builders produce."""
    CREATE_ACCOUNT = "create_account"
    INITIALIZE_MINT_CLASSIC = "initialize_mint_classic"
    CREATE_METADATA_ACCOUNT_CLASSIC = "create_metadata_account_classic"
    INITIALIZE_METADATA_POINTER = "initialize_metadata_pointer"
    INITIALIZE_MINT_EXTENDED = "initialize_mint_extended"
    INITIALIZE_METADATA_EXTENDED = "initialize_metadata_extended"
    CREATE_ASSOCIATED_ACCOUNT = "create_associated_account"
    MINT_TO = "mint_to"
    SET_COMPUTE_UNIT_PRICE = "set_compute_unit_price"


class AccountState(Enum):
    """Preparation stages an account goes through inside one batch."""
    ALLOCATED = "allocated"
    CONFIGURED = "configured"  # extensions laid out, mint not yet initialized
    INITIALIZED = "initialized"


class AccountStage(NamedTuple):
    """An account in a given preparation stage."""
    address: Pubkey
    state: AccountState


class RecordType(Enum):
    """Kind of completed transaction kept in the session history."""
    CREATION = "creation"
    MINT = "mint"


class OutcomeStatus(Enum):
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    FAILED = "failed"


@dataclass(frozen=True)
class TokenSpec:
    """User input for a token creation."""
    name: str
    symbol: str
    metadata_uri: str
    decimals: int
    initial_supply: str | None = None

    def validate(self, standard: TokenStandard) -> None:
        """Check the fields locally.

        Args:
            standard: Standard the token will be created with

        Raises:
            ValidationError: On the first invalid field
        """
        if not self.name or not self.name.strip():
            raise ValidationError("Token name is required")
        if not self.symbol or not self.symbol.strip():
            raise ValidationError("Token symbol is required")
        if (
            isinstance(self.decimals, bool)
            or not isinstance(self.decimals, int)
            or not 0 <= self.decimals <= MAX_DECIMALS
        ):
            raise ValidationError(
                f"Decimals must be an integer between 0 and {MAX_DECIMALS}"
            )

        if standard == TokenStandard.CLASSIC:
            limits = (
                ("name", self.name, MAX_NAME_LENGTH),
                ("symbol", self.symbol, MAX_SYMBOL_LENGTH),
                ("metadata uri", self.metadata_uri, MAX_URI_LENGTH),
            )
            for label, value, limit in limits:
                if len(value.encode("utf-8")) > limit:
                    raise ValidationError(
                        f"Token {label} exceeds {limit} bytes for the classic standard"
                    )

    @property
    def has_initial_supply(self) -> bool:
        return bool(self.initial_supply and self.initial_supply.strip())


@dataclass(frozen=True)
class TokenMetadata:
    """Token-2022 metadata payload stored inside the mint account."""
    update_authority: Pubkey
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    additional_metadata: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Operation:
    """One instruction plus the account stages it produces and consumes."""
    kind: OperationKind
    instruction: Instruction
    provides: frozenset[AccountStage] = frozenset()
    requires: frozenset[AccountStage] = frozenset()


@dataclass(frozen=True)
class LedgerAnchor:
    """Recent blockhash and the block height after which it is rejected."""
    blockhash: Hash
    last_valid_block_height: int


@dataclass
class AtomicBatch:
    """Ordered operations executed all-or-nothing by the ledger."""
    operations: tuple[Operation, ...]
    fee_payer: Pubkey
    anchor: LedgerAnchor
    transaction: Transaction
    signers: list[Pubkey] = field(default_factory=list)

    @property
    def kinds(self) -> list[OperationKind]:
        return [operation.kind for operation in self.operations]


@dataclass(frozen=True)
class Outcome:
    """Result of waiting for a submitted batch."""
    status: OutcomeStatus
    reason: str | None = None

    @classmethod
    def confirmed(cls) -> "Outcome":
        return cls(OutcomeStatus.CONFIRMED)

    @classmethod
    def expired(cls, reason: str) -> "Outcome":
        return cls(OutcomeStatus.EXPIRED, reason)

    @classmethod
    def failed(cls, reason: str) -> "Outcome":
        return cls(OutcomeStatus.FAILED, reason)


@dataclass(frozen=True)
class TransactionRecord:
    """Completed transaction kept in the session history."""
    signature: Signature
    operation_type: RecordType
    amount: str
    recipient: Pubkey
    mint: Pubkey
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the record
        """
        return {
            "signature": str(self.signature),
            "operation_type": self.operation_type.value,
            "amount": self.amount,
            "recipient": str(self.recipient),
            "mint": str(self.mint),
            "timestamp": self.timestamp.isoformat(),
        }


class WalletAdapter(ABC):
    """Abstract interface for the wallet that pays for and authorizes batches."""

    @property
    @abstractmethod
    def pubkey(self) -> Pubkey:
        """Get the wallet public key (fee payer and token authority)."""
        pass

    @abstractmethod
    async def sign_and_send(self, batch: AtomicBatch) -> Signature:
        """Add the wallet signature to the batch and broadcast it.

        May suspend indefinitely while the user approves the request.

        Args:
            batch: Composed batch, already co-signed by any ephemeral keys

        Returns:
            Signature of the broadcast transaction
        """
        pass
