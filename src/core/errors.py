"""
Error taxonomy for token creation and minting.

Every failure a flow can end with is one of these; flows turn them into a
failed FlowResult instead of letting them escape to the presentation layer.
"""


class LaunchpadError(Exception):
    """Base class for all launchpad errors."""


class ValidationError(LaunchpadError):
    """Bad or missing input, detected locally before any network call."""


class InvalidAddressError(LaunchpadError):
    """An address string is not a valid 32-byte base58 public key."""

    def __init__(self, text: str, reason: str = "not a valid Solana address"):
        self.text = text
        super().__init__(f"Invalid address {text!r}: {reason}")


class NetworkError(LaunchpadError):
    """Lookup or broadcast failed at the transport level."""


class DependencyOrderViolation(LaunchpadError):
    """An operation uses an account before the operation that prepares it."""


class TransactionExpiredError(LaunchpadError):
    """The batch anchor elapsed before the signature was seen as committed.

    The transaction may or may not have landed; callers must re-query the
    ledger instead of assuming failure.
    """

    def __init__(self, message: str, signature: str | None = None):
        self.signature = signature
        super().__init__(message)


class LedgerExecutionFailure(LaunchpadError):
    """The ledger rejected or failed to execute the batch."""

    def __init__(self, message: str, signature: str | None = None):
        self.signature = signature
        super().__init__(message)
