"""
Entry point for the presentation layer: token creation, minting and the
session history.
"""

from solders.pubkey import Pubkey

from config import CONFIRMATION_POLL_INTERVAL, PRIORITY_FEE
from core.address import decode_address
from core.client import SolanaClient
from core.composer import TransactionComposer
from core.errors import ValidationError
from core.history import TransactionHistory
from core.layouts import MintInfo, decode_mint
from core.rent import RentSizer
from core.submission import SubmissionPipeline
from flows.base import FlowObserver, FlowResult
from flows.creation import TokenCreationFlow
from flows.minting import MintFlow
from interfaces.core import TokenSpec, TokenStandard, TransactionRecord, WalletAdapter
from standards import parse_standard, standard_for_program
from utils.logger import get_logger

logger = get_logger(__name__)


class TokenLaunchpad:
    """Creates tokens and mints supply for one wallet session.

    Every call runs its own flow, so several calls may run concurrently on one
    event loop. They share only the append-only history.
    """

    def __init__(
        self,
        client: SolanaClient,
        wallet: WalletAdapter,
        priority_fee: int = PRIORITY_FEE,
        poll_interval: float = CONFIRMATION_POLL_INTERVAL,
        on_update: FlowObserver | None = None,
    ):
        """Initialize the launchpad.

        Args:
            client: Solana RPC client (ledger view)
            wallet: Wallet paying for and authorizing every batch
            priority_fee: Compute unit price in microlamports, 0 for none
            poll_interval: Seconds between confirmation polls
            on_update: Observer receiving every flow status
        """
        self.client = client
        self.wallet = wallet
        self.priority_fee = priority_fee
        self.on_update = on_update

        self.composer = TransactionComposer()
        self.pipeline = SubmissionPipeline(client, poll_interval)
        self.rent_sizer = RentSizer(client)
        self._history = TransactionHistory()

        # Last created token, used as the default target of mint_more
        self._current_mint: Pubkey | None = None
        self._current_standard: TokenStandard | None = None
        self._current_decimals: int | None = None

    @property
    def history(self) -> tuple[TransactionRecord, ...]:
        """Completed transactions of this session, oldest first."""
        return self._history.records

    @property
    def current_mint(self) -> Pubkey | None:
        return self._current_mint

    def reset(self) -> None:
        """Forget the current mint. The history is kept."""
        self._current_mint = None
        self._current_standard = None
        self._current_decimals = None

    async def create_token(
        self, spec: TokenSpec, standard: TokenStandard | str
    ) -> FlowResult:
        """Create a token, minting the initial supply to the wallet if given.

        Args:
            spec: Token parameters
            standard: Token standard for the new mint

        Returns:
            FlowResult with the mint address on success
        """
        flow = TokenCreationFlow(
            self.client,
            self.wallet,
            self._history,
            rent_sizer=self.rent_sizer,
            composer=self.composer,
            pipeline=self.pipeline,
            priority_fee=self.priority_fee,
            on_update=self.on_update,
        )
        result = await flow.run(spec, standard)
        if result.success:
            self._current_mint = result.mint
            self._current_standard = parse_standard(standard)
            self._current_decimals = spec.decimals
            logger.info(f"Token created: {result.mint}")
        return result

    async def mint_more(
        self,
        mint: Pubkey | str | None = None,
        standard: TokenStandard | str | None = None,
        decimals: int | None = None,
        recipient: Pubkey | str | None = None,
        amount: str = "",
    ) -> FlowResult:
        """Mint additional supply of a standing mint.

        Mint, standard and decimals default to the token created last in this
        session; the recipient defaults to the wallet.

        Args:
            mint: Mint address
            standard: Token standard of the mint
            decimals: Decimals of the mint
            recipient: Wallet address receiving the tokens
            amount: Human amount to mint

        Returns:
            FlowResult with the signature on success
        """
        flow = MintFlow(
            self.client,
            self.wallet,
            self._history,
            composer=self.composer,
            pipeline=self.pipeline,
            priority_fee=self.priority_fee,
            on_update=self.on_update,
        )

        if mint is None:
            mint = self._current_mint
            standard = standard or self._current_standard
            decimals = self._current_decimals if decimals is None else decimals
        if recipient is None:
            recipient = self.wallet.pubkey

        return await flow.run(mint, standard, decimals, recipient, amount)

    async def describe_mint(self, mint: Pubkey | str) -> MintInfo:
        """Read a mint account from the ledger.

        Args:
            mint: Mint address

        Returns:
            Decoded base mint fields

        Raises:
            InvalidAddressError: If the address is malformed
            ValidationError: If no mint exists at the address
            NetworkError: If the lookup fails
        """
        address = mint if isinstance(mint, Pubkey) else decode_address(mint)
        account = await self.client.get_account_info(address)
        if account is None:
            raise ValidationError(f"No account found at {address}")
        try:
            return decode_mint(bytes(account.data))
        except ValueError as e:
            raise ValidationError(f"Account {address} is not a mint: {e}") from e

    async def detect_standard(self, mint: Pubkey | str) -> TokenStandard:
        """Tell the standard of a standing mint from its owner program.

        Raises:
            InvalidAddressError: If the address is malformed
            ValidationError: If no account exists at the address or it is not
                owned by a known token program
            NetworkError: If the lookup fails
        """
        address = mint if isinstance(mint, Pubkey) else decode_address(mint)
        account = await self.client.get_account_info(address)
        if account is None:
            raise ValidationError(f"No account found at {address}")
        standard = standard_for_program(account.owner)
        if standard is None:
            raise ValidationError(
                f"Account {address} is owned by {account.owner}, not a token program"
            )
        return standard

    async def close(self) -> None:
        await self.client.close()
