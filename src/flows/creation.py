"""
Token creation flow: a new mint, its metadata and an optional initial supply
in one atomic batch.
"""

from solders.keypair import Keypair

from core.client import SolanaClient
from core.history import TransactionHistory
from core.rent import RentSizer
from flows.base import Flow, FlowResult, FlowState, FlowStatus
from interfaces.core import (
    RecordType,
    TokenMetadata,
    TokenSpec,
    TokenStandard,
    WalletAdapter,
)
from standards import get_standard_profile, parse_standard
from utils.amounts import to_raw_amount
from utils.logger import get_logger

logger = get_logger(__name__)


class TokenCreationFlow(Flow):
    """Creates a mint of a chosen standard and optionally mints to the creator."""

    operation = RecordType.CREATION

    def __init__(
        self,
        client: SolanaClient,
        wallet: WalletAdapter,
        history: TransactionHistory,
        rent_sizer: RentSizer | None = None,
        **kwargs,
    ):
        """Initialize creation flow.

        Args:
            client: Solana RPC client (ledger view)
            wallet: Wallet paying for the mint; becomes its authority
            history: Session history
            rent_sizer: Rent sizer, created if not given
            **kwargs: Composer, pipeline, priority fee and observer for Flow
        """
        super().__init__(client, wallet, history, **kwargs)
        self.rent_sizer = rent_sizer or RentSizer(client)

    async def run(
        self, spec: TokenSpec, standard: TokenStandard | str
    ) -> FlowResult:
        """Create a token.

        Args:
            spec: Token parameters
            standard: Token standard for the new mint

        Returns:
            FlowResult carrying the new mint address on success
        """
        status = self._emit(
            FlowStatus(operation=self.operation, amount=spec.initial_supply or "0")
        )

        try:
            status = self._emit(status.advance(FlowState.VALIDATING))
            standard = parse_standard(standard)
            spec.validate(standard)
            raw_supply = (
                to_raw_amount(spec.initial_supply, spec.decimals)
                if spec.has_initial_supply
                else 0
            )
            profile = get_standard_profile(standard)

            payer = self.wallet.pubkey
            # Only lives until the batch carries its signature
            mint_keypair = Keypair()
            mint = mint_keypair.pubkey()
            logger.info(f"Creating {standard.value} token {spec.symbol} at {mint}")

            status = self._emit(
                status.advance(FlowState.FUNDING, mint=mint, recipient=payer)
            )
            metadata = None
            if profile.embeds_metadata:
                metadata = TokenMetadata(
                    update_authority=payer,
                    mint=mint,
                    name=spec.name,
                    symbol=spec.symbol,
                    uri=spec.metadata_uri,
                )
            lamports = await self.rent_sizer.minimum_funding(
                RentSizer.account_size(standard, metadata)
            )

            status = self._emit(status.advance(FlowState.COMPOSING))
            operations = profile.build_mint_operations(
                payer,
                mint,
                payer,
                spec,
                RentSizer.allocated_space(standard),
                lamports,
            )
            if raw_supply > 0:
                operations.extend(
                    await self._recipient_operations(
                        mint, payer, raw_supply, standard, mint_exists=False
                    )
                )

            anchor = await self.client.get_latest_anchor()
            batch = self.composer.compose(operations, payer, anchor, self.priority_fee)
            self.composer.sign_with_ephemeral_key(batch, mint_keypair)
            del mint_keypair
        except Exception as e:
            return self._abort(status, e)

        return await self._submit(status, batch)
