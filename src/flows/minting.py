"""
Mint flow: additional supply of a standing mint to any recipient.
"""

from dataclasses import replace

from solders.pubkey import Pubkey

from config import MAX_DECIMALS
from core.address import decode_address
from core.errors import ValidationError
from flows.base import Flow, FlowResult, FlowState, FlowStatus
from interfaces.core import RecordType, TokenStandard
from standards import parse_standard
from utils.amounts import to_raw_amount
from utils.logger import get_logger

logger = get_logger(__name__)


def _as_pubkey(value: Pubkey | str | None, label: str) -> Pubkey:
    if value is None:
        raise ValidationError(f"No {label} address given")
    if isinstance(value, Pubkey):
        return value
    return decode_address(value)


class MintFlow(Flow):
    """Mints to the recipient's associated account, creating it if missing."""

    operation = RecordType.MINT

    async def run(
        self,
        mint: Pubkey | str | None,
        standard: TokenStandard | str | None,
        decimals: int | None,
        recipient: Pubkey | str | None,
        amount: str,
    ) -> FlowResult:
        """Mint additional tokens.

        Addresses and the amount are checked before anything touches the
        network.

        Args:
            mint: Mint address, the wallet must be its mint authority
            standard: Token standard the mint was created with
            decimals: Decimals of the mint
            recipient: Wallet address receiving the tokens
            amount: Human amount, scaled by 10**decimals and floored

        Returns:
            FlowResult carrying the signature on success
        """
        status = self._emit(FlowStatus(operation=self.operation, amount=amount))

        try:
            status = self._emit(status.advance(FlowState.VALIDATING))
            mint_address = _as_pubkey(mint, "mint")
            recipient_address = _as_pubkey(recipient, "recipient")
            if standard is None:
                raise ValidationError("No token standard given")
            standard = parse_standard(standard)
            status = replace(status, mint=mint_address, recipient=recipient_address)

            if (
                isinstance(decimals, bool)
                or not isinstance(decimals, int)
                or not 0 <= decimals <= MAX_DECIMALS
            ):
                raise ValidationError(
                    f"Decimals must be an integer between 0 and {MAX_DECIMALS}"
                )
            raw_amount = to_raw_amount(amount, decimals)
            if raw_amount == 0:
                raise ValidationError("Amount must be greater than zero")

            status = self._emit(
                status.advance(
                    FlowState.FUNDING, message="Checking recipient account..."
                )
            )
            operations = await self._recipient_operations(
                mint_address, recipient_address, raw_amount, standard
            )

            status = self._emit(status.advance(FlowState.COMPOSING))
            anchor = await self.client.get_latest_anchor()
            batch = self.composer.compose(
                operations, self.wallet.pubkey, anchor, self.priority_fee
            )
        except Exception as e:
            return self._abort(status, e)

        logger.info(
            f"Minting {amount} ({raw_amount} base units) of {mint_address} "
            f"to {recipient_address}"
        )
        return await self._submit(status, batch)

