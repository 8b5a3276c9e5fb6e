"""
Conversion between human-entered token amounts and raw base units.
"""

from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext

from core.errors import ValidationError
from core.pubkeys import MAX_U64


def to_raw_amount(amount: str, decimals: int) -> int:
    """Scale a human amount to base units: floor(amount * 10**decimals).

    Digits below the smallest unit are truncated, never rounded up.

    Args:
        amount: Decimal string such as "1.5"
        decimals: Decimals of the mint

    Returns:
        Raw amount for a mint-to instruction

    Raises:
        ValidationError: If the amount is not a finite non-negative number
            or does not fit in a u64 once scaled
    """
    text = amount.strip() if isinstance(amount, str) else ""
    if not text:
        raise ValidationError("Amount is required")

    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"Amount {amount!r} is not a number") from None

    if not value.is_finite():
        raise ValidationError(f"Amount {amount!r} is not a finite number")
    if value < 0:
        raise ValidationError("Amount must not be negative")

    # u64 has 20 digits; anything larger is rejected before scaling
    if value.adjusted() + decimals > 20:
        raise ValidationError(f"Amount {amount!r} is too large for this token")

    # Enough precision to hold every input digit, so the shift itself is exact
    with localcontext() as ctx:
        ctx.prec = max(64, len(value.as_tuple().digits) + decimals)
        ctx.rounding = ROUND_FLOOR
        raw = int(value.scaleb(decimals).to_integral_value(rounding=ROUND_FLOOR))
    if raw > MAX_U64:
        raise ValidationError(f"Amount {amount!r} is too large for this token")
    return raw


def from_raw_amount(raw: int, decimals: int) -> str:
    """Format base units as a human amount without trailing zeros."""
    value = Decimal(raw).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
