"""
Token standard registry.

Maps each TokenStandard to the token program that owns its mints and to the
builder producing its fixed creation sequence. Flows resolve the standard once
through get_standard_profile and never branch on it afterwards.
"""

from collections.abc import Callable
from dataclasses import dataclass

from solders.pubkey import Pubkey

from core.errors import ValidationError
from core.pubkeys import SystemAddresses
from interfaces.core import Operation, TokenSpec, TokenStandard
from standards import classic, extended

MintOperationsBuilder = Callable[
    [Pubkey, Pubkey, Pubkey, TokenSpec, int, int], list[Operation]
]


@dataclass(frozen=True)
class StandardProfile:
    """Everything that differs between the two token standards."""

    standard: TokenStandard
    token_program: Pubkey
    build_mint_operations: MintOperationsBuilder
    embeds_metadata: bool  # metadata lives inside the mint account


_PROFILES: dict[TokenStandard, StandardProfile] = {
    TokenStandard.CLASSIC: StandardProfile(
        standard=TokenStandard.CLASSIC,
        token_program=SystemAddresses.TOKEN_PROGRAM,
        build_mint_operations=classic.build_mint_operations,
        embeds_metadata=False,
    ),
    TokenStandard.EXTENDED: StandardProfile(
        standard=TokenStandard.EXTENDED,
        token_program=SystemAddresses.TOKEN_2022_PROGRAM,
        build_mint_operations=extended.build_mint_operations,
        embeds_metadata=True,
    ),
}


def get_standard_profile(standard: TokenStandard) -> StandardProfile:
    """Get the profile of a token standard.

    Args:
        standard: Token standard

    Returns:
        StandardProfile for the standard

    Raises:
        ValueError: If the standard is not registered
    """
    try:
        return _PROFILES[standard]
    except KeyError:
        raise ValueError(f"Unsupported token standard: {standard}") from None


def get_supported_standards() -> list[TokenStandard]:
    """Get list of supported token standards."""
    return list(_PROFILES.keys())


def standard_for_program(token_program: Pubkey) -> TokenStandard | None:
    """Get the standard whose mints are owned by the given token program."""
    for profile in _PROFILES.values():
        if profile.token_program == token_program:
            return profile.standard
    return None


def parse_standard(standard: TokenStandard | str) -> TokenStandard:
    """Accept a TokenStandard or its string value.

    Raises:
        ValidationError: If the value names no supported standard
    """
    if isinstance(standard, TokenStandard):
        return standard
    try:
        return TokenStandard(str(standard).strip().lower())
    except ValueError:
        supported = ", ".join(s.value for s in get_supported_standards())
        raise ValidationError(
            f"Unknown token standard {standard!r}, expected one of: {supported}"
        ) from None


__all__ = [
    "StandardProfile",
    "get_standard_profile",
    "get_supported_standards",
    "parse_standard",
    "standard_for_program",
]
