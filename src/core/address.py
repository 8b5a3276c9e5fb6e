"""
Parsing of user-supplied address strings.
"""

import base58
from solders.pubkey import Pubkey

from core.errors import InvalidAddressError

PUBKEY_LENGTH = 32


def decode_address(text: str) -> Pubkey:
    """Decode a base58 address entered by a user.

    Args:
        text: Address string, surrounding whitespace is ignored

    Returns:
        Decoded public key

    Raises:
        InvalidAddressError: If the text is not base58 or not 32 bytes long
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidAddressError(str(text), "address is empty")

    candidate = text.strip()
    try:
        raw = base58.b58decode(candidate)
    except ValueError as e:
        raise InvalidAddressError(candidate, f"not base58 ({e!s})") from e

    if len(raw) != PUBKEY_LENGTH:
        raise InvalidAddressError(
            candidate, f"decodes to {len(raw)} bytes, expected {PUBKEY_LENGTH}"
        )
    return Pubkey.from_bytes(raw)
