from __future__ import annotations

import binascii

from .errors import HexDecodeError, HexLengthError


def hex_encode(data: bytes) -> str:
    return data.hex()


def hex_decode(text: str) -> bytes:
    """Strict inverse of hex_encode: even length, hex digits only, no separators."""
    if len(text) % 2 != 0:
        raise HexLengthError(f"hex payload has odd length ({len(text)})")
    try:
        return binascii.unhexlify(text.encode("ascii"))
    except (UnicodeEncodeError, binascii.Error) as e:
        raise HexDecodeError(f"hex payload is not valid hexadecimal: {e}") from e
